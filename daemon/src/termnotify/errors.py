"""Base exceptions for termnotify."""


class TermNotifyError(Exception):
    """Base exception for all termnotify errors."""

    pass


class ConfigurationError(TermNotifyError):
    """Invalid classifier configuration (e.g. unknown provider)."""

    pass


class ClassifierError(TermNotifyError):
    """Classifier call failed."""

    pass


class ClassifierTransportError(ClassifierError):
    """Request did not produce a usable HTTP response."""

    pass


class ClassifierAuthError(ClassifierTransportError):
    """Classifier rejected the credential (HTTP 401/403)."""

    def __init__(self, status: int, message: str = ""):
        self.status = status
        super().__init__(message or f"Authentication failed (HTTP {status})")


class ClassifierHttpError(ClassifierTransportError):
    """Classifier returned a non-success status."""

    def __init__(self, status: int, message: str = ""):
        self.status = status
        super().__init__(message or f"Classifier returned HTTP {status}")


class ClassifierUnreachableError(ClassifierTransportError):
    """Endpoint could not be reached (DNS, connection refused)."""

    pass


class ClassifierTimeoutError(ClassifierTransportError):
    """Request exceeded the transport timeout."""

    pass


class ClassifierProtocolError(ClassifierError):
    """Response payload did not match the provider contract."""

    pass
