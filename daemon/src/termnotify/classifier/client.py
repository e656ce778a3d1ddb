"""Classifier client: asks an LLM whether a terminal needs attention."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import aiohttp

from termnotify.classifier.prompt import build_prompt, find_sensitive_markers
from termnotify.classifier.providers import get_provider_spec
from termnotify.config import ClassifierConfig
from termnotify.errors import (
    ClassifierAuthError,
    ClassifierHttpError,
    ClassifierProtocolError,
    ClassifierTimeoutError,
    ClassifierTransportError,
    ClassifierUnreachableError,
    ConfigurationError,
)

logger = logging.getLogger(__name__)

AlertCallback = Callable[[str], Awaitable[None]]

AFFIRMATIVE_REPLIES = frozenset({"YES", "Y"})


def parse_verdict(reply: str) -> bool:
    """Map a judge reply to a verdict.

    Only an exact ``YES`` or ``Y`` (case-insensitive, surrounding
    whitespace ignored) counts; verbose replies are rejected.
    """
    return reply.strip().upper() in AFFIRMATIVE_REPLIES


class ClassifierClient:
    """Turns a content excerpt into a notify/don't-notify verdict.

    Holds no session state. Every failure inside ``decide`` collapses to
    a False verdict; authentication failures and unreachable endpoints are
    additionally reported through ``alert`` because they point at a
    persistent misconfiguration.

    Usage:
        async with ClassifierClient(alert=window_error) as client:
            notify = await client.decide(excerpt, "build", config)
    """

    REQUEST_TIMEOUT = 30.0  # seconds

    def __init__(
        self,
        http_session: Optional[aiohttp.ClientSession] = None,
        alert: Optional[AlertCallback] = None,
        request_timeout: float = REQUEST_TIMEOUT,
    ):
        """Initialize client.

        Args:
            http_session: Optional aiohttp session (for testing).
            alert: Async callback for user-visible failure messages.
            request_timeout: Total request timeout in seconds.
        """
        self._session = http_session
        self._owns_session = http_session is None
        self._alert = alert
        self._timeout = request_timeout

    async def __aenter__(self):
        """Enter async context, creating session if needed."""
        self._get_session()
        return self

    async def __aexit__(self, *args):
        """Exit async context, closing owned session."""
        await self.close()

    def set_alert(self, alert: Optional[AlertCallback]) -> None:
        """Set or replace the user-visible alert callback."""
        self._alert = alert

    async def decide(
        self,
        content: str,
        session_label: str,
        config: ClassifierConfig,
    ) -> bool:
        """Ask the configured judge whether to notify.

        Args:
            content: Terminal excerpt.
            session_label: Display name of the session.
            config: Endpoint, credential, provider and model.

        Returns:
            True only if the judge replied YES. Never raises for
            configuration, transport or protocol failures.
        """
        if not config.is_configured:
            logger.warning("Classifier not configured: endpoint or api_key missing")
            return False

        try:
            reply = await self.fetch_reply(content, session_label, config)
        except ConfigurationError as e:
            logger.error("Classifier configuration error: %s", e)
            return False
        except ClassifierAuthError as e:
            logger.error("Classifier authentication failed: %s", e)
            await self._report(
                f"Terminal Notifier: classifier rejected the API key "
                f"(HTTP {e.status}). Check your apiKey setting."
            )
            return False
        except ClassifierUnreachableError as e:
            logger.error("Classifier endpoint unreachable: %s", e)
            await self._report(
                f"Terminal Notifier: cannot reach classifier endpoint "
                f"{config.endpoint}"
            )
            return False
        except ClassifierTransportError as e:
            logger.warning("Classifier request failed: %s", e)
            return False
        except ClassifierProtocolError as e:
            logger.error(
                "Unexpected classifier response (provider=%s): %s",
                config.provider,
                e,
            )
            return False

        verdict = parse_verdict(reply)
        logger.debug(
            "Classifier verdict for %s: %s (reply=%r)",
            session_label,
            verdict,
            reply[:40],
        )
        return verdict

    async def fetch_reply(
        self,
        content: str,
        session_label: str,
        config: ClassifierConfig,
    ) -> str:
        """Send one judgment request and return the raw reply text.

        Raises:
            ConfigurationError: Unknown provider or missing endpoint.
            ClassifierTransportError: Auth, HTTP, connection or timeout failure.
            ClassifierProtocolError: Reply missing from the response body.
        """
        spec = get_provider_spec(config.provider)

        markers = find_sensitive_markers(content)
        if markers:
            logger.warning(
                "Content from %s may contain sensitive data (%s); sending anyway",
                session_label,
                ", ".join(markers),
            )

        prompt = build_prompt(content, session_label)
        request = spec.build_request(prompt, config, spec)
        data = await self._post_json(request.url, request.headers, request.payload)
        return spec.extract_reply(data)

    async def _post_json(
        self, url: str, headers: dict[str, str], payload: dict[str, Any]
    ) -> Any:
        """POST a JSON payload and decode the JSON response."""
        session = self._get_session()
        try:
            async with session.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json", **headers},
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                if resp.status in (401, 403):
                    raise ClassifierAuthError(resp.status)
                if resp.status < 200 or resp.status >= 300:
                    text = await resp.text()
                    raise ClassifierHttpError(
                        resp.status,
                        f"Classifier returned HTTP {resp.status}: {text[:100]}",
                    )
                try:
                    return await resp.json(content_type=None)
                except ValueError as e:
                    raise ClassifierProtocolError(
                        f"Response is not valid JSON: {e}"
                    ) from e
        except asyncio.TimeoutError as e:
            raise ClassifierTimeoutError(
                f"No response within {self._timeout:.0f}s"
            ) from e
        except aiohttp.ClientConnectorError as e:
            raise ClassifierUnreachableError(str(e)) from e
        except aiohttp.ClientError as e:
            raise ClassifierTransportError(str(e)) from e
        except ValueError as e:
            # aiohttp rejects control characters in headers or the URL
            raise ConfigurationError(f"Invalid classifier request: {e}") from e

    async def _report(self, message: str) -> None:
        if self._alert is None:
            return
        try:
            await self._alert(message)
        except Exception as e:
            logger.error("Failed to show classifier alert: %s", e)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if owned."""
        if self._owns_session and self._session:
            await self._session.close()
            self._session = None
