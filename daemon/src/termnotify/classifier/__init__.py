"""LLM classifier deciding whether terminal output warrants a notification."""

from .client import ClassifierClient, parse_verdict
from .prompt import build_prompt, find_sensitive_markers, SENSITIVE_PATTERNS
from .providers import (
    PROVIDERS,
    Provider,
    ProviderRequest,
    ProviderSpec,
    build_request,
    get_provider_spec,
)

__all__ = [
    "ClassifierClient",
    "parse_verdict",
    "build_prompt",
    "find_sensitive_markers",
    "SENSITIVE_PATTERNS",
    "PROVIDERS",
    "Provider",
    "ProviderRequest",
    "ProviderSpec",
    "build_request",
    "get_provider_spec",
]
