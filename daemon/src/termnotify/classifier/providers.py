"""Request and reply shapes for each classifier provider.

Each provider is one ``Provider`` member plus a ``ProviderSpec`` holding
its two functions: one that builds the HTTP request and one that pulls
the reply text out of the decoded JSON body. Adding a provider means
adding a member and its spec to ``PROVIDERS``; the client never branches
on the provider itself.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, NamedTuple, Optional

from termnotify.classifier.prompt import SYSTEM_MESSAGE
from termnotify.config import ClassifierConfig
from termnotify.errors import ClassifierProtocolError, ConfigurationError


class Provider(Enum):
    """Supported classifier protocols."""

    OPENAI = "openai"
    CLAUDE = "claude"
    CUSTOM = "custom"


class ProviderRequest(NamedTuple):
    """An outbound classifier request."""

    url: str
    headers: dict[str, str]
    payload: dict[str, Any]


@dataclass(frozen=True)
class ProviderSpec:
    """Protocol definition for one provider."""

    provider: Provider
    default_endpoint: Optional[str]
    default_model: Optional[str]
    build_request: Callable[[str, ClassifierConfig, "ProviderSpec"], ProviderRequest]
    extract_reply: Callable[[Any], str]

    def endpoint_for(self, config: ClassifierConfig) -> str:
        """Configured endpoint, falling back to the provider default."""
        endpoint = config.endpoint or self.default_endpoint
        if not endpoint:
            raise ConfigurationError(
                f"Provider '{self.provider.value}' requires an endpoint"
            )
        return endpoint

    def model_for(self, config: ClassifierConfig) -> Optional[str]:
        """``model_name`` override, else the provider default."""
        return config.model_name or self.default_model


def _bearer_auth(api_key: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key}"}


def _field(data: Any, key: Any, what: str) -> Any:
    """Index into decoded JSON, raising a protocol error on contract drift."""
    try:
        return data[key]
    except (KeyError, IndexError, TypeError):
        raise ClassifierProtocolError(f"Response missing {what}") from None


def _require_text(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ClassifierProtocolError(
            f"Expected string {what}, got {type(value).__name__}"
        )
    if not value.strip():
        raise ClassifierProtocolError(f"Empty {what}")
    return value


# ============================================================================
# OpenAI-style chat completion
# ============================================================================


def _openai_request(
    prompt: str, config: ClassifierConfig, spec: ProviderSpec
) -> ProviderRequest:
    return ProviderRequest(
        url=spec.endpoint_for(config),
        headers=_bearer_auth(config.api_key),
        payload={
            "model": spec.model_for(config),
            "messages": [
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": 10,
            "temperature": 0.3,
        },
    )


def _openai_reply(data: Any) -> str:
    choices = _field(data, "choices", "'choices'")
    first = _field(choices, 0, "'choices[0]'")
    message = _field(first, "message", "'choices[0].message'")
    content = _field(message, "content", "'choices[0].message.content'")
    return _require_text(content, "choices[0].message.content")


# ============================================================================
# Claude-style message completion
# ============================================================================


ANTHROPIC_VERSION = "2023-06-01"


def _claude_request(
    prompt: str, config: ClassifierConfig, spec: ProviderSpec
) -> ProviderRequest:
    return ProviderRequest(
        url=spec.endpoint_for(config),
        headers={
            "x-api-key": config.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        },
        payload={
            "model": spec.model_for(config),
            "max_tokens": 10,
            "messages": [{"role": "user", "content": prompt}],
        },
    )


def _claude_reply(data: Any) -> str:
    blocks = _field(data, "content", "'content'")
    first = _field(blocks, 0, "'content[0]'")
    text = _field(first, "text", "'content[0].text'")
    return _require_text(text, "content[0].text")


# ============================================================================
# Custom minimal contract: {prompt} -> {response | text}
# ============================================================================


def _custom_request(
    prompt: str, config: ClassifierConfig, spec: ProviderSpec
) -> ProviderRequest:
    return ProviderRequest(
        url=spec.endpoint_for(config),
        headers=_bearer_auth(config.api_key),
        payload={"prompt": prompt},
    )


def _custom_reply(data: Any) -> str:
    if not isinstance(data, dict):
        raise ClassifierProtocolError(
            f"Expected JSON object, got {type(data).__name__}"
        )
    for key in ("response", "text"):
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value
    raise ClassifierProtocolError("Response has no string 'response' or 'text' field")


PROVIDERS: dict[Provider, ProviderSpec] = {
    Provider.OPENAI: ProviderSpec(
        provider=Provider.OPENAI,
        default_endpoint="https://api.openai.com/v1/chat/completions",
        default_model="gpt-3.5-turbo",
        build_request=_openai_request,
        extract_reply=_openai_reply,
    ),
    Provider.CLAUDE: ProviderSpec(
        provider=Provider.CLAUDE,
        default_endpoint="https://api.anthropic.com/v1/messages",
        default_model="claude-3-haiku-20240307",
        build_request=_claude_request,
        extract_reply=_claude_reply,
    ),
    Provider.CUSTOM: ProviderSpec(
        provider=Provider.CUSTOM,
        default_endpoint=None,
        default_model=None,
        build_request=_custom_request,
        extract_reply=_custom_reply,
    ),
}


def get_provider_spec(name: str) -> ProviderSpec:
    """Resolve a configured provider name.

    Raises:
        ConfigurationError: If the name is not a known provider.
    """
    try:
        provider = Provider(name)
    except ValueError:
        raise ConfigurationError(f"Unknown API provider: {name}") from None
    return PROVIDERS[provider]


def build_request(prompt: str, config: ClassifierConfig) -> ProviderRequest:
    """Build the provider-specific request for a prompt."""
    spec = get_provider_spec(config.provider)
    return spec.build_request(prompt, config, spec)
