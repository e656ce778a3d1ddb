"""Judgment prompt and sensitive-content scan."""

import re

SYSTEM_MESSAGE = "You are a helpful assistant that analyzes terminal output."

PROMPT_TEMPLATE = """You are a terminal activity monitor. Analyze the following terminal output and determine if the user needs to be notified.

Terminal Name: {label}

Terminal Content (last output):
{content}

Determine if any of these conditions are met:
1. A long-running task has completed (e.g., build finished, tests completed, deployment done)
2. An error occurred that requires user attention
3. The terminal is waiting for user input
4. A significant process has ended or requires action

Respond with ONLY "YES" if notification is needed, or "NO" if not needed.
Do not provide any additional explanation."""

# ============================================================================
# Sensitive Data Markers
# ============================================================================

SENSITIVE_PATTERNS = [
    ("api key", r"(?i)api[_\- ]?key"),
    ("secret", r"(?i)secret"),
    ("token", r"(?i)\btoken\b|access[_\-]?token|auth[_\-]?token"),
    ("password", r"(?i)passw(or)?d|\bpwd\b"),
    ("authorization", r"(?i)authorization:|\bbearer\s+\S+"),
    ("private key", r"-----BEGIN [A-Z ]*PRIVATE KEY-----"),
]

_COMPILED_SENSITIVE = [(name, re.compile(p)) for name, p in SENSITIVE_PATTERNS]


def build_prompt(content: str, label: str) -> str:
    """Build the YES/NO judgment prompt for a content excerpt."""
    return PROMPT_TEMPLATE.format(label=label, content=content)


def find_sensitive_markers(content: str) -> list[str]:
    """Return names of sensitive-data markers present in content.

    Advisory only: callers log the result, the content is not redacted.
    """
    return [name for name, regex in _COMPILED_SENSITIVE if regex.search(content)]
