"""Cheap content fingerprint for change detection (not for security)."""


def fingerprint(text: str) -> int:
    """32-bit polynomial rolling hash (``h = h * 31 + ord(c)``), signed."""
    h = 0
    for ch in text:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h
