"""
Utilities for sanitizing and converting bytes to displayable strings.
"""

import unicodedata

# undecodable bytes come back from surrogateescape as U+DC80..U+DCFF
_SURROGATE_LO = 0xDC80
_SURROGATE_HI = 0xDCFF


def _escape_char(c: str) -> str:
    """Return a printable form of a single decoded character."""
    code = ord(c)
    if _SURROGATE_LO <= code <= _SURROGATE_HI:
        return f"\\x{code - 0xDC00:02x}"
    if c in ('"', "\\"):
        return "\\" + c
    # control category codes vary: Cc, Cf, Cn etc.
    # so check via first character; Zl/Zp would break the one-token-per-line dump
    category = unicodedata.category(c)
    if category[0] == "C" or category in ("Zl", "Zp"):
        return f"\\u{code:04x}"
    return c


def render_bytes(b: bytes) -> str:
    """
    Decode bytes as UTF-8 and escape anything that is not printable.

    Bytes that are not part of a valid UTF-8 sequence are shown as ``\\xNN``
    so that partial multi-byte tokens stay distinguishable in the vocab dump.
    """
    return "".join(_escape_char(c) for c in b.decode("utf-8", errors="surrogateescape"))


def quote_bytes(b: bytes) -> str:
    """Render bytes between double quotes."""
    return f'"{render_bytes(b)}"'
