"""Sanitization of user-supplied text before it is placed in a document."""

import re
from typing import Optional
from xml.sax.saxutils import escape

# Control characters other than tab/newline break PDF text runs
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

MAX_CELL_LENGTH = 60


def sanitize_for_pdf(value: Optional[str], max_length: Optional[int] = None) -> str:
    """Make a string safe for reportlab Paragraph markup.

    Strips control characters, escapes XML markup characters
    (&, <, >) and optionally truncates with an ellipsis.

    Args:
        value: String value to sanitize, or None.
        max_length: Optional maximum length before escaping.

    Returns:
        Sanitized string ("" for None).
    """
    if not value:
        return ""

    cleaned = _CONTROL_CHARS.sub("", value)
    if max_length is not None and len(cleaned) > max_length:
        cleaned = cleaned[: max_length - 1] + "…"
    return escape(cleaned)


def truncate(value: Optional[str], max_length: int = MAX_CELL_LENGTH) -> str:
    """Strip control characters and truncate for plain table cells."""
    if not value:
        return ""
    cleaned = _CONTROL_CHARS.sub("", value)
    if len(cleaned) > max_length:
        return cleaned[: max_length - 1] + "…"
    return cleaned
