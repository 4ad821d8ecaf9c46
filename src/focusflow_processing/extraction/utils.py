"""Content cleaning utilities."""

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(text: str | None) -> str:
    """Collapse every whitespace run (including newlines) to one space and trim."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def clean_text(text: str | None) -> str:
    """Clean and normalize extracted text while keeping line structure.

    - Normalizes Unicode (NFC)
    - Removes control characters except newlines and tabs
    - Removes trailing whitespace from lines and repeated spaces

    Args:
        text: Raw extracted text

    Returns:
        Cleaned text
    """
    if not text:
        return ""

    text = unicodedata.normalize("NFC", text)

    # Remove control characters except newlines and tabs
    text = "".join(char for char in text if unicodedata.category(char) != "Cc" or char in "\n\t")

    text = text.replace("\t", " ")
    lines = [re.sub(r" +", " ", line).rstrip() for line in text.split("\n")]
    return "\n".join(lines).strip()
