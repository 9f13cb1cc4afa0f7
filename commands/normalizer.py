"""
Message Normalizer
------------------
Pure text normalization applied before command matching.
Total functions: every input produces a string, nothing raises.
"""

import re
from typing import Any, Optional

_WHITESPACE_RUN = re.compile(r"\s+")


def coerce_text(value: Optional[Any]) -> str:
    """Turn None into an empty string and anything else into its str()."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def normalize(text: Optional[Any]) -> str:
    """Trim surrounding whitespace and lowercase."""
    return coerce_text(text).strip().lower()


def collapse_whitespace(text: str) -> str:
    """Replace every run of whitespace with a single ASCII space."""
    return _WHITESPACE_RUN.sub(" ", text)


def normalize_phrase(text: Optional[Any]) -> str:
    """Normalize and collapse interior whitespace, for phrase comparisons."""
    return collapse_whitespace(normalize(text))
