"""Shared utility functions."""
import re

_SEPARATORS_RE = re.compile(r"[_-]")
_WORD_START_RE = re.compile(r"\b\w")


def format_display_name(name: str) -> str:
    """Turn a technical identifier into a title-cased display name.

    ``order_line-item`` -> ``Order Line Item``.
    """
    spaced = _SEPARATORS_RE.sub(" ", name.lower())
    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), spaced).strip()
