"""Common infrastructure utilities."""

from __future__ import annotations

from .html_selectors import (
    absolute_url,
    attr_of,
    first_text,
    parse_html,
    safe_select,
    select_each,
    text_of,
)

__all__ = [
    "absolute_url",
    "attr_of",
    "first_text",
    "parse_html",
    "safe_select",
    "select_each",
    "text_of",
]
