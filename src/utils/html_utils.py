"""
HTML utilities for report rendering.
"""

import html
from typing import Optional


def escape_html(text: Optional[str]) -> str:
    """
    Escape the five markup-unsafe characters (& < > " ').

    Args:
        text: Text to embed in HTML; None renders as an empty string

    Returns:
        Escaped text safe for element content and quoted attributes
    """
    if not text:
        return ""
    return html.escape(str(text), quote=True)


def css_token(value: Optional[str]) -> str:
    """Reduce a free-form value to a safe CSS class fragment."""
    if not value:
        return "unknown"
    return "".join(ch if ch.isalnum() or ch == "-" else "-" for ch in str(value))
