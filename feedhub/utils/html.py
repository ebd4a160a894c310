"""HTML helpers for feed content."""

import re
from typing import Optional

# <p--> or <div --> left behind by broken feed generators
MALFORMED_TAG_RE = re.compile(r"<([a-zA-Z][a-zA-Z0-9]*)\s*--+>")
MALFORMED_VOID_TAG_RE = re.compile(r"<(img|br|hr|input|meta|link)\s+([^>]*?)--+>")

IMG_SRC_RE = re.compile(r"""<img[^>]+src\s*=\s*["']([^"'>]+)["']""", re.IGNORECASE)


def clean_html(html: str) -> str:
    """Fix common malformed tag patterns and trim surrounding whitespace.

    Example:
        >>> clean_html("  <p-->Hello</p> ")
        '<p>Hello</p>'
    """
    if not html:
        return html

    html = MALFORMED_TAG_RE.sub(r"<\1>", html)
    html = MALFORMED_VOID_TAG_RE.sub(r"<\1 \2>", html)
    return html.strip()


def find_first_image(html: str) -> Optional[str]:
    """Return the src of the first <img> tag in ``html``, if any."""
    if not html:
        return None
    match = IMG_SRC_RE.search(html)
    return match.group(1) if match else None
