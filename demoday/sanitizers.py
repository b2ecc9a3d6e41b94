# demoday/sanitizers.py
"""
Input sanitization for user-written text.

Titles and names are single-line plain text; descriptions may carry a small
set of formatting tags and are cleaned with bleach.
"""
import html as html_lib
import re
from typing import Optional

import bleach

ALLOWED_TAGS = [
    'p', 'br', 'strong', 'em', 'u', 'a', 'ul', 'ol', 'li',
    'blockquote', 'code', 'pre'
]

ALLOWED_ATTRIBUTES = {
    'a': ['href', 'title'],
}


def sanitize_text(text: Optional[str], max_length: Optional[int] = None, strip: bool = True) -> str:
    """
    Sanitize plain text input.

    - Strips leading/trailing whitespace
    - Removes control characters
    - Removes any HTML tags
    - Enforces maximum length
    """
    if text is None:
        return ""

    if strip:
        text = text.strip()

    # Remove control characters except newlines and tabs
    text = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)
    # Plain text is stored unescaped; tags are dropped
    text = html_lib.unescape(bleach.clean(text, tags=[], strip=True))

    if max_length and len(text) > max_length:
        text = text[:max_length]

    return text


def sanitize_html(html: Optional[str], max_length: Optional[int] = None) -> str:
    """Sanitize HTML content, keeping only the formatting whitelist."""
    if html is None:
        return ""

    clean = bleach.clean(
        html.strip(),
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        strip=True
    )

    if max_length and len(clean) > max_length:
        clean = clean[:max_length]

    return clean


def sanitize_title(title: Optional[str], max_length: int = 255) -> str:
    """Single-line title: no HTML, no newlines, collapsed whitespace."""
    text = sanitize_text(title, max_length=max_length)
    text = re.sub(r'[\r\n]+', ' ', text)
    text = re.sub(r'\s+', ' ', text)
    return text
