"""HTML sanitization"""

import bleach


def escape_html(text: str) -> str:
    """
    Escape markup in plain text for use in element bodies and attribute values.

    Escapes &, <, > and double quotes. Apostrophes are left alone so names
    like "The Gentlemen's Lounge" render literally.
    """
    if not text:
        return ""
    clean = bleach.clean(str(text), tags=set(), attributes={}, strip=False)
    return clean.replace('"', "&quot;")


def escape_attr_url(url: str) -> str:
    """Make an image reference safe inside a double-quoted attribute"""
    return (url or "").replace('"', "%22")
