"""
Input sanitization for values that are stored or rebroadcast to other clients
"""

import html
import re
from typing import Any, Optional
from .constants import (
    CONTROL_CHARACTER_PATTERN,
    CHARACTER_REFERENCE_PATTERN,
    MAX_DISPLAY_NAME_LENGTH,
    DEFAULT_DISPLAY_NAME
)
from .logger import log_security_event

_control_characters = re.compile(CONTROL_CHARACTER_PATTERN)
_bare_ampersand = re.compile(r'&(?!' + CHARACTER_REFERENCE_PATTERN[1:] + r')')

_MARKUP_ESCAPES = {
    '<': '&lt;',
    '>': '&gt;',
    '"': '&quot;',
    "'": '&#x27;',
}
_markup_characters = re.compile('[<>"\']')

def _escape(text: str) -> str:
    sanitized = _control_characters.sub('', text).strip()
    sanitized = _bare_ampersand.sub('&amp;', sanitized)
    return _markup_characters.sub(lambda m: _MARKUP_ESCAPES[m.group(0)], sanitized)

def sanitize_text(text: str) -> str:
    """
    Neutralize markup in free text before it is stored or echoed

    Control characters are removed, surrounding whitespace trimmed, markup
    characters escaped, and any '&' not already starting a character
    reference escaped. Applying it twice yields the same result.

    Args:
        text: Raw user input

    Returns:
        Text safe to render as markup
    """
    if not isinstance(text, str):
        return ""

    sanitized = _escape(text)

    if '<' in text or '>' in text:
        log_security_event("markup_neutralized", {"length": len(text)})

    return sanitized

def sanitize_channel(channel: Any) -> str:
    """
    Sanitize a channel name; non-string values become the empty string

    Args:
        channel: Raw channel value

    Returns:
        Sanitized channel name
    """
    return sanitize_text(channel)

def sanitize_client_id(client_id: Any) -> str:
    """
    Sanitize an echoed client identifier

    Args:
        client_id: Raw identifier value

    Returns:
        Sanitized identifier
    """
    return sanitize_text(client_id)

def truncate_display_name(name: str) -> str:
    """
    Cut an already-sanitized display name to the maximum length

    Length is counted in rendered characters: the name is unescaped, cut,
    trimmed and escaped again, so '&amp;' occupies one slot, not five.
    Repeated application is a no-op.

    Args:
        name: Sanitized display name

    Returns:
        Display name rendering to at most MAX_DISPLAY_NAME_LENGTH characters
    """
    return _escape(html.unescape(name)[:MAX_DISPLAY_NAME_LENGTH])

def normalize_display_name(name: Optional[Any]) -> str:
    """
    Produce the display name stored for a client

    Args:
        name: Raw name from the handshake frame

    Returns:
        Sanitized, truncated name, or the default label when absent
    """
    if not isinstance(name, str):
        return DEFAULT_DISPLAY_NAME

    sanitized = truncate_display_name(sanitize_text(name))
    return sanitized or DEFAULT_DISPLAY_NAME
