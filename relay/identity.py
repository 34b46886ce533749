"""
Client identifier generation
"""

import secrets
from .constants import CLIENT_ID_ALPHABET, CLIENT_ID_LENGTH


def generate_client_id(length: int = CLIENT_ID_LENGTH) -> str:
    """
    Generate an opaque alphanumeric client identifier

    Uniqueness against live clients is not checked here; the registry
    rejects collisions on insert.

    Args:
        length: Number of characters

    Returns:
        Random identifier drawn from a CSPRNG
    """
    return ''.join(secrets.choice(CLIENT_ID_ALPHABET) for _ in range(length))
