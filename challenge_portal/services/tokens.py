"""Download token generation."""

import secrets

from challenge_portal.core.constants import TOKEN_ALPHABET, TOKEN_LENGTH


def generate_token(length: int = TOKEN_LENGTH) -> str:
    """Return a random URL-safe token drawn from ``TOKEN_ALPHABET``."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))
