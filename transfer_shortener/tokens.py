"""Token minting for short links."""

import secrets
import string
from typing import Optional


class TokenMinter:
    """Mint short random tokens that are safe to use as a URL path segment."""

    # URL-safe base64 alphabet
    ALPHABET = string.ascii_letters + string.digits + "-_"

    DEFAULT_LENGTH = 4

    def __init__(self, default_length: int = DEFAULT_LENGTH):
        """Initialize token minter.

        Args:
            default_length: Length of every minted token
        """
        if default_length < 1:
            raise ValueError("Token length must be at least 1")
        self.default_length = default_length

    def mint(self, length: Optional[int] = None) -> str:
        """Mint a new random token.

        Uses the ``secrets`` module so tokens are unpredictable.

        Args:
            length: Length of the token (uses default if not specified)

        Returns:
            Random token
        """
        length = length or self.default_length
        return ''.join(secrets.choice(self.ALPHABET) for _ in range(length))

    @classmethod
    def is_valid_format(cls, token: str) -> bool:
        """Check that every character of the token is in the minting alphabet."""
        return bool(token) and all(c in cls.ALPHABET for c in token)
