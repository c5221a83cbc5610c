"""Abstract base class for token store implementations."""

from abc import ABC, abstractmethod
from datetime import datetime

from .models import ShortLink


class TokenStoreBase(ABC):
    """Durable token -> target URL mapping.

    Implementations must reject a duplicate token on ``save`` and distinguish
    a missing token from other read failures on ``find_by_token``.
    """

    def __init__(self, db_config: str):
        """Initialize store.

        Args:
            db_config: Database connection string
        """
        self.db_config = db_config

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the store for use (create schema where enabled)."""
        pass

    @abstractmethod
    async def save(self, token: str, target_url: str, created_at: datetime) -> None:
        """Persist a new short link.

        Args:
            token: The token to store the link under
            target_url: Absolute URL the token resolves to
            created_at: Creation timestamp

        Raises:
            DuplicateTokenError: If the token is already taken
            PersistenceError: If the write fails
        """
        pass

    @abstractmethod
    async def find_by_token(self, token: str) -> ShortLink:
        """Look up a short link by token.

        Args:
            token: The token to look up

        Returns:
            The stored short link

        Raises:
            TokenNotFoundError: If no link is stored under the token
            PersistenceError: If the read fails
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is reachable.

        Returns:
            True if healthy, False otherwise
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close store connections."""
        pass
