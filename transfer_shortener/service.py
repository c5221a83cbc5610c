"""Short-link service: create and resolve tokens."""

import logging
from typing import Optional, Dict
from datetime import datetime, timezone

from .tokens import TokenMinter
from .interfaces import ShortLinkProvider
from .database.base import TokenStoreBase
from .database.cache import RedisCache
from .database.models import ShortLink
from .common.validators import is_valid_url
from .errors import (
    DuplicateTokenError,
    EmptyTokenError,
    InvalidTargetError,
    TokenCollisionError,
)


class ShortLinkService(ShortLinkProvider):
    """Mints tokens for full URLs and resolves tokens back to URLs."""

    def __init__(
        self,
        store: TokenStoreBase,
        cache: Optional[RedisCache] = None,
        token_minter: Optional[TokenMinter] = None,
        logger: Optional[logging.Logger] = None,
        max_collision_retries: int = 5,
    ):
        """Initialize short-link service.

        Args:
            store: Token store
            cache: Optional read-through cache
            token_minter: Optional token minter
            logger: Optional logger
            max_collision_retries: Extra attempts after a duplicate token
        """
        self.store = store
        self.cache = cache
        self.minter = token_minter or TokenMinter()
        self.logger = logger or logging.getLogger(__name__)
        self.max_collision_retries = max_collision_retries

    async def create_short_link(self, full_url: str) -> ShortLink:
        """Create a short link for ``full_url``.

        Args:
            full_url: Absolute URL the new token resolves to

        Returns:
            The persisted short link

        Raises:
            InvalidTargetError: If the URL is empty or not absolute
            TokenCollisionError: If every minted token was already taken
            PersistenceError: If the store write fails
        """
        is_valid, error = is_valid_url(full_url)
        if not is_valid:
            raise InvalidTargetError(f"Invalid URL: {error}")

        created_at = datetime.now(timezone.utc)

        for attempt in range(self.max_collision_retries + 1):
            token = self.minter.mint()
            try:
                await self.store.save(token, full_url, created_at)
                break
            except DuplicateTokenError:
                self.logger.debug(f"Token collision on attempt {attempt + 1}: {token}")
        else:
            raise TokenCollisionError(
                f"Unable to mint an unused token after {self.max_collision_retries + 1} attempts"
            )

        if self.cache:
            await self.cache.set(token, full_url)

        self.logger.info(f"Created short link: {token} -> {full_url}")

        return ShortLink(token=token, target_url=full_url, created_at=created_at)

    async def resolve_token(self, token: str) -> str:
        """Resolve a token to its stored URL.

        Args:
            token: The token to resolve

        Returns:
            The stored URL

        Raises:
            EmptyTokenError: If the token is empty (the store is not queried)
            TokenNotFoundError: If nothing is stored under the token
            PersistenceError: If the store read fails
        """
        if not token:
            raise EmptyTokenError("Token cannot be empty")

        if self.cache:
            cached_url = await self.cache.get(token)
            if cached_url:
                self.logger.debug(f"Cache hit for {token}")
                return cached_url

        link = await self.store.find_by_token(token)

        if self.cache:
            await self.cache.set(token, link.target_url)

        self.logger.debug(f"Resolved token: {token} -> {link.target_url}")
        return link.target_url

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        store_healthy = await self.store.health_check()

        cache_healthy = True
        if self.cache and self.cache.enabled:
            cache_healthy = await self.cache.ping()

        return {
            "database": store_healthy,
            "cache": cache_healthy,
            "overall": store_healthy and cache_healthy,
        }

    async def close(self) -> None:
        """Close store and cache connections."""
        await self.store.close()
        if self.cache:
            await self.cache.close()
