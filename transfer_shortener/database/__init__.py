"""Token store layer for transfer shortener."""

import logging
from typing import Optional
from urllib.parse import urlparse

from .base import TokenStoreBase
from .cache import RedisCache
from .models import ShortLink
from .questdb import QuestDBTokenStore
from .sqlite import SQLiteTokenStore


def create_token_store(
    database_url: str,
    create_tables: bool = True,
    logger: Optional[logging.Logger] = None,
) -> TokenStoreBase:
    """Build the token store matching the URL scheme.

    ``sqlite:///...`` (or a bare file path) selects SQLite; ``questdb://`` or
    ``postgresql://`` selects QuestDB.
    """
    scheme = urlparse(database_url).scheme
    if scheme in ("questdb", "postgres", "postgresql"):
        return QuestDBTokenStore(database_url, create_tables=create_tables, logger=logger)
    if scheme in ("sqlite", ""):
        return SQLiteTokenStore(database_url, create_tables=create_tables, logger=logger)
    raise ValueError(f"Unsupported database URL scheme: {scheme}")


__all__ = [
    "TokenStoreBase",
    "SQLiteTokenStore",
    "QuestDBTokenStore",
    "RedisCache",
    "ShortLink",
    "create_token_store",
]
