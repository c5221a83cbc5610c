"""SQLite implementation of the token store."""

import os
import asyncio
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

from .base import TokenStoreBase
from .models import ShortLink
from ..errors import DuplicateTokenError, PersistenceError, TokenNotFoundError


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS urls (
	token TEXT PRIMARY KEY,
	full_url TEXT NOT NULL,
	created_at INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_created_at ON urls(created_at);
"""


def sqlite_path_from_url(db_config: str) -> str:
    """Extract the file path from a ``sqlite:///`` URL.

    ``sqlite:///data/x.db`` is relative, ``sqlite:////data/x.db`` is absolute.
    A bare path is returned unchanged.
    """
    parsed = urlparse(db_config)
    if parsed.scheme != "sqlite":
        return db_config
    path = db_config[len("sqlite://"):]
    if path.startswith("/"):
        path = path[1:]
    return path or ":memory:"


class SQLiteTokenStore(TokenStoreBase):
    """Token store backed by a single SQLite table.

    Every operation opens its own connection in a worker thread, so concurrent
    requests never share a connection.
    """

    def __init__(
        self,
        db_config: str,
        create_tables: bool = True,
        busy_timeout_seconds: float = 5.0,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize SQLite store.

        Args:
            db_config: ``sqlite:///path`` URL or plain file path
            create_tables: Whether ``initialize`` creates the schema
            busy_timeout_seconds: How long to wait on a locked database
            logger: Optional logger instance
        """
        super().__init__(db_config)
        self.logger = logger or logging.getLogger(__name__)
        self.path = sqlite_path_from_url(db_config)
        self.create_tables = create_tables
        self.busy_timeout_seconds = busy_timeout_seconds

    @contextmanager
    def _get_conn(self):
        conn = sqlite3.connect(self.path, timeout=self.busy_timeout_seconds)
        try:
            yield conn
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        with self._get_conn() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def _insert(self, token: str, target_url: str, created_at: datetime) -> None:
        with self._get_conn() as conn:
            try:
                conn.execute(
                    "INSERT INTO urls (token, full_url, created_at) VALUES (?, ?, ?)",
                    (token, target_url, int(created_at.timestamp())),
                )
                conn.commit()
            except sqlite3.IntegrityError as e:
                raise DuplicateTokenError(token) from e

    def _select(self, token: str) -> Optional[tuple]:
        with self._get_conn() as conn:
            return conn.execute(
                "SELECT full_url, created_at FROM urls WHERE token = ?",
                (token,),
            ).fetchone()

    async def initialize(self) -> None:
        """Create the ``urls`` table and its index if enabled."""
        if not self.create_tables:
            self.logger.debug("Table creation disabled")
            return

        if self.path == ":memory:":
            raise PersistenceError("In-memory SQLite is not supported: each operation opens a new connection")

        try:
            self.logger.info(f"Ensuring SQLite schema at {self.path}")
            await asyncio.to_thread(self._ensure_schema)
        except (sqlite3.Error, OSError) as e:
            self.logger.error(f"Error creating tables: {e}")
            raise PersistenceError(f"Failed to initialize SQLite store: {e}") from e

    async def save(self, token: str, target_url: str, created_at: datetime) -> None:
        """Insert a new short link row."""
        try:
            await asyncio.to_thread(self._insert, token, target_url, created_at)
        except DuplicateTokenError:
            self.logger.warning(f"Token already exists: {token}")
            raise
        except sqlite3.Error as e:
            self.logger.error(f"Error saving short link: {e}")
            raise PersistenceError(f"Failed to save token {token}: {e}") from e

        self.logger.debug(f"Saved short link: {token} -> {target_url}")

    async def find_by_token(self, token: str) -> ShortLink:
        """Fetch the short link stored under ``token``."""
        try:
            row = await asyncio.to_thread(self._select, token)
        except sqlite3.Error as e:
            self.logger.error(f"Error looking up token: {e}")
            raise PersistenceError(f"Failed to look up token {token}: {e}") from e

        if row is None:
            raise TokenNotFoundError(token)

        full_url, created_at = row
        return ShortLink(
            token=token,
            target_url=full_url,
            created_at=datetime.fromtimestamp(created_at, tz=timezone.utc),
        )

    async def health_check(self) -> bool:
        def ping() -> None:
            with self._get_conn() as conn:
                conn.execute("SELECT 1").fetchone()

        try:
            await asyncio.to_thread(ping)
            return True
        except sqlite3.Error as e:
            self.logger.error(f"Health check failed: {e}")
            return False

    async def close(self) -> None:
        # Connections are per-operation; nothing is held open.
        pass
