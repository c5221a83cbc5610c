"""Data models for the token store."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional


@dataclass(frozen=True)
class ShortLink:
    """A stored token -> target URL mapping. Write-once."""

    token: str
    target_url: str
    created_at: datetime

    def is_expired(self, ttl: timedelta, now: Optional[datetime] = None) -> bool:
        """Check whether the link is older than ``ttl``.

        Expiry is advisory only; nothing in the store removes old links.
        """
        now = now or datetime.now(timezone.utc)
        created_at = self.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return now - created_at > ttl

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "token": self.token,
            "target_url": self.target_url,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ShortLink":
        """Create from dictionary."""
        created_at = data["created_at"]
        return cls(
            token=data["token"],
            target_url=data["target_url"],
            created_at=created_at if isinstance(created_at, datetime) else datetime.fromisoformat(created_at),
        )
