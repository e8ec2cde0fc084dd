"""
Profile model - a row of the `profiles` table.

Profiles extend Supabase auth users (same id) with display data and
engagement counters.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .creative import parse_timestamp, utcnow


@dataclass
class Profile:
    """A SparkStudio user's public profile."""

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None

    # Engagement
    streak_count: int = 0
    total_submissions: int = 0
    total_cheers_received: int = 0

    # Metadata
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    last_login_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        """Full name, else the email's local part, else "Anonymous"."""
        if self.full_name:
            return self.full_name
        if self.email and "@" in self.email:
            return self.email.split("@", 1)[0]
        return "Anonymous"

    def to_row(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "avatar_url": self.avatar_url,
            "bio": self.bio,
            "streak_count": self.streak_count,
            "total_submissions": self.total_submissions,
            "total_cheers_received": self.total_cheers_received,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "last_login_at": self.last_login_at.isoformat() if self.last_login_at else None,
        }

    @classmethod
    def from_row(cls, row: dict) -> "Profile":
        return cls(
            id=row["id"],
            email=row.get("email"),
            full_name=row.get("full_name"),
            avatar_url=row.get("avatar_url"),
            bio=row.get("bio"),
            streak_count=row.get("streak_count") or 0,
            total_submissions=row.get("total_submissions") or 0,
            total_cheers_received=row.get("total_cheers_received") or 0,
            created_at=parse_timestamp(row.get("created_at")) or utcnow(),
            updated_at=parse_timestamp(row.get("updated_at")) or utcnow(),
            last_login_at=parse_timestamp(row.get("last_login_at")),
        )
