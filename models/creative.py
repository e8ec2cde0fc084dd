"""
Creative prompt and submission models.

A CreativePrompt is a daily challenge (row of `creative_prompts`).
A CreativeSubmission is a user's answer to one (row of
`creative_submissions`), optionally AI-enhanced or remixing another
submission.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


# Postgres trims trailing zeros; fromisoformat on 3.10 wants 3 or 6 digits
_FRACTION = re.compile(r"\.(\d+)")


def parse_timestamp(value) -> Optional[datetime]:
    """Parse a Postgres/ISO timestamp string (None passes through)."""
    if value is None or isinstance(value, datetime):
        return value
    text = value.replace("Z", "+00:00")
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return datetime.fromisoformat(text)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CreativeType(Enum):
    """Medium of a challenge or submission."""

    PHOTO = ("photo", "📸", "Photo Challenge")
    VIDEO = ("video", "🎬", "Video Challenge")
    TEXT = ("text", "📝", "Text Challenge")
    AUDIO = ("audio", "🎵", "Audio Challenge")
    MIXED = ("mixed", "🌈", "Mixed Media")

    def __new__(cls, value: str, emoji: str, display_name: str):
        obj = object.__new__(cls)
        obj._value_ = value
        obj.emoji = emoji
        obj.display_name = display_name
        return obj

    @classmethod
    def from_name(cls, name: Optional[str]) -> "CreativeType":
        for member in cls:
            if member.value == name:
                return member
        return cls.TEXT


class CreativeStyle(Enum):
    """AI enhancement styles."""

    FANTASY = ("fantasy", "🧙‍♀️", "Fantasy")
    SCIFI = ("scifi", "🚀", "Sci-Fi")
    ROMANCE = ("romance", "💕", "Romance")
    COMEDY = ("comedy", "😂", "Comedy")
    HORROR = ("horror", "👻", "Horror")
    MYSTERY = ("mystery", "🕵️", "Mystery")
    HAIKU = ("haiku", "🎑", "Haiku")
    STORY = ("story", "📚", "Story")
    POEM = ("poem", "✍️", "Poem")
    CAPTION = ("caption", "💬", "Caption")
    CINEMATIC = ("cinematic", "🎥", "Cinematic")
    ANIME = ("anime", "🎌", "Anime")
    PIXEL_ART = ("pixelArt", "👾", "Pixel Art")
    SURREAL = ("surreal", "🌌", "Surreal")
    CREATIVE = ("creative", "✨", "Creative")

    def __new__(cls, value: str, emoji: str, display_name: str):
        obj = object.__new__(cls)
        obj._value_ = value
        obj.emoji = emoji
        obj.display_name = display_name
        return obj

    @classmethod
    def from_name(cls, name: Optional[str]) -> "CreativeStyle":
        for member in cls:
            if member.value == name:
                return member
        return cls.CREATIVE


@dataclass(eq=False)
class CreativePrompt:
    """A creative challenge. Two prompts are equal when their ids match."""

    id: str
    title: str
    type: CreativeType
    description: str
    created_at: datetime = field(default_factory=utcnow)
    ai_style: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    difficulty: int = 3  # 1-5 scale
    expires_at: Optional[datetime] = None
    is_active: bool = True
    participant_count: int = 0
    ai_parameters: Optional[dict] = None

    def __eq__(self, other) -> bool:
        return isinstance(other, CreativePrompt) and other.id == self.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at < datetime.now(self.expires_at.tzinfo)

    @property
    def is_trending(self) -> bool:
        return self.participant_count > 100

    @property
    def is_easy(self) -> bool:
        return self.difficulty <= 2

    @property
    def is_hard(self) -> bool:
        return self.difficulty >= 4

    def to_row(self) -> dict:
        """Serialize to a `creative_prompts` row."""
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type.value,
            "description": self.description,
            "ai_style": self.ai_style,
            "tags": self.tags,
            "difficulty": self.difficulty,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "is_active": self.is_active,
            "participant_count": self.participant_count,
            "ai_parameters": self.ai_parameters,
        }

    @classmethod
    def from_row(cls, row: dict) -> "CreativePrompt":
        return cls(
            id=row["id"],
            title=row["title"],
            type=CreativeType.from_name(row.get("type")),
            description=row["description"],
            ai_style=row.get("ai_style"),
            tags=list(row.get("tags") or []),
            difficulty=row.get("difficulty") or 3,
            created_at=parse_timestamp(row.get("created_at")) or utcnow(),
            expires_at=parse_timestamp(row.get("expires_at")),
            is_active=row.get("is_active", True),
            participant_count=row.get("participant_count") or 0,
            ai_parameters=row.get("ai_parameters"),
        )

    def __str__(self) -> str:
        return f"CreativePrompt({self.title}, {self.type.value}, {self.difficulty}⭐)"


@dataclass(eq=False)
class CreativeSubmission:
    """A user's creation for a challenge. Equality is by id."""

    id: str
    prompt_id: str
    user_id: str
    user_display_name: str
    type: CreativeType
    created_at: datetime = field(default_factory=utcnow)
    user_avatar_url: Optional[str] = None
    content_url: Optional[str] = None
    text_content: Optional[str] = None
    ai_style: Optional[str] = None
    ai_generated_content: Optional[str] = None
    ai_metadata: Optional[dict] = None
    is_public: bool = True
    cheer_count: int = 0
    comment_count: int = 0
    remix_count: int = 0
    tags: list[str] = field(default_factory=list)
    ai_confidence: Optional[float] = None
    parent_submission_id: Optional[str] = None  # Set on remixes

    def __eq__(self, other) -> bool:
        return isinstance(other, CreativeSubmission) and other.id == self.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def is_text_submission(self) -> bool:
        return bool(self.text_content)

    @property
    def is_media_submission(self) -> bool:
        return bool(self.content_url)

    @property
    def has_ai_enhancement(self) -> bool:
        return bool(self.ai_generated_content)

    @property
    def is_remix(self) -> bool:
        return self.parent_submission_id is not None

    @property
    def is_popular(self) -> bool:
        return self.cheer_count > 10

    @property
    def total_engagement(self) -> int:
        return self.cheer_count + self.comment_count + self.remix_count

    def to_row(self) -> dict:
        """Serialize to a `creative_submissions` row."""
        return {
            "id": self.id,
            "prompt_id": self.prompt_id,
            "user_id": self.user_id,
            "user_display_name": self.user_display_name,
            "user_avatar_url": self.user_avatar_url,
            "type": self.type.value,
            "content_url": self.content_url,
            "text_content": self.text_content,
            "ai_style": self.ai_style,
            "ai_generated_content": self.ai_generated_content,
            "ai_metadata": self.ai_metadata,
            "created_at": self.created_at.isoformat(),
            "is_public": self.is_public,
            "cheer_count": self.cheer_count,
            "comment_count": self.comment_count,
            "remix_count": self.remix_count,
            "tags": self.tags,
            "ai_confidence": self.ai_confidence,
            "parent_submission_id": self.parent_submission_id,
        }

    @classmethod
    def from_row(cls, row: dict) -> "CreativeSubmission":
        """
        Build a submission from a row.

        Rows joined with `profiles` carry the author under a nested
        "profiles" object; it fills in the display name and avatar when
        the flat columns are absent.
        """
        profile = row.get("profiles") or {}
        confidence = row.get("ai_confidence")
        return cls(
            id=row["id"],
            prompt_id=row["prompt_id"],
            user_id=row["user_id"],
            user_display_name=(
                row.get("user_display_name") or profile.get("full_name") or "Anonymous"
            ),
            user_avatar_url=row.get("user_avatar_url") or profile.get("avatar_url"),
            type=CreativeType.from_name(row.get("type")),
            content_url=row.get("content_url"),
            text_content=row.get("text_content"),
            ai_style=row.get("ai_style"),
            ai_generated_content=row.get("ai_generated_content"),
            ai_metadata=row.get("ai_metadata"),
            created_at=parse_timestamp(row.get("created_at")) or utcnow(),
            is_public=row.get("is_public", True),
            cheer_count=row.get("cheer_count") or 0,
            comment_count=row.get("comment_count") or 0,
            remix_count=row.get("remix_count") or 0,
            tags=list(row.get("tags") or []),
            ai_confidence=float(confidence) if confidence is not None else None,
            parent_submission_id=row.get("parent_submission_id"),
        )

    def __str__(self) -> str:
        return f"CreativeSubmission({self.user_display_name}, {self.type.value}, {self.cheer_count}👍)"
