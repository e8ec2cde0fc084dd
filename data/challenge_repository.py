"""
Challenge repository - daily creative prompts (`creative_prompts`).

Reads degrade gracefully: when a query fails and `use_fallback` is on,
callers get the built-in sample catalogue instead of an error, so the
app keeps working offline and in development. Writes always raise
RepositoryError on failure.
"""

import logging
import uuid
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Optional

from models.creative import CreativePrompt, CreativeType
from .errors import RepositoryError, describe_error

logger = logging.getLogger(__name__)

TABLE = "creative_prompts"


def mock_challenges(now: Optional[datetime] = None) -> list[CreativePrompt]:
    """Sample catalogue used when the database is unreachable."""
    now = now or datetime.now(timezone.utc)
    return [
        CreativePrompt(
            id="mock_1",
            title="🌟 Magic Selfie Transformation",
            type=CreativeType.PHOTO,
            description=(
                "Transform your selfie into a fantasy character using AI magic! "
                "Add mystical elements, enchanted backgrounds, or superhero vibes."
            ),
            ai_style="fantasy",
            tags=["selfie", "fantasy", "ai", "transformation"],
            difficulty=2,
            created_at=now - timedelta(hours=2),
            expires_at=now + timedelta(days=1),
            participant_count=42,
        ),
        CreativePrompt(
            id="mock_2",
            title="🚀 Space Cat Adventure",
            type=CreativeType.TEXT,
            description="Write a story about a cat astronaut!",
            ai_style="scifi",
            tags=["story", "scifi", "cats"],
            difficulty=3,
            created_at=now - timedelta(days=1),
            expires_at=now + timedelta(hours=12),
            participant_count=156,
        ),
        CreativePrompt(
            id="mock_3",
            title="🎬 Daily Mood Cinematic",
            type=CreativeType.VIDEO,
            description="Create a cinematic video of your mood!",
            ai_style="cinematic",
            tags=["video", "mood", "cinematic"],
            difficulty=4,
            created_at=now - timedelta(days=2),
            expires_at=now + timedelta(hours=6),
            participant_count=89,
        ),
    ]


def empty_stats() -> dict:
    return {
        "participant_count": 0,
        "submission_count": 0,
        "total_cheers": 0,
        "total_comments": 0,
        "type_distribution": {},
        "engagement_rate": 0,
    }


class ChallengeRepository:
    """
    Query and manage creative prompts.

    Usage:
        repo = ChallengeRepository(manager.client)
        today = repo.get_todays_challenge()
    """

    def __init__(self, client, use_fallback: bool = True):
        self._client = client
        self.use_fallback = use_fallback

    # =========================================================================
    # Reads
    # =========================================================================

    def get_todays_challenge(self) -> Optional[CreativePrompt]:
        """The active challenge created today (UTC), else the latest active one."""
        now = datetime.now(timezone.utc)
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        end_of_day = start_of_day + timedelta(days=1)
        try:
            response = (
                self._client.table(TABLE)
                .select("*")
                .eq("is_active", True)
                .gte("created_at", start_of_day.isoformat())
                .lt("created_at", end_of_day.isoformat())
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            return self._read_failed("today's challenge", e, mock_challenges()[0])

        if response.data:
            return CreativePrompt.from_row(response.data[0])
        return self.get_latest_active_challenge()

    def get_latest_active_challenge(self) -> Optional[CreativePrompt]:
        try:
            response = (
                self._client.table(TABLE)
                .select("*")
                .eq("is_active", True)
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            return self._read_failed("latest challenge", e, mock_challenges()[0])
        return CreativePrompt.from_row(response.data[0]) if response.data else None

    def get_trending_challenges(self, limit: int = 5) -> list[CreativePrompt]:
        try:
            response = (
                self._client.table(TABLE)
                .select("*")
                .eq("is_active", True)
                .order("participant_count", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            fallback = [c for c in mock_challenges() if c.is_trending]
            return self._read_failed("trending challenges", e, fallback)
        return [CreativePrompt.from_row(row) for row in response.data or []]

    def get_challenge(self, challenge_id: str) -> Optional[CreativePrompt]:
        try:
            response = (
                self._client.table(TABLE)
                .select("*")
                .eq("id", challenge_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            fallback = next(
                (c for c in mock_challenges() if c.id == challenge_id), None
            )
            return self._read_failed("challenge", e, fallback)
        return CreativePrompt.from_row(response.data[0]) if response.data else None

    def get_all_challenges(self) -> list[CreativePrompt]:
        try:
            response = (
                self._client.table(TABLE)
                .select("*")
                .eq("is_active", True)
                .order("created_at", desc=True)
                .limit(50)
                .execute()
            )
        except Exception as e:
            return self._read_failed("all challenges", e, mock_challenges())
        return [CreativePrompt.from_row(row) for row in response.data or []]

    def get_challenges_by_type(self, creative_type: CreativeType) -> list[CreativePrompt]:
        try:
            response = (
                self._client.table(TABLE)
                .select("*")
                .eq("type", creative_type.value)
                .eq("is_active", True)
                .order("created_at", desc=True)
                .limit(20)
                .execute()
            )
        except Exception as e:
            fallback = [c for c in mock_challenges() if c.type == creative_type]
            return self._read_failed("challenges by type", e, fallback)
        return [CreativePrompt.from_row(row) for row in response.data or []]

    def search_challenges(self, query: str) -> list[CreativePrompt]:
        """Case-insensitive title search."""
        try:
            response = (
                self._client.table(TABLE)
                .select("*")
                .ilike("title", f"%{query}%")
                .order("created_at", desc=True)
                .limit(20)
                .execute()
            )
        except Exception as e:
            needle = query.lower()
            fallback = [c for c in mock_challenges() if needle in c.title.lower()]
            return self._read_failed("challenge search", e, fallback)
        return [CreativePrompt.from_row(row) for row in response.data or []]

    # =========================================================================
    # Writes (admin)
    # =========================================================================

    def create_challenge(
        self,
        title: str,
        creative_type: CreativeType,
        description: str,
        ai_style: Optional[str] = None,
        tags: Optional[list[str]] = None,
        difficulty: int = 3,
        duration_days: int = 1,
    ) -> CreativePrompt:
        now = datetime.now(timezone.utc)
        challenge = CreativePrompt(
            id=str(uuid.uuid4()),
            title=title,
            type=creative_type,
            description=description,
            ai_style=ai_style,
            tags=list(tags or []),
            difficulty=difficulty,
            created_at=now,
            expires_at=now + timedelta(days=duration_days),
        )
        return self.publish_challenge(challenge)

    def publish_challenge(self, challenge: CreativePrompt) -> CreativePrompt:
        """Insert a prepared prompt (e.g. an AI draft) as an active challenge."""
        challenge.is_active = True
        try:
            self._client.table(TABLE).insert(challenge.to_row()).execute()
        except Exception as e:
            logger.error(f"Error creating challenge: {describe_error(e)}")
            raise RepositoryError(f"Failed to create challenge: {e}") from e
        logger.info(f"Challenge created: {challenge.title}")
        return challenge

    def update_challenge(self, challenge: CreativePrompt) -> CreativePrompt:
        try:
            (
                self._client.table(TABLE)
                .update(challenge.to_row())
                .eq("id", challenge.id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error updating challenge: {describe_error(e)}")
            raise RepositoryError(f"Failed to update challenge: {e}") from e
        logger.info(f"Challenge updated: {challenge.title}")
        return challenge

    def delete_challenge(self, challenge_id: str) -> None:
        try:
            self._client.table(TABLE).delete().eq("id", challenge_id).execute()
        except Exception as e:
            logger.error(f"Error deleting challenge: {describe_error(e)}")
            raise RepositoryError(f"Failed to delete challenge: {e}") from e
        logger.info(f"Challenge deleted: {challenge_id}")

    # =========================================================================
    # Stats
    # =========================================================================

    def get_challenge_stats(self, challenge_id: str) -> dict:
        """
        Participation figures for one challenge.

        engagement_rate is submissions per distinct participant.
        """
        try:
            response = (
                self._client.table("creative_submissions")
                .select("user_id, type, cheer_count, comment_count")
                .eq("prompt_id", challenge_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error fetching challenge stats: {describe_error(e)}")
            return empty_stats()

        submissions = response.data or []
        participants = len({s.get("user_id") for s in submissions})
        type_distribution = Counter(str(s.get("type") or "unknown") for s in submissions)
        return {
            "participant_count": participants,
            "submission_count": len(submissions),
            "total_cheers": sum(s.get("cheer_count") or 0 for s in submissions),
            "total_comments": sum(s.get("comment_count") or 0 for s in submissions),
            "type_distribution": dict(type_distribution),
            "engagement_rate": len(submissions) / participants if participants else 0,
        }

    def get_challenge_leaderboard(self, challenge_id: str, limit: int = 10) -> list[dict]:
        """Top submissions by cheers, with the author's profile joined in."""
        try:
            response = (
                self._client.table("creative_submissions")
                .select("user_id, cheer_count, comment_count, created_at, profiles!inner(full_name, avatar_url)")
                .eq("prompt_id", challenge_id)
                .order("cheer_count", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error fetching challenge leaderboard: {describe_error(e)}")
            return []
        return response.data or []

    def get_user_challenge_history(self, user_id: str) -> list[dict]:
        """Challenges a user has answered, newest first."""
        try:
            response = (
                self._client.table("creative_submissions")
                .select("prompt_id, created_at, cheer_count, comment_count, creative_prompts!inner(title, type, description)")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error fetching challenge history: {describe_error(e)}")
            return []
        return response.data or []

    # =========================================================================
    # Internals
    # =========================================================================

    def _read_failed(self, what: str, exc: Exception, fallback):
        logger.error(f"Error fetching {what}: {describe_error(exc)}")
        if not self.use_fallback:
            raise RepositoryError(f"Failed to fetch {what}: {exc}") from exc
        logger.info(f"Using sample data for {what}")
        return fallback
