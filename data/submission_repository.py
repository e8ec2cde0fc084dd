"""
Submission repository - creative submissions, media and engagement.

Tables: `creative_submissions`, `comments`.
Storage: the media bucket (SUPABASE_MEDIA_BUCKET).
RPCs: increment_cheer_count, increment_comment_count, increment_remix_count.
"""

import calendar
import logging
import mimetypes
import time
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from config import MAX_UPLOAD_BYTES, SUPABASE_MEDIA_BUCKET
from core import formatters
from models.creative import CreativeSubmission, CreativeType
from .errors import RepositoryError, describe_error

logger = logging.getLogger(__name__)

TABLE = "creative_submissions"
WITH_AUTHOR = "*, profiles(full_name, avatar_url)"


def timeframe_start(timeframe: Optional[str], now: Optional[datetime] = None) -> datetime:
    """Start of a popularity window: "day", "week", "month", else 30 days."""
    now = now or datetime.now(timezone.utc)
    if timeframe == "day":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if timeframe == "week":
        return now - timedelta(days=7)
    if timeframe == "month":
        year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
        day = min(now.day, calendar.monthrange(year, month)[1])
        return now.replace(year=year, month=month, day=day)
    return now - timedelta(days=30)


def mock_submissions() -> list[CreativeSubmission]:
    now = datetime.now(timezone.utc)
    return [
        CreativeSubmission(
            id="sub_1",
            prompt_id="mock_1",
            user_id="user_1",
            user_display_name="Alex Creative",
            type=CreativeType.PHOTO,
            content_url="https://images.unsplash.com/photo-1514888286974-6c03e2ca1dba?w=400&h=600&fit=crop",
            ai_style="fantasy",
            ai_generated_content="✨ Enhanced with mystical forest background and magical aura effects",
            created_at=now - timedelta(hours=1),
            cheer_count=24,
            comment_count=5,
            remix_count=3,
            tags=["fantasy", "magic", "selfie"],
        ),
        CreativeSubmission(
            id="sub_2",
            prompt_id="mock_2",
            user_id="user_2",
            user_display_name="Taylor Wordsmith",
            type=CreativeType.TEXT,
            text_content="Luna the cat always dreamed of touching the stars...",
            ai_style="scifi",
            ai_generated_content=(
                "🌟 **Luna: Space Explorer**\n\nLuna, a curious calico with fur like "
                "a nebula, spent her nights watching satellites dance across the sky."
            ),
            created_at=now - timedelta(minutes=45),
            cheer_count=42,
            comment_count=12,
            remix_count=8,
            tags=["scifi", "cats", "space"],
        ),
        CreativeSubmission(
            id="sub_3",
            prompt_id="mock_4",
            user_id="user_3",
            user_display_name="Jordan Poet",
            type=CreativeType.TEXT,
            text_content="Autumn leaves falling, golden light through the trees, crisp air and warm tea",
            ai_style="haiku",
            ai_generated_content=(
                "🍂 **Autumn's Golden Whisper**\n\nCrimson leaves drift down,\n"
                "Golden light through naked trees,\nWarm tea, crisp air sighs."
            ),
            created_at=now - timedelta(minutes=30),
            cheer_count=18,
            comment_count=3,
            remix_count=2,
            tags=["haiku", "autumn", "poetry"],
        ),
    ]


class SubmissionRepository:
    """
    Store and query creative submissions.

    Usage:
        repo = SubmissionRepository(manager.client)
        url = repo.upload_media("art.png", "art.png", user_id)
        repo.add_submission(submission)
    """

    def __init__(self, client, bucket: str = SUPABASE_MEDIA_BUCKET, use_fallback: bool = True):
        self._client = client
        self.bucket = bucket
        self.use_fallback = use_fallback

    # =========================================================================
    # CRUD
    # =========================================================================

    def add_submission(self, submission: CreativeSubmission) -> CreativeSubmission:
        try:
            self._client.table(TABLE).insert(submission.to_row()).execute()
        except Exception as e:
            logger.error(f"Error adding submission: {describe_error(e)}")
            raise RepositoryError(f"Failed to add submission: {e}") from e
        logger.info(f"Submission added: {submission.id}")
        return submission

    def fetch_submissions(
        self,
        challenge_id: Optional[str] = None,
        user_id: Optional[str] = None,
        creative_type: Optional[CreativeType] = None,
        limit: int = 50,
        offset: int = 0,
        include_private: bool = False,
    ) -> list[CreativeSubmission]:
        """Newest-first page of submissions matching the filters."""
        try:
            query = self._client.table(TABLE).select(WITH_AUTHOR)
            if challenge_id is not None:
                query = query.eq("prompt_id", challenge_id)
            if user_id is not None:
                query = query.eq("user_id", user_id)
            if creative_type is not None:
                query = query.eq("type", creative_type.value)
            if not include_private:
                query = query.eq("is_public", True)

            response = (
                query.order("created_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error fetching submissions: {describe_error(e)}")
            if not self.use_fallback:
                raise RepositoryError(f"Failed to fetch submissions: {e}") from e
            return [
                s for s in mock_submissions()
                if (challenge_id is None or s.prompt_id == challenge_id)
                and (user_id is None or s.user_id == user_id)
                and (creative_type is None or s.type == creative_type)
            ]
        return [CreativeSubmission.from_row(row) for row in response.data or []]

    def update_submission(self, submission: CreativeSubmission) -> CreativeSubmission:
        try:
            (
                self._client.table(TABLE)
                .update(submission.to_row())
                .eq("id", submission.id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error updating submission: {describe_error(e)}")
            raise RepositoryError(f"Failed to update submission: {e}") from e
        return submission

    def delete_submission(self, submission_id: str) -> None:
        """Delete one of the signed-in user's own submissions."""
        user = self._current_user()
        try:
            (
                self._client.table(TABLE)
                .delete()
                .eq("id", submission_id)
                .eq("user_id", user.id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error deleting submission: {describe_error(e)}")
            raise RepositoryError(f"Failed to delete submission: {e}") from e
        logger.info(f"Submission deleted: {submission_id}")

    # =========================================================================
    # Media
    # =========================================================================

    def upload_media(self, file_path: str, file_name: str, user_id: str) -> str:
        """
        Upload a local file to the media bucket and return its public URL.

        Objects are stored as `<user_id>/<epoch_ms>_<file_name>`; the
        bucket's update/delete policies key on that first folder.
        """
        path = Path(file_path)
        if not path.exists():
            raise RepositoryError(f"File does not exist: {file_path}")
        size = path.stat().st_size
        if size > MAX_UPLOAD_BYTES:
            raise RepositoryError(
                f"File too large: {formatters.format_file_size(size)} "
                f"(max {formatters.format_file_size(MAX_UPLOAD_BYTES)})"
            )

        object_name = f"{user_id}/{int(time.time() * 1000)}_{file_name}"
        content_type = mimetypes.guess_type(file_name)[0] or "application/octet-stream"
        bucket = self._client.storage.from_(self.bucket)
        try:
            bucket.upload(object_name, path.read_bytes(), {"content-type": content_type})
            public_url = bucket.get_public_url(object_name)
        except Exception as e:
            logger.error(f"Error uploading media: {describe_error(e)}")
            raise RepositoryError(f"Failed to upload media: {e}") from e

        logger.info(f"Media uploaded: {public_url}")
        return public_url

    # =========================================================================
    # Engagement
    # =========================================================================

    def add_cheer(self, submission_id: str) -> None:
        self._rpc("increment_cheer_count", submission_id, "add cheer")

    def add_comment(self, submission_id: str, content: str) -> None:
        user = self._current_user()
        try:
            self._client.table("comments").insert({
                "submission_id": submission_id,
                "user_id": user.id,
                "content": content,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }).execute()
        except Exception as e:
            logger.error(f"Error adding comment: {describe_error(e)}")
            raise RepositoryError(f"Failed to add comment: {e}") from e
        self._rpc("increment_comment_count", submission_id, "add comment")

    def get_comments(self, submission_id: str) -> list[dict]:
        try:
            response = (
                self._client.table("comments")
                .select(WITH_AUTHOR)
                .eq("submission_id", submission_id)
                .order("created_at")
                .execute()
            )
        except Exception as e:
            logger.error(f"Error fetching comments: {describe_error(e)}")
            return []
        return response.data or []

    def create_remix(
        self,
        original_submission_id: str,
        prompt_id: str,
        user_id: str,
        creative_type: CreativeType,
        user_display_name: str = "Anonymous",
        content_url: Optional[str] = None,
        text_content: Optional[str] = None,
        ai_style: Optional[str] = None,
    ) -> CreativeSubmission:
        remix = CreativeSubmission(
            id=str(uuid.uuid4()),
            prompt_id=prompt_id,
            user_id=user_id,
            user_display_name=user_display_name,
            type=creative_type,
            content_url=content_url,
            text_content=text_content,
            ai_style=ai_style,
            parent_submission_id=original_submission_id,
        )
        self.add_submission(remix)
        self._rpc("increment_remix_count", original_submission_id, "create remix")
        logger.info(f"Remix created: {remix.id}")
        return remix

    # =========================================================================
    # Discovery
    # =========================================================================

    def search_submissions(self, query: str) -> list[CreativeSubmission]:
        """Case-insensitive search over text content."""
        try:
            response = (
                self._client.table(TABLE)
                .select(WITH_AUTHOR)
                .ilike("text_content", f"%{query}%")
                .eq("is_public", True)
                .order("created_at", desc=True)
                .limit(20)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error searching submissions: {describe_error(e)}")
            if not self.use_fallback:
                raise RepositoryError(f"Failed to search submissions: {e}") from e
            needle = query.lower()
            return [
                s for s in mock_submissions()
                if needle in (s.text_content or "").lower()
                or needle in s.user_display_name.lower()
            ]
        return [CreativeSubmission.from_row(row) for row in response.data or []]

    def get_submission_stats(self, submission_id: str) -> dict:
        try:
            response = (
                self._client.table(TABLE)
                .select("cheer_count, comment_count, remix_count")
                .eq("id", submission_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error fetching submission stats: {describe_error(e)}")
            response = None
        if response is None or not response.data:
            return {"cheer_count": 0, "comment_count": 0, "remix_count": 0}
        return response.data[0]

    def get_popular_submissions(
        self, limit: int = 10, timeframe: Optional[str] = None
    ) -> list[CreativeSubmission]:
        """Most-cheered public submissions since the start of `timeframe`."""
        since = timeframe_start(timeframe)
        try:
            response = (
                self._client.table(TABLE)
                .select(WITH_AUTHOR)
                .eq("is_public", True)
                .gte("created_at", since.isoformat())
                .order("cheer_count", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error fetching popular submissions: {describe_error(e)}")
            if not self.use_fallback:
                raise RepositoryError(f"Failed to fetch popular submissions: {e}") from e
            return [s for s in mock_submissions() if s.is_popular][:limit]
        return [CreativeSubmission.from_row(row) for row in response.data or []]

    # =========================================================================
    # Internals
    # =========================================================================

    def _current_user(self):
        response = self._client.auth.get_user()
        user = response.user if response else None
        if user is None:
            raise RepositoryError("User not authenticated")
        return user

    def _rpc(self, name: str, submission_id: str, action: str) -> None:
        try:
            self._client.rpc(name, {"submission_id": submission_id}).execute()
        except Exception as e:
            logger.error(f"Error calling {name}: {describe_error(e)}")
            raise RepositoryError(f"Failed to {action}: {e}") from e
