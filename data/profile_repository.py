"""
Profile repository - reads and writes the `profiles` table.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from models.profile import Profile
from .errors import RepositoryError, describe_error

logger = logging.getLogger(__name__)

PUBLIC_PROFILE_COLUMNS = "id, full_name, avatar_url, bio, streak_count, total_submissions"


def engagement_score(profile: dict, recent_activity: int) -> float:
    """Weighted mix of streak, submissions, cheers and recent activity."""
    return round(
        (profile.get("streak_count") or 0) * 0.3
        + (profile.get("total_submissions") or 0) * 0.4
        + (profile.get("total_cheers_received") or 0) * 0.2
        + recent_activity * 0.1,
        2,
    )


class ProfileRepository:
    def __init__(self, client):
        self._client = client

    def get_profile(self, user_id: str) -> Optional[Profile]:
        try:
            response = (
                self._client.table("profiles")
                .select("*")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error fetching profile {user_id}: {describe_error(e)}")
            return None
        return Profile.from_row(response.data[0]) if response.data else None

    def update_profile(self, user_id: str, **fields) -> Optional[Profile]:
        """
        Update the given columns (None values are ignored).

        `display_name` is accepted as an alias for `full_name`.
        """
        if "display_name" in fields:
            fields["full_name"] = fields.pop("display_name")
        updates = {k: v for k, v in fields.items() if v is not None}
        updates["updated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            response = (
                self._client.table("profiles")
                .update(updates)
                .eq("id", user_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error updating profile: {describe_error(e)}")
            raise RepositoryError(f"Failed to update profile: {e}") from e

        logger.info(f"Profile updated for user: {user_id}")
        return Profile.from_row(response.data[0]) if response.data else None

    def get_user_stats(self, user_id: str) -> dict:
        """
        Profile counters plus figures computed from the user's submissions.

        Zeroed when the queries fail.
        """
        try:
            profile_response = (
                self._client.table("profiles")
                .select("streak_count, total_submissions, total_cheers_received")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
            submissions_response = (
                self._client.table("creative_submissions")
                .select("id, created_at, cheer_count, comment_count")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error fetching user stats: {describe_error(e)}")
            return {
                "streak_count": 0,
                "total_submissions": 0,
                "total_cheers_received": 0,
                "submission_count": 0,
                "total_cheers": 0,
                "total_comments": 0,
                "engagement_score": 0.0,
            }

        profile = profile_response.data[0] if profile_response.data else {}
        submissions = submissions_response.data or []
        return {
            "streak_count": profile.get("streak_count") or 0,
            "total_submissions": profile.get("total_submissions") or 0,
            "total_cheers_received": profile.get("total_cheers_received") or 0,
            "submission_count": len(submissions),
            "total_cheers": sum(s.get("cheer_count") or 0 for s in submissions),
            "total_comments": sum(s.get("comment_count") or 0 for s in submissions),
            "engagement_score": engagement_score(profile, min(len(submissions), 10)),
        }

    def search_users(self, query: str, limit: int = 20) -> list[dict]:
        try:
            response = (
                self._client.table("profiles")
                .select(PUBLIC_PROFILE_COLUMNS)
                .ilike("full_name", f"%{query}%")
                .order("streak_count", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error searching users: {describe_error(e)}")
            return []
        return response.data or []

    def get_top_creators(self, limit: int = 10) -> list[dict]:
        try:
            response = (
                self._client.table("profiles")
                .select(PUBLIC_PROFILE_COLUMNS)
                .order("total_submissions", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error fetching top creators: {describe_error(e)}")
            return []
        return response.data or []

    def update_user_streak(self, user_id: str) -> bool:
        """Run the `update_user_streak` RPC. Returns False on failure."""
        try:
            self._client.rpc("update_user_streak", {"user_id": user_id}).execute()
        except Exception as e:
            logger.error(f"Error updating streak: {describe_error(e)}")
            return False
        logger.info(f"Streak updated for user: {user_id}")
        return True
