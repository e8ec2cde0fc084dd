"""
Authentication Service - email/password auth on Supabase.

Wraps `client.auth` and keeps the `profiles` row in step with the auth
user: a profile is created on sign up and `last_login_at` is stamped on
sign in. Profile bookkeeping failures are logged and never block auth.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from config import AUTH_REDIRECT_URL
from core import logger as app_log
from models.profile import Profile
from .errors import AuthError

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuthService:
    """
    Sign users up, in and out.

    Usage:
        auth = AuthService(manager.client)
        user = auth.sign_in("me@example.com", "Secret1!")
    """

    def __init__(self, client):
        self._client = client

    # =========================================================================
    # Session state
    # =========================================================================

    @property
    def current_user(self):
        response = self._client.auth.get_user()
        return response.user if response else None

    @property
    def current_session(self):
        return self._client.auth.get_session()

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    # =========================================================================
    # Account lifecycle
    # =========================================================================

    def sign_up(
        self,
        email: str,
        password: str,
        display_name: str,
        avatar_url: Optional[str] = None,
    ):
        """Create an account and its profile row. Returns the new user."""
        try:
            response = self._client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {
                    "data": {
                        "full_name": display_name,
                        "avatar_url": avatar_url,
                        "created_at": _now_iso(),
                    },
                    "email_redirect_to": AUTH_REDIRECT_URL,
                },
            })
        except Exception as e:
            logger.error(f"Sign up failed: {e}")
            raise AuthError(f"Sign up failed: {e}") from e

        if response.user is not None:
            self._create_user_profile(response.user, display_name, avatar_url)
            app_log.user_action("sign up", {"email": email})
        return response.user

    def sign_in(self, email: str, password: str):
        try:
            response = self._client.auth.sign_in_with_password({
                "email": email,
                "password": password,
            })
        except Exception as e:
            logger.error(f"Sign in failed: {e}")
            raise AuthError(f"Sign in failed: {e}") from e

        if response.user is not None:
            self._update_last_login(response.user.id)
            app_log.user_action("sign in", {"email": email})
        return response.user

    def sign_out(self) -> None:
        try:
            self._client.auth.sign_out()
        except Exception as e:
            logger.error(f"Sign out failed: {e}")
            raise AuthError(f"Sign out failed: {e}") from e
        logger.info("User signed out")

    def reset_password(self, email: str) -> None:
        try:
            self._client.auth.reset_password_email(
                email, {"redirect_to": AUTH_REDIRECT_URL}
            )
        except Exception as e:
            logger.error(f"Password reset failed: {e}")
            raise AuthError(f"Password reset failed: {e}") from e
        logger.info(f"Password reset email sent to: {email}")

    def update_password(self, new_password: str) -> None:
        try:
            self._client.auth.update_user({"password": new_password})
        except Exception as e:
            logger.error(f"Password update failed: {e}")
            raise AuthError(f"Password update failed: {e}") from e

    def update_profile(
        self,
        display_name: str,
        bio: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> None:
        """Update the auth user's metadata."""
        if self.current_user is None:
            raise AuthError("No authenticated user")
        try:
            self._client.auth.update_user({
                "data": {
                    "full_name": display_name,
                    "bio": bio,
                    "avatar_url": avatar_url,
                    "updated_at": _now_iso(),
                }
            })
        except Exception as e:
            logger.error(f"Profile update failed: {e}")
            raise AuthError(f"Profile update failed: {e}") from e
        logger.info(f"Profile updated for: {display_name}")

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_user_profile(self) -> Optional[Profile]:
        """The signed-in user's profile row, or None."""
        user = self.current_user
        if user is None:
            return None
        try:
            response = (
                self._client.table("profiles")
                .select("*")
                .eq("id", user.id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to get user profile: {e}")
            return None
        return Profile.from_row(response.data[0]) if response.data else None

    def is_email_available(self, email: str) -> bool:
        """True when no profile uses `email`. Assumes available on error."""
        try:
            response = (
                self._client.table("profiles")
                .select("id")
                .eq("email", email)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Email availability check failed: {e}")
            return True
        return not response.data

    def verify_session(self) -> bool:
        """False when there is no session; expired sessions are signed out."""
        try:
            session = self.current_session
            if session is None:
                return False
            if session.expires_at is not None and session.expires_at < time.time():
                self.sign_out()
                return False
            return True
        except Exception as e:
            logger.error(f"Session verification failed: {e}")
            return False

    # =========================================================================
    # Profile bookkeeping
    # =========================================================================

    def _create_user_profile(self, user, display_name: str, avatar_url: Optional[str]) -> None:
        now = _now_iso()
        try:
            self._client.table("profiles").insert({
                "id": user.id,
                "email": user.email,
                "full_name": display_name or "Anonymous",
                "avatar_url": avatar_url,
                "created_at": now,
                "updated_at": now,
                "streak_count": 0,
                "total_submissions": 0,
                "total_cheers_received": 0,
            }).execute()
        except Exception as e:
            logger.warning(f"Failed to create user profile: {e}")

    def _update_last_login(self, user_id: str) -> None:
        now = _now_iso()
        try:
            self._client.table("profiles").update({
                "last_login_at": now,
                "updated_at": now,
            }).eq("id", user_id).execute()
        except Exception as e:
            logger.warning(f"Failed to update last login: {e}")
