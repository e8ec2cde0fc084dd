"""
Supabase client manager.

One process-wide manager owns the Supabase client. Call `initialize()`
once at startup (the API server does this lazily from config), then hand
`manager.client` to the repositories.
"""

import logging
from typing import Optional

from supabase import Client, create_client

from core import logger as app_log
from .errors import describe_error

logger = logging.getLogger(__name__)


class SupabaseClientManager:
    """Process-wide holder for the Supabase client."""

    _instance: Optional["SupabaseClientManager"] = None

    def __new__(cls):
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._client = None
            instance._url = None
            cls._instance = instance
        return cls._instance

    def initialize(self, url: str, key: str, client: Optional[Client] = None) -> None:
        """
        Create the client (or adopt `client`, e.g. a test double).

        Raises:
            RuntimeError: if the client cannot be created.
        """
        try:
            self._client = client or create_client(url, key)
        except Exception as e:
            logger.error(f"Failed to initialize Supabase: {e}")
            raise RuntimeError(f"Supabase initialization failed: {e}") from e
        self._url = url
        app_log.success("Supabase client initialized", tag="Supabase")

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> Client:
        if self._client is None:
            raise RuntimeError(
                "Supabase client not initialized. Call initialize() first."
            )
        return self._client

    @property
    def auth(self):
        return self.client.auth

    @property
    def storage(self):
        return self.client.storage

    def check_health(self) -> bool:
        """Run a trivial query; False on any failure."""
        try:
            response = self.client.table("health_check").select("*").limit(1).execute()
        except Exception as e:
            logger.error(f"Health check failed: {describe_error(e)}")
            return False
        return bool(response.data)

    @property
    def config(self) -> dict:
        authenticated = False
        if self._client is not None:
            try:
                authenticated = self._client.auth.get_session() is not None
            except Exception as e:
                logger.warning(f"Could not read auth session: {e}")
        return {
            "url": "configured" if self._url else "not configured",
            "is_initialized": self.is_initialized,
            "auth_state": "authenticated" if authenticated else "unauthenticated",
        }

    def reset(self) -> None:
        """Sign out (best effort) and forget the client."""
        if self._client is not None:
            try:
                self._client.auth.sign_out()
            except Exception as e:
                logger.warning(f"Error clearing session: {e}")
        self._client = None
        self._url = None
        logger.info("Supabase client reset")
