"""
Persistence layer - Supabase-backed services and repositories.
"""

from .errors import AuthError, RepositoryError, describe_error
from .supabase_client import SupabaseClientManager
from .auth_service import AuthService
from .profile_repository import ProfileRepository
from .challenge_repository import ChallengeRepository
from .submission_repository import SubmissionRepository

__all__ = [
    "AuthError",
    "RepositoryError",
    "describe_error",
    "SupabaseClientManager",
    "AuthService",
    "ProfileRepository",
    "ChallengeRepository",
    "SubmissionRepository",
]
