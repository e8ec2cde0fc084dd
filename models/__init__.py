"""
Data models for SparkStudio.

- AI request/response shapes exchanged with the content generators
- Creative prompts ("challenges") and submissions stored in Supabase
- User profiles
"""

from .ai import AIModel, AIRequest, AIResponse, AIException
from .creative import CreativeType, CreativeStyle, CreativePrompt, CreativeSubmission
from .profile import Profile

__all__ = [
    "AIModel",
    "AIRequest",
    "AIResponse",
    "AIException",
    "CreativeType",
    "CreativeStyle",
    "CreativePrompt",
    "CreativeSubmission",
    "Profile",
]
