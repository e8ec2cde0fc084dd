"""Content generation skill - SparkStudio API, Gemini and mock backends."""
from .generate_content import (
    ContentGenerator,
    error_code_for_status,
    parse_ideas,
)
from .gemini_content import GeminiContentGenerator
from .mock_content import MockContentGenerator

__all__ = [
    "ContentGenerator",
    "GeminiContentGenerator",
    "MockContentGenerator",
    "error_code_for_status",
    "parse_ideas",
]
