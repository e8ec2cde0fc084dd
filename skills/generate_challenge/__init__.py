"""Challenge generation skill - AI-drafted creative prompts."""
from .generate_challenge import ChallengeGenerator

__all__ = ["ChallengeGenerator"]
