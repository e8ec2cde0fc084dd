"""
Challenge Generation Skill - AI-drafted creative prompts.

Asks the content generator for challenge ideas and turns them into
unsaved CreativePrompt drafts that an admin can review and publish
through ChallengeRepository.publish_challenge.
"""

import logging
import re
import uuid
from datetime import datetime, timedelta, timezone

from agent.prompts import Prompts
from core import formatters, validators
from models.ai import AIRequest
from models.creative import CreativePrompt, CreativeStyle, CreativeType
from skills.generate_content.generate_content import parse_ideas

logger = logging.getLogger(__name__)

# Sentence punctuation followed by whitespace; "2.5" and "10:30" stay whole
_SENTENCE_END = re.compile(r"[.:!?](?=\s|$)")

# Default AI style suggested for each medium
TYPE_STYLES = {
    CreativeType.PHOTO: CreativeStyle.FANTASY,
    CreativeType.VIDEO: CreativeStyle.CINEMATIC,
    CreativeType.TEXT: CreativeStyle.STORY,
    CreativeType.AUDIO: CreativeStyle.POEM,
    CreativeType.MIXED: CreativeStyle.CREATIVE,
}


class ChallengeGenerator:
    """
    Draft daily challenges with any content generator backend.

    Usage:
        gen = ChallengeGenerator(ContentGenerator())
        drafts = await gen.draft_challenges(CreativeType.TEXT, count=3)
    """

    def __init__(self, content_generator):
        self.content_generator = content_generator

    async def generate_challenge_ideas(
        self,
        creative_type: CreativeType = CreativeType.MIXED,
        count: int = 5,
    ) -> list[str]:
        """Return exactly `count` challenge idea strings."""
        request = AIRequest(
            prompt=Prompts.CHALLENGE_IDEAS.format(
                count=count, type_name=creative_type.display_name
            ),
            style="creative",
            temperature=0.9,
            max_tokens=800,
            top_p=0.95,
        )
        response = await self.content_generator.generate_content(request)
        ideas = parse_ideas(response.content, count)
        logger.info(f"Generated {len(ideas)} {creative_type.value} challenge ideas")
        return ideas

    async def draft_challenges(
        self,
        creative_type: CreativeType = CreativeType.TEXT,
        count: int = 3,
        duration_days: int = 1,
        difficulty: int = 3,
    ) -> list[CreativePrompt]:
        """Turn generated ideas into inactive CreativePrompt drafts."""
        ideas = await self.generate_challenge_ideas(creative_type, count)
        now = datetime.now(timezone.utc)
        style = TYPE_STYLES[creative_type]

        return [
            CreativePrompt(
                id=str(uuid.uuid4()),
                title=self._draft_title(idea, creative_type),
                type=creative_type,
                description=self._draft_description(idea),
                ai_style=style.value,
                tags=[creative_type.value, style.value, "ai-drafted"],
                difficulty=difficulty,
                created_at=now,
                expires_at=now + timedelta(days=duration_days),
                is_active=False,
            )
            for idea in ideas
        ]

    @classmethod
    def _draft_title(cls, idea: str, creative_type: CreativeType) -> str:
        title = cls._title_from_idea(idea)
        error = validators.challenge_title_validator(title)
        if error:
            logger.warning(f"Draft title {title!r} rejected ({error}), using type name")
            return creative_type.display_name
        return title

    @staticmethod
    def _draft_description(idea: str) -> str:
        if validators.challenge_description_validator(idea):
            return formatters.shorten(idea, 499)
        return idea

    @staticmethod
    def _title_from_idea(idea: str, max_words: int = 6) -> str:
        """
        First sentence of the idea, capped to `max_words` words.

        Falls back to the opening words of the whole idea when the first
        sentence is too short to be a title ("Mr. Fox ..." -> not "Mr").
        """
        first = _SENTENCE_END.split(idea.strip(), maxsplit=1)[0].strip()
        if validators.is_valid_challenge_title(first) and len(first.split()) <= max_words:
            return first
        if len(first) < 5:
            first = idea.strip()
        words = first.split()
        title = " ".join(words[:max_words])
        if len(words) > max_words:
            title += "…"
        return formatters.shorten(title, 99)
