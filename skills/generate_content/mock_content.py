"""
Content Generation Skill - offline mock backend.

Returns canned responses after a short delay so the controller and the
HTTP surface can be exercised without API keys (AI_BACKEND=mock).
"""

import asyncio
import logging
from typing import AsyncIterator

from agent.prompts import Prompts
from models.ai import AIModel, AIRequest, AIResponse
from .generate_content import fallback_ideas

logger = logging.getLogger(__name__)


class MockContentGenerator:
    """Development stand-in with the content generator interface."""

    def __init__(self, delay_seconds: float = 0.0):
        self.delay_seconds = delay_seconds

    async def generate_content(self, request: AIRequest) -> AIResponse:
        await asyncio.sleep(self.delay_seconds)
        logger.debug(f"Mock generation for: {request.prompt}")
        return AIResponse(
            content=Prompts.MOCK_RESPONSE.format(prompt=request.prompt),
            model=request.model or AIModel.LLAMA3,
            tokens_used=150,
            confidence=0.95,
            metadata={"mock": True, "style": request.style},
        )

    async def stream_content(self, request: AIRequest) -> AsyncIterator[AIResponse]:
        yield await self.generate_content(request)

    async def generate_variations(self, request: AIRequest, count: int = 3) -> list[AIResponse]:
        return [await self.generate_content(request) for _ in range(count)]

    async def generate_image(self, prompt: str, style: str = "creative") -> str:
        await asyncio.sleep(self.delay_seconds)
        return f"https://placehold.co/1024x1024?text={style}"

    async def enhance_text(self, text: str, style: str = "creative") -> AIResponse:
        return await self.generate_content(
            AIRequest(prompt=Prompts.ENHANCE_TEXT.format(text=text), style=style)
        )

    async def generate_ideas(self, theme: str, count: int = 5) -> list[str]:
        await asyncio.sleep(self.delay_seconds)
        return fallback_ideas(theme, count)

    async def batch_generate(self, requests_: list[AIRequest]) -> list[AIResponse]:
        return [await self.generate_content(request) for request in requests_]

    async def generate_image_prompt(self, idea: str, style: str = "creative") -> str:
        return Prompts.image_prompt(idea, style)

    def close(self) -> None:
        pass
