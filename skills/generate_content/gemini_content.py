"""
Content Generation Skill - Gemini backend.

Drop-in alternative to the SparkStudio content API, built on Gemini 3:
- Text via GEMINI_MODEL, framed by the SparkStudio system prompt
- Images via GEMINI_IMAGE_MODEL, saved under OUTPUT_DIR/images

Exposes the same async interface as ContentGenerator so the controller
does not care which one it holds.
"""

import asyncio
import logging
import time
import uuid
from io import BytesIO
from typing import AsyncIterator

from google import genai
from google.genai import types
from PIL import Image

from config import (
    GEMINI_MODEL,
    GEMINI_IMAGE_MODEL,
    OUTPUT_DIR,
    MAX_RETRIES,
    RETRY_DELAY_SECONDS,
    VARIATION_BASE_TEMPERATURE,
    VARIATION_DELAY_SECONDS,
    BATCH_DELAY_SECONDS,
    get_gemini_client,
)
from agent.prompts import Prompts
from models.ai import AIException, AIModel, AIRequest, AIResponse
from .generate_content import fallback_ideas, fallback_response, parse_ideas

logger = logging.getLogger(__name__)


class GeminiContentGenerator:
    """
    Generate creative content with Gemini.

    Responses are tagged AIModel.CUSTOM with the Gemini model id kept in
    metadata, since the SparkStudio model list has no Gemini entry.
    """

    def __init__(self, client: genai.Client = None):
        """Initialize with Gemini client."""
        self.client = client or get_gemini_client()
        self.model = GEMINI_MODEL
        self.image_model = GEMINI_IMAGE_MODEL
        self.output_dir = OUTPUT_DIR / "images"
        self.output_dir.mkdir(parents=True, exist_ok=True)

    # =========================================================================
    # Core generation
    # =========================================================================

    async def generate_content(self, request: AIRequest) -> AIResponse:
        logger.info(f"Gemini generation: {request.prompt[:60]}")
        try:
            response = await asyncio.to_thread(
                self._generate_with_retry,
                self.model,
                request.prompt,
                self._text_config(request),
            )
        except Exception as e:
            logger.error(f"Gemini generation failed: {e}")
            raise AIException(
                f"Failed to generate content: {e}", error_code="GENERATION_ERROR"
            ) from e

        return self._to_response(response)

    async def stream_content(self, request: AIRequest) -> AsyncIterator[AIResponse]:
        """Yield one AIResponse per streamed Gemini chunk."""
        try:
            stream = await asyncio.to_thread(
                self.client.models.generate_content_stream,
                model=self.model,
                contents=request.prompt,
                config=self._text_config(request),
            )
            chunks = iter(stream)
            while True:
                chunk = await asyncio.to_thread(next, chunks, None)
                if chunk is None:
                    break
                if chunk.text:
                    yield self._to_response(chunk)
        except Exception as e:
            logger.error(f"Gemini stream failed: {e}")
            raise AIException(
                f"Stream generation failed: {e}", error_code="STREAM_ERROR"
            ) from e

    async def generate_image(self, prompt: str, style: str = "creative") -> str:
        """Generate an image and return the saved file path."""
        config = types.GenerateContentConfig(response_modalities=["TEXT", "IMAGE"])
        try:
            response = await asyncio.to_thread(
                self._generate_with_retry,
                self.image_model,
                Prompts.image_prompt(prompt, style),
                config,
            )
        except Exception as e:
            logger.error(f"Image generation failed: {e}")
            raise AIException(
                f"Image generation failed: {e}", error_code="IMAGE_ERROR"
            ) from e

        for part in response.parts or []:
            if getattr(part, "inline_data", None) is not None:
                image = Image.open(BytesIO(part.inline_data.data))
                output_path = self.output_dir / f"{uuid.uuid4().hex[:8]}.png"
                image.save(str(output_path))
                logger.info(f"Saved image: {output_path}")
                return str(output_path)

        raise AIException("No image in Gemini response", error_code="IMAGE_ERROR")

    # =========================================================================
    # Helpers
    # =========================================================================

    async def generate_variations(
        self, request: AIRequest, count: int = 3
    ) -> list[AIResponse]:
        variations = []
        for i in range(count):
            variation_request = request.copy_with(
                temperature=round(VARIATION_BASE_TEMPERATURE + i * 0.1, 2)
            )
            try:
                variations.append(await self.generate_content(variation_request))
            except AIException as e:
                logger.warning(f"Variation {i} failed: {e}")
            if i < count - 1:
                await asyncio.sleep(VARIATION_DELAY_SECONDS)
        return variations

    async def enhance_text(self, text: str, style: str = "creative") -> AIResponse:
        return await self.generate_content(
            AIRequest(
                prompt=Prompts.ENHANCE_TEXT.format(text=text),
                style=style,
                temperature=0.7,
                max_tokens=500,
            )
        )

    async def generate_ideas(self, theme: str, count: int = 5) -> list[str]:
        request = AIRequest(
            prompt=Prompts.GENERATE_IDEAS.format(count=count, theme=theme),
            temperature=0.9,
            max_tokens=800,
        )
        try:
            response = await self.generate_content(request)
        except AIException as e:
            logger.error(f"Idea generation failed: {e}")
            return fallback_ideas(theme, count)
        return parse_ideas(response.content, count)

    async def batch_generate(self, requests_: list[AIRequest]) -> list[AIResponse]:
        results = []
        for request in requests_:
            try:
                results.append(await self.generate_content(request))
            except AIException as e:
                logger.warning(f"Batch item failed, using fallback: {e}")
                results.append(fallback_response(request))
            await asyncio.sleep(BATCH_DELAY_SECONDS)
        return results

    async def generate_image_prompt(self, idea: str, style: str = "creative") -> str:
        response = await self.generate_content(
            AIRequest(
                prompt=Prompts.IMAGE_PROMPT_REQUEST.format(idea=idea),
                style=style,
                max_tokens=150,
            )
        )
        return Prompts.image_prompt(response.content, style)

    def close(self) -> None:
        pass

    # =========================================================================
    # Internals
    # =========================================================================

    def _text_config(self, request: AIRequest) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=Prompts.system_prompt(request.style),
            temperature=request.temperature,
            top_p=request.top_p,
            max_output_tokens=request.max_tokens,
        )

    def _to_response(self, response) -> AIResponse:
        usage = getattr(response, "usage_metadata", None)
        tokens = getattr(usage, "total_token_count", None) or 0
        return AIResponse(
            content=response.text or "",
            model=AIModel.CUSTOM,
            tokens_used=tokens,
            metadata={"provider": "gemini", "model_id": self.model},
        )

    def _generate_with_retry(self, model: str, contents, config):
        """Generate content with exponential backoff on quota errors."""
        for attempt in range(MAX_RETRIES):
            try:
                return self.client.models.generate_content(
                    model=model,
                    contents=contents,
                    config=config,
                )
            except Exception as e:
                error_msg = str(e).lower()

                # Check for rate limit / quota errors
                if "resource exhausted" in error_msg or "quota" in error_msg:
                    if attempt < MAX_RETRIES - 1:
                        wait_time = RETRY_DELAY_SECONDS * (2 ** attempt)
                        logger.warning(f"Rate limited, waiting {wait_time}s... (attempt {attempt + 1}/{MAX_RETRIES})")
                        time.sleep(wait_time)
                        continue
                    logger.error(f"Rate limit exceeded after {MAX_RETRIES} retries")
                raise
