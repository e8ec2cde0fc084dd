"""
Content Generation Skill - SparkStudio content API client.

This skill talks to the SparkStudio AI API over HTTPS:
- POST /generate          → one piece of creative text
- POST /generate/stream   → server-sent events, one AIResponse per data line
- POST /generate/image    → image URL for a prompt

Helpers (variations, enhance, ideas, batch, image prompts) are built on
top of /generate. Blocking `requests` calls run in a worker thread so the
event loop stays free.
"""

import asyncio
import json
import logging
import re
from typing import AsyncIterator, Optional

import requests

from config import (
    SPARKSTUDIO_API_KEY,
    SPARKSTUDIO_API_URL,
    SPARKSTUDIO_API_VERSION,
    AI_REQUEST_TIMEOUT_SECONDS,
    VARIATION_BASE_TEMPERATURE,
    VARIATION_DELAY_SECONDS,
    BATCH_DELAY_SECONDS,
    IMAGE_MODEL_ID,
    IMAGE_SIZE,
    IMAGE_QUALITY,
)
from agent.prompts import Prompts
from core import logger as app_log
from models.ai import AIException, AIModel, AIRequest, AIResponse

logger = logging.getLogger(__name__)

ERROR_CODES = {
    400: "INVALID_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    429: "RATE_LIMITED",
    500: "SERVER_ERROR",
    503: "SERVICE_UNAVAILABLE",
}

# "1." / "2)" / "-" / "*" / "•" at the start of a line
_LIST_MARKER = re.compile(r"^(?:\d+[.)]|[-*•])\s*")


def error_code_for_status(status_code: int) -> str:
    return ERROR_CODES.get(status_code, "UNKNOWN_ERROR")


def error_message_from_body(status_code: int, body: str) -> str:
    """Prefer the API's own error.message; fall back to the status."""
    try:
        message = json.loads(body).get("error", {}).get("message")
    except (ValueError, AttributeError):
        message = None
    return message or f"AI service error: {status_code}"


def parse_ideas(content: str, expected_count: int) -> list[str]:
    """
    Pull a list of ideas out of free-form model output.

    Strips a leading number/bullet from each non-empty line, keeps lines
    longer than 10 characters, then pads with placeholders so exactly
    `expected_count` ideas come back.
    """
    ideas = []
    for line in content.splitlines():
        if len(ideas) >= expected_count:
            break
        if not line.strip():
            continue
        clean = _LIST_MARKER.sub("", line).strip()
        if len(clean) > 10:
            ideas.append(clean)

    while len(ideas) < expected_count:
        ideas.append(f"Creative idea {len(ideas) + 1} for theme")

    return ideas[:expected_count]


def fallback_ideas(theme: str, count: int) -> list[str]:
    return [f"Creative {theme} idea {i + 1}" for i in range(count)]


def fallback_response(request: AIRequest) -> AIResponse:
    """Stand-in response used when a batch item fails."""
    return AIResponse(
        content=Prompts.FALLBACK_RESPONSE.format(prompt=request.prompt),
        model=request.model or AIModel.LLAMA3,
        tokens_used=0,
        confidence=0.5,
        metadata={"fallback": True},
    )


class ContentGenerator:
    """
    Generate creative content through the SparkStudio content API.

    Usage:
        gen = ContentGenerator(api_key="...")
        response = await gen.generate_content(AIRequest(prompt="A cat in space"))
        print(response.content)
    """

    def __init__(
        self,
        api_key: str = None,
        base_url: str = None,
        session: Optional[requests.Session] = None,
        timeout: float = AI_REQUEST_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key or SPARKSTUDIO_API_KEY
        if not self.api_key:
            raise ValueError("SPARKSTUDIO_API_KEY not set")
        self.base_url = (base_url or SPARKSTUDIO_API_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # =========================================================================
    # Core endpoints
    # =========================================================================

    async def generate_content(self, request: AIRequest) -> AIResponse:
        """
        Generate one piece of content.

        Raises:
            AIException: with the status-derived code for API errors,
                PARSE_ERROR for unreadable bodies, GENERATION_ERROR for
                transport failures.
        """
        app_log.ai_generation("generation request", request.prompt)
        try:
            response = await asyncio.to_thread(
                self._post, "/generate", request.to_body()
            )
            if response.status_code != 200:
                raise self._error_for(response)
            result = self._parse_success(response.text)
        except AIException as e:
            logger.error(f"AI generation failed: {e}")
            raise
        except requests.RequestException as e:
            logger.error(f"AI generation failed: {e}")
            raise AIException(
                f"Failed to generate content: {e}", error_code="GENERATION_ERROR"
            ) from e

        app_log.success(f"AI generation successful: {len(result.content)} chars", tag="AI")
        return result

    async def stream_content(self, request: AIRequest) -> AsyncIterator[AIResponse]:
        """
        Stream content as server-sent events.

        Each `data: {...}` line yields an AIResponse. Lines that fail to
        parse are skipped; `data: [DONE]` ends the stream.
        """
        try:
            response = await asyncio.to_thread(
                self._post, "/generate/stream", request.to_body(stream=True), True
            )
        except requests.RequestException as e:
            logger.error(f"AI stream failed: {e}")
            raise AIException(
                f"Stream generation failed: {e}", error_code="STREAM_ERROR"
            ) from e

        if response.status_code != 200:
            error = self._error_for(response)
            logger.error(f"AI stream failed: {error}")
            raise error

        lines = response.iter_lines(decode_unicode=True)
        try:
            while True:
                try:
                    line = await asyncio.to_thread(next, lines, None)
                except requests.RequestException as e:
                    raise AIException(
                        f"Stream generation failed: {e}", error_code="STREAM_ERROR"
                    ) from e
                if line is None:
                    break
                if not line.startswith("data: "):
                    continue
                payload = line[len("data: "):].strip()
                if payload == "[DONE]":
                    break
                try:
                    data = json.loads(payload)
                except ValueError as e:
                    logger.debug(f"Skipping malformed stream line: {e}")
                    continue
                if not isinstance(data, dict):
                    logger.debug(f"Skipping non-object stream line: {payload}")
                    continue
                try:
                    chunk = AIResponse.from_dict(data)
                except (ValueError, TypeError) as e:
                    logger.debug(f"Skipping malformed stream line: {e}")
                    continue
                yield chunk
        finally:
            response.close()

    async def generate_image(self, prompt: str, style: str = "creative") -> str:
        """Generate an image and return its URL."""
        body = {
            "prompt": prompt,
            "style": style,
            "model": IMAGE_MODEL_ID,
            "size": IMAGE_SIZE,
            "quality": IMAGE_QUALITY,
        }
        app_log.ai_generation("image request", prompt)
        try:
            response = await asyncio.to_thread(self._post, "/generate/image", body)
            if response.status_code != 200:
                raise self._error_for(response)
            return response.json()["url"]
        except AIException as e:
            logger.error(f"Image generation failed: {e}")
            raise
        except (requests.RequestException, ValueError, KeyError) as e:
            logger.error(f"Image generation failed: {e}")
            raise AIException(
                f"Image generation failed: {e}", error_code="IMAGE_ERROR"
            ) from e

    # =========================================================================
    # Helpers built on /generate
    # =========================================================================

    async def generate_variations(
        self, request: AIRequest, count: int = 3
    ) -> list[AIResponse]:
        """
        Generate `count` variations with rising temperature.

        Failed variations are logged and skipped, so fewer than `count`
        results may come back.
        """
        variations = []
        for i in range(count):
            variation_request = request.copy_with(
                temperature=round(VARIATION_BASE_TEMPERATURE + i * 0.1, 2)
            )
            try:
                variations.append(await self.generate_content(variation_request))
            except AIException as e:
                logger.warning(f"Variation {i} failed: {e}")

            # Small delay to avoid rate limiting
            if i < count - 1:
                await asyncio.sleep(VARIATION_DELAY_SECONDS)

        return variations

    async def enhance_text(self, text: str, style: str = "creative") -> AIResponse:
        request = AIRequest(
            prompt=Prompts.ENHANCE_TEXT.format(text=text),
            style=style,
            temperature=0.7,
            max_tokens=500,
        )
        return await self.generate_content(request)

    async def generate_ideas(self, theme: str, count: int = 5) -> list[str]:
        """Generate `count` ideas; never raises, falls back to placeholders."""
        request = AIRequest(
            prompt=Prompts.GENERATE_IDEAS.format(count=count, theme=theme),
            style="creative",
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
        """Run requests one by one; failures become fallback responses."""
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
        request = AIRequest(
            prompt=Prompts.IMAGE_PROMPT_REQUEST.format(idea=idea),
            style=style,
            temperature=0.8,
            max_tokens=150,
        )
        response = await self.generate_content(request)
        return Prompts.image_prompt(response.content, style)

    def close(self) -> None:
        self.session.close()

    # =========================================================================
    # HTTP plumbing
    # =========================================================================

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "X-SparkStudio-Version": SPARKSTUDIO_API_VERSION,
            "User-Agent": f"SparkStudio/{SPARKSTUDIO_API_VERSION}",
        }

    def _post(self, path: str, body: dict, stream: bool = False):
        url = f"{self.base_url}{path}"
        app_log.api_request("POST", url, body)
        with app_log.timed(f"POST {path}"):
            response = self.session.post(
                url,
                headers=self._headers(),
                json=body,
                timeout=self.timeout,
                stream=stream,
            )
        app_log.api_response("POST", url, response.status_code)
        return response

    @staticmethod
    def _error_for(response) -> AIException:
        return AIException(
            error_message_from_body(response.status_code, response.text),
            error_code=error_code_for_status(response.status_code),
        )

    @staticmethod
    def _parse_success(body: str) -> AIResponse:
        """Parse a /generate body; the payload may sit under "data"."""
        try:
            payload = json.loads(body)
            data = payload.get("data") or payload
            return AIResponse.from_dict(
                {
                    "content": data.get("content"),
                    "model": data.get("model"),
                    "tokens_used": data.get("tokens_used"),
                    "confidence": data.get("confidence"),
                    "metadata": data.get("metadata"),
                }
            )
        except (ValueError, TypeError, AttributeError) as e:
            raise AIException(
                f"Failed to parse AI response: {e}", error_code="PARSE_ERROR"
            ) from e
