"""
AI controller - observable state around a content generator.

The controller is what the front end binds to. It holds:
- current_response / is_generating / error for the active request
- history: last 50 responses, newest first
- recent_prompts: last 10 distinct prompts, newest first

Every state change is pushed to registered listeners. One call is in
flight per method invocation; there is no cancellation or locking, the
single asyncio loop serializes everything.
"""

import asyncio
import logging
from typing import AsyncIterator, Callable, Optional

from config import (
    DEFAULT_STYLE,
    DEFAULT_TEMPERATURE,
    DEFAULT_MAX_TOKENS,
    VARIATION_TEMPERATURE,
    HISTORY_LIMIT,
    RECENT_PROMPTS_LIMIT,
)
from agent.prompts import Prompts
from models.ai import AIModel, AIRequest, AIResponse

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class AIController:
    """
    State holder for AI generation, notifying listeners on every change.

    `ai_service` is any content generator (ContentGenerator,
    GeminiContentGenerator, MockContentGenerator).
    """

    def __init__(self, ai_service):
        self._ai_service = ai_service
        self._listeners: list[Listener] = []

        self._current_response: Optional[AIResponse] = None
        self._is_generating = False
        self._error: Optional[str] = None
        self._history: list[AIResponse] = []
        self._recent_prompts: list[str] = []

    # =========================================================================
    # State
    # =========================================================================

    @property
    def current_response(self) -> Optional[AIResponse]:
        return self._current_response

    @property
    def is_generating(self) -> bool:
        return self._is_generating

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def history(self) -> list[AIResponse]:
        return list(self._history)

    @property
    def recent_prompts(self) -> list[str]:
        return list(self._recent_prompts)

    @property
    def has_history(self) -> bool:
        return bool(self._history)

    def snapshot(self) -> dict:
        """JSON-ready view of the controller state."""
        return {
            "is_generating": self._is_generating,
            "error": self._error,
            "current_response": (
                self._current_response.to_dict() if self._current_response else None
            ),
            "history": [r.to_dict() for r in self._history],
            "recent_prompts": list(self._recent_prompts),
        }

    # =========================================================================
    # Listeners
    # =========================================================================

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify_listeners(self) -> None:
        for listener in list(self._listeners):
            listener()

    # =========================================================================
    # Generation
    # =========================================================================

    async def generate_content(
        self,
        prompt: str,
        style: str = DEFAULT_STYLE,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        model: Optional[AIModel] = None,
    ) -> None:
        """
        Generate content and record it.

        On success the response becomes current and is added to history;
        the prompt joins recent prompts. On failure the error text is
        stored and the exception re-raised. Listeners are notified at the
        start, after success or failure, and again when is_generating
        drops back to False.
        """
        self._start()
        try:
            request = AIRequest(
                prompt=prompt,
                style=style,
                temperature=temperature,
                max_tokens=max_tokens,
                model=model,
            )
            response = await self._ai_service.generate_content(request)

            self._current_response = response
            self._add_to_history(response)
            self._add_to_recent_prompts(prompt)
            self.notify_listeners()
        except Exception as e:
            self._fail(e)
            raise
        finally:
            self._finish()

    def stream_content(
        self,
        prompt: str,
        style: str = DEFAULT_STYLE,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        model: Optional[AIModel] = None,
    ) -> AsyncIterator[AIResponse]:
        """Pass-through stream; does not touch controller state."""
        request = AIRequest(
            prompt=prompt,
            style=style,
            temperature=temperature,
            max_tokens=max_tokens,
            model=model,
        )
        return self._ai_service.stream_content(request)

    async def generate_variations(
        self,
        prompt: str,
        style: str = DEFAULT_STYLE,
        count: int = 3,
    ) -> list[AIResponse]:
        """Generate variations. Recorded in recent prompts, not history."""
        self._start()
        try:
            request = AIRequest(
                prompt=prompt,
                style=style,
                temperature=VARIATION_TEMPERATURE,
            )
            variations = await self._ai_service.generate_variations(request, count=count)

            self._add_to_recent_prompts(prompt)
            self.notify_listeners()
            return variations
        except Exception as e:
            self._fail(e)
            raise
        finally:
            self._finish()

    async def generate_image(self, prompt: str, style: str = DEFAULT_STYLE) -> str:
        """Generate an image; returns its URL (or file path for Gemini)."""
        self._start()
        try:
            image_url = await self._ai_service.generate_image(prompt, style=style)
            self._add_to_recent_prompts(prompt)
            return image_url
        except Exception as e:
            self._fail(e)
            raise
        finally:
            self._finish()

    async def enhance_text(self, text: str, style: str = DEFAULT_STYLE) -> None:
        await self.generate_content(prompt=text, style=style)

    async def generate_ideas(self, theme: str, count: int = 5) -> list[str]:
        self._start()
        try:
            ideas = await self._ai_service.generate_ideas(theme, count=count)
            self._add_to_recent_prompts(Prompts.IDEAS_RECENT_PROMPT.format(theme=theme))
            return ideas
        except Exception as e:
            self._fail(e)
            raise
        finally:
            self._finish()

    async def mock_generate_content(self, prompt: str, delay: float = 2.0) -> None:
        """Fake a generation locally (development only)."""
        self._is_generating = True
        self.notify_listeners()

        await asyncio.sleep(delay)

        self._current_response = AIResponse(
            content=Prompts.MOCK_RESPONSE.format(prompt=prompt),
            model=AIModel.LLAMA3,
            tokens_used=150,
            confidence=0.95,
        )
        self._add_to_history(self._current_response)
        self._add_to_recent_prompts(prompt)

        self._is_generating = False
        self.notify_listeners()

    # =========================================================================
    # Clearing
    # =========================================================================

    def clear_response(self) -> None:
        self._current_response = None
        self._error = None
        self.notify_listeners()

    def clear_error(self) -> None:
        self._error = None
        self.notify_listeners()

    def clear_history(self) -> None:
        self._history.clear()
        self.notify_listeners()

    def clear_recent_prompts(self) -> None:
        self._recent_prompts.clear()
        self.notify_listeners()

    # =========================================================================
    # Internals
    # =========================================================================

    def _start(self) -> None:
        self._is_generating = True
        self._error = None
        self.notify_listeners()

    def _fail(self, exc: Exception) -> None:
        logger.error(f"AI request failed: {exc}")
        self._error = str(exc)
        self.notify_listeners()

    def _finish(self) -> None:
        self._is_generating = False
        self.notify_listeners()

    def _add_to_history(self, response: AIResponse) -> None:
        self._history.insert(0, response)
        del self._history[HISTORY_LIMIT:]

    def _add_to_recent_prompts(self, prompt: str) -> None:
        # Already-seen prompts keep their position
        if prompt in self._recent_prompts:
            return
        self._recent_prompts.insert(0, prompt)
        del self._recent_prompts[RECENT_PROMPTS_LIMIT:]
