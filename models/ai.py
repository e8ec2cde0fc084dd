"""
AI request/response models.

An AIRequest goes to a content generator (SparkStudio API, Gemini or the
mock), which answers with an AIResponse. Failures surface as AIException
with a machine-readable error code.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from .creative import parse_timestamp


class AIModel(Enum):
    """Models offered by the SparkStudio content API."""

    LLAMA3 = ("llama-3-70b", "Meta Llama 3", "Most capable model")
    LLAMA2 = ("llama-2-70b", "Meta Llama 2", "Balanced performance")
    GPT4 = ("gpt-4", "GPT-4", "Advanced reasoning")
    GPT35 = ("gpt-3.5-turbo", "GPT-3.5", "Fast and efficient")
    CUSTOM = ("custom", "Custom Model", "Specialized model")

    def __new__(cls, value: str, display_name: str, description: str):
        obj = object.__new__(cls)
        obj._value_ = value
        obj.display_name = display_name
        obj.description = description
        return obj

    @classmethod
    def from_value(cls, value: Optional[str]) -> "AIModel":
        """Look up a model by wire id, defaulting to Llama 3."""
        for model in cls:
            if model.value == value:
                return model
        return cls.LLAMA3


@dataclass(frozen=True)
class AIRequest:
    """Parameters for a single generation call."""

    prompt: str
    style: str = "creative"
    temperature: float = 0.8
    max_tokens: int = 500
    top_p: float = 0.9
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0
    model: Optional[AIModel] = None

    def copy_with(self, **changes) -> "AIRequest":
        return replace(self, **changes)

    def to_body(self, stream: bool = False) -> dict:
        """Serialize to the content API's request body."""
        return {
            "model": self.model.value if self.model else AIModel.LLAMA3.value,
            "prompt": self.prompt,
            "style": self.style,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "stream": stream,
            "parameters": {
                "top_p": self.top_p,
                "frequency_penalty": self.frequency_penalty,
                "presence_penalty": self.presence_penalty,
            },
        }


@dataclass
class AIResponse:
    """Generated content plus usage metadata."""

    content: str
    model: AIModel = AIModel.LLAMA3
    tokens_used: int = 0
    confidence: float = 0.9
    generated_at: datetime = field(default_factory=datetime.now)
    metadata: dict = field(default_factory=dict)

    @property
    def is_high_confidence(self) -> bool:
        return self.confidence > 0.8

    def to_dict(self) -> dict:
        return {
            "content": self.content,
            "model": self.model.value,
            "tokens_used": self.tokens_used,
            "confidence": self.confidence,
            "generated_at": self.generated_at.isoformat(),
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AIResponse":
        """
        Build a response from API JSON.

        Missing fields take the API's documented defaults; generated_at
        falls back to now when the server does not send one.
        """
        generated_at = data.get("generated_at")
        confidence = data.get("confidence")
        return cls(
            content=data.get("content") or "",
            model=AIModel.from_value(data.get("model")),
            tokens_used=int(data.get("tokens_used") or 0),
            confidence=float(confidence) if confidence is not None else 0.9,
            generated_at=parse_timestamp(generated_at) or datetime.now(),
            metadata=dict(data.get("metadata") or {}),
        )


class AIException(Exception):
    """A content generation failure."""

    def __init__(self, message: str, error_code: str):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.timestamp = datetime.now()

    def __str__(self) -> str:
        return f"AIException[{self.error_code}]: {self.message}"
