"""Provider-agnostic assistant models and chat-completion wire types."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Provider(str, Enum):
    """Backend strategy used to answer prompts."""

    FOUNDATION_MODELS = "foundation_models"
    OPENROUTER = "openrouter"
    LOCAL_STUB = "local_stub"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @classmethod
    def from_identifier(cls, value: str | None) -> Provider:
        """Parse a persisted identifier, defaulting to the on-device provider."""
        try:
            return cls(value)
        except ValueError:
            return cls.FOUNDATION_MODELS


_DISPLAY_NAMES = {
    Provider.FOUNDATION_MODELS: "Apple Intelligence",
    Provider.OPENROUTER: "OpenRouter",
    Provider.LOCAL_STUB: "Local Stub",
}

_DESCRIPTIONS = {
    Provider.FOUNDATION_MODELS: "On-device Apple Intelligence models",
    Provider.OPENROUTER: "Cloud-based LLMs via OpenRouter",
    Provider.LOCAL_STUB: "Simple fallback for testing",
}


class AppSection(str, Enum):
    """Library sections the assistant can navigate to."""

    SERMONS = "sermons"
    LETTERS = "letters"
    SAYINGS = "sayings"


class Availability(BaseModel):
    """Whether the current provider can serve requests."""

    model_config = ConfigDict(frozen=True)

    available: bool
    reason: str | None = None

    @classmethod
    def ok(cls) -> Availability:
        return cls(available=True)

    @classmethod
    def unavailable(cls, reason: str | None = None) -> Availability:
        return cls(available=False, reason=reason)


class AssistantAction(BaseModel):
    """Command emitted by the assistant, optionally carrying a boolean."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Unknown commands are carried through and ignored when routed.
    command: str
    value: bool | None = Field(default=None, alias="bool")


class PartialTurn(BaseModel):
    """Latest known state of an in-progress assistant reply."""

    model_config = ConfigDict(frozen=True)

    reply: str | None = None
    search_results: list[str] | None = None
    action: AssistantAction | None = None


class GeneratedAction(BaseModel):
    """Action portion of an on-device structured snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    command: str | None = None
    value: bool | None = Field(default=None, alias="bool")


class GeneratedTurn(BaseModel):
    """Partially generated structured snapshot from the on-device model."""

    reply: str | None = None
    action: GeneratedAction | None = None
    search_results: list[str] | None = None


class ChatMessage(BaseModel):
    """Single chat message."""

    role: Literal["system", "user", "assistant"]
    content: str


class ChatCompletionRequest(BaseModel):
    """Body of a chat-completions call."""

    model: str
    messages: list[ChatMessage]
    max_tokens: int
    temperature: float


class CompletionMessage(BaseModel):
    content: str
    role: str


class CompletionChoice(BaseModel):
    message: CompletionMessage
    finish_reason: str | None = None


class CompletionUsage(BaseModel):
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


class ChatCompletionResponse(BaseModel):
    """Subset of the chat-completions response the assistant reads."""

    choices: list[CompletionChoice]
    usage: CompletionUsage | None = None
