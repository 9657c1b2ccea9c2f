"""OpenRouter chat-completions backend."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx
from pydantic import ValidationError

from nahj_assistant.actions import ActionRouter, infer_action, parse_structured_reply
from nahj_assistant.errors import ProviderError
from nahj_assistant.providers.base import ActionGate, BaseProvider
from nahj_assistant.settings import AssistantSettings
from nahj_assistant.store import AssistantState
from nahj_assistant.types import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    PartialTurn,
)

_CHAT_PATH = "chat/completions"

THINKING = "Thinking..."

SYSTEM_PROMPT = """You are a helpful assistant for a Nahj al-Balagha app. You help users search and navigate content.

Instructions:
- Keep responses concise and helpful
- When users ask to open sections (sermons, letters, sayings), acknowledge and guide them
- When users ask about themes or settings, provide appropriate guidance
- For content searches, suggest relevant terms or topics from Islamic literature

Respond in a structured JSON format:
{
    "reply": "your response text",
    "action": {"command": "action_name", "bool": true/false} (optional),
    "searchResults": ["result1", "result2", "result3"] (optional)
}

Action commands:
- "openSermons" / "openLetters" / "openSayings" for navigation
- "setDarkMode" with bool true/false for theme changes"""


class OpenRouterProvider(BaseProvider):
    """Single-shot chat completion exposed through the streaming interface."""

    name = "openrouter"
    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        router: ActionRouter,
        state: AssistantState,
        *,
        settings: AssistantSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(router)
        self._state = state
        self._settings = settings or AssistantSettings()
        base_url = self._settings.openrouter_base_url.rstrip("/") + "/"
        self._client = client or httpx.AsyncClient(
            base_url=base_url, timeout=self._settings.request_timeout_s
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def stream(self, prompt: str) -> AsyncIterator[PartialTurn]:
        yield PartialTurn(reply=THINKING)
        try:
            content = await self._complete(prompt)
            turn = self._to_turn(content)
        except Exception as exc:
            self._logger.warning("OpenRouter request failed: %s", exc)
            yield PartialTurn(reply=f"Sorry, I encountered an error: {exc}")
            return
        yield turn

    async def _complete(self, prompt: str) -> str:
        """POST the prompt and return the first choice's message content."""
        payload = self._build_payload(prompt)
        response = await self._client.post(_CHAT_PATH, headers=self._headers(), json=payload)
        data = self._json_or_error(response)

        try:
            completion = ChatCompletionResponse.model_validate(data)
        except ValidationError as exc:
            raise ProviderError(self.name, f"Malformed response: {exc.error_count()} error(s)") from exc

        if not completion.choices:
            raise ProviderError(self.name, "No response choices")

        if completion.usage is not None:
            self._logger.debug(
                "Token usage: prompt=%s completion=%s total=%s",
                completion.usage.prompt_tokens,
                completion.usage.completion_tokens,
                completion.usage.total_tokens,
            )
        return completion.choices[0].message.content

    def _to_turn(self, content: str) -> PartialTurn:
        turn = parse_structured_reply(content)
        if turn is None:
            self._logger.debug("Reply is not structured JSON, inferring action from text")
            turn = PartialTurn(reply=content, action=infer_action(content))
        ActionGate(self.router).observe(turn.action)
        return turn

    def _headers(self) -> dict[str, str]:
        # Read per request so a credential saved after startup is used.
        return {
            "Authorization": f"Bearer {self._state.credential}",
            "Content-Type": "application/json",
            "User-Agent": self._settings.user_agent,
        }

    def _build_payload(self, prompt: str) -> dict[str, Any]:
        request = ChatCompletionRequest(
            model=self._state.model,
            messages=[
                ChatMessage(role="system", content=SYSTEM_PROMPT),
                ChatMessage(role="user", content=prompt),
            ],
            max_tokens=self._settings.max_tokens,
            temperature=self._settings.temperature,
        )
        return request.model_dump()

    def _json_or_error(self, response: httpx.Response) -> Any:
        if not response.is_success:
            raise ProviderError(
                self.name,
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )
        return response.json()
