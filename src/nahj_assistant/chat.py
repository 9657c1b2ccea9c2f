"""Conversation transcript driven by the assistant service."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal

from nahj_assistant.actions import classify_prompt
from nahj_assistant.errors import NahjAssistantError
from nahj_assistant.service import AssistantService
from nahj_assistant.types import AssistantAction, PartialTurn

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ChatEntry:
    """One line of the transcript."""

    role: Literal["user", "assistant"]
    text: str = ""
    search_results: list[str] | None = None
    action: AssistantAction | None = None

    def apply(self, turn: PartialTurn) -> None:
        """Merge a partial turn, keeping the latest non-null value per field."""
        if turn.reply is not None:
            self.text = turn.reply
        if turn.search_results is not None:
            self.search_results = list(turn.search_results)
        if turn.action is not None:
            self.action = turn.action


@dataclass
class ChatSession:
    """Sends prompts one at a time and records the replies.

    A prompt submitted while a previous reply is still streaming is ignored.
    """

    service: AssistantService
    on_update: Callable[[ChatEntry], None] | None = None
    entries: list[ChatEntry] = field(default_factory=list)
    _busy: bool = field(default=False, init=False, repr=False)

    @property
    def is_busy(self) -> bool:
        return self._busy

    async def send(self, prompt: str) -> bool:
        """Submit ``prompt``; return ``False`` when it was not accepted."""
        text = prompt.strip()
        if not text or self._busy:
            return False

        self._busy = True
        try:
            self.entries.append(ChatEntry(role="user", text=text))
            if not self.service.update_availability().available:
                self._handle_locally(text)
                return True

            placeholder = ChatEntry(role="assistant")
            self.entries.append(placeholder)
            try:
                async for turn in self.service.stream_turn(text):
                    placeholder.apply(turn)
                    self._notify(placeholder)
            except NahjAssistantError as exc:
                logger.warning("Assistant stream failed, answering locally: %s", exc)
                self.entries.remove(placeholder)
                self._handle_locally(text)
            return True
        finally:
            self._busy = False

    def _handle_locally(self, prompt: str) -> None:
        turn = classify_prompt(prompt)
        if turn.action is not None:
            self.service.router.perform(turn.action)
        entry = ChatEntry(role="assistant")
        entry.apply(turn)
        self.entries.append(entry)
        self._notify(entry)

    def _notify(self, entry: ChatEntry) -> None:
        if self.on_update is not None:
            self.on_update(entry)
