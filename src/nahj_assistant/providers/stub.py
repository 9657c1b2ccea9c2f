"""Deterministic, network-free backend."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from nahj_assistant.actions import ActionRouter, classify_prompt
from nahj_assistant.providers.base import ActionGate, BaseProvider
from nahj_assistant.types import PartialTurn

THINKING = "Thinking…"


class LocalStubProvider(BaseProvider):
    """Keyword-matching backend that fakes a short two-step stream."""

    name = "local_stub"

    def __init__(
        self,
        router: ActionRouter,
        *,
        thinking_delay_s: float = 0.25,
        answer_delay_s: float = 0.35,
    ) -> None:
        super().__init__(router)
        self._thinking_delay_s = thinking_delay_s
        self._answer_delay_s = answer_delay_s

    async def stream(self, prompt: str) -> AsyncIterator[PartialTurn]:
        await asyncio.sleep(self._thinking_delay_s)
        yield PartialTurn(reply=THINKING)

        await asyncio.sleep(self._answer_delay_s)
        turn = classify_prompt(prompt)
        ActionGate(self.router).observe(turn.action)
        yield turn
