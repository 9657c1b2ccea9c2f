"""Provider-agnostic base interfaces and helpers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from nahj_assistant.actions import ActionRouter
from nahj_assistant.types import AssistantAction, PartialTurn


class BaseProvider(ABC):
    """Abstract base class for assistant backends."""

    name: str

    def __init__(self, router: ActionRouter) -> None:
        self.router = router

    @abstractmethod
    def stream(self, prompt: str) -> AsyncIterator[PartialTurn]:
        """Return an async iterator of partial turns for ``prompt``."""
        raise NotImplementedError


class ActionGate:
    """Fire each distinct action at most once within a single stream."""

    def __init__(self, router: ActionRouter) -> None:
        self._router = router
        self._last: AssistantAction | None = None

    def observe(self, action: AssistantAction | None) -> None:
        if action is None or action == self._last:
            return
        if self._router.perform(action):
            self._last = action
