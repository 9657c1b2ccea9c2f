"""On-device structured-generation backend."""

from __future__ import annotations

import importlib
import logging
from collections.abc import AsyncIterator
from typing import Any, Protocol

from nahj_assistant.actions import ActionRouter
from nahj_assistant.availability import OnDeviceStatus
from nahj_assistant.errors import GenerationError, ProviderNotAvailable
from nahj_assistant.providers.base import ActionGate, BaseProvider
from nahj_assistant.types import AssistantAction, GeneratedAction, GeneratedTurn, PartialTurn

INSTRUCTIONS = """You are a helpful assistant for a Nahj al-Balagha app.
- Prefer concise responses.
- When the user asks to open Sermons, Letters, or Sayings, set action.command to one of: openSermons, openLetters, openSayings.
- When the user asks for dark or light mode, set action.command = "setDarkMode" and action.bool accordingly.
- For general queries, provide up to 3 short searchResults."""

SEARCH_RESULT_COUNT = 3

logger = logging.getLogger(__name__)


class StructuredModelRuntime(Protocol):
    """Local language model able to stream structured snapshots."""

    def status(self) -> tuple[OnDeviceStatus | None, str | None]:
        """Return readiness and an optional detail; ``None`` when not installed."""
        ...

    def stream_structured(self, prompt: str, instructions: str) -> AsyncIterator[GeneratedTurn]:
        """Yield progressively completed snapshots of a turn."""
        ...


class AppleFoundationRuntime:
    """Runtime backed by ``apple_fm_sdk`` (installed manually on macOS)."""

    def __init__(self) -> None:
        self._fm: Any = None
        self._model: Any = None
        self._schema: Any = None

    def _load(self) -> Any:
        if self._fm is None:
            try:
                self._fm = importlib.import_module("apple_fm_sdk")
            except ImportError as exc:
                raise ProviderNotAvailable("apple-fm-sdk is not installed") from exc
            self._model = self._fm.SystemLanguageModel()
        return self._fm

    def status(self) -> tuple[OnDeviceStatus | None, str | None]:
        try:
            self._load()
        except ProviderNotAvailable:
            return None, None
        is_available, reason = self._model.is_available()
        if is_available:
            return OnDeviceStatus.AVAILABLE, None
        return _status_from_reason(reason), str(reason) if reason is not None else None

    async def stream_structured(self, prompt: str, instructions: str) -> AsyncIterator[GeneratedTurn]:
        fm = self._load()
        session = fm.LanguageModelSession(model=self._model, instructions=instructions)
        async for snapshot in session.stream_response(prompt, generating=self._turn_schema()):
            yield _snapshot_to_turn(snapshot)

    def _turn_schema(self) -> Any:
        if self._schema is None:
            self._load()
            schema_module = importlib.import_module("nahj_assistant.providers.apple_schema")
            self._schema = schema_module.NBGeneratedTurn
        return self._schema


def _status_from_reason(reason: Any) -> OnDeviceStatus:
    text = str(reason or "").lower()
    if "eligible" in text:
        return OnDeviceStatus.DEVICE_NOT_ELIGIBLE
    if "enabled" in text:
        return OnDeviceStatus.NOT_ENABLED
    if "ready" in text or "download" in text:
        return OnDeviceStatus.MODEL_NOT_READY
    return OnDeviceStatus.OTHER


def _snapshot_to_turn(snapshot: Any) -> GeneratedTurn:
    """Coerce an SDK snapshot (object or mapping) into a ``GeneratedTurn``."""

    def field(obj: Any, name: str) -> Any:
        if obj is None:
            return None
        if isinstance(obj, dict):
            return obj.get(name)
        return getattr(obj, name, None)

    content = field(snapshot, "content")
    if content is None:
        content = snapshot

    action = field(content, "action")
    results = field(content, "searchResults")
    if results is None:
        results = field(content, "search_results")
    reply = field(content, "reply")

    return GeneratedTurn(
        reply=str(reply) if reply is not None else None,
        action=(
            GeneratedAction(command=field(action, "command"), value=field(action, "bool"))
            if action is not None
            else None
        ),
        search_results=[str(r) for r in results] if results is not None else None,
    )


class OnDeviceProvider(BaseProvider):
    """Streams structured snapshots from a local model."""

    name = "foundation_models"

    def __init__(self, router: ActionRouter, runtime: StructuredModelRuntime) -> None:
        super().__init__(router)
        self.runtime = runtime

    async def stream(self, prompt: str) -> AsyncIterator[PartialTurn]:
        gate = ActionGate(self.router)
        try:
            async for snapshot in self.runtime.stream_structured(prompt, INSTRUCTIONS):
                turn = self._to_turn(snapshot)
                gate.observe(turn.action)
                yield turn
        except GenerationError:
            raise
        except Exception as exc:
            logger.warning("On-device generation failed: %s", exc)
            raise GenerationError(str(exc)) from exc

    @staticmethod
    def _to_turn(snapshot: GeneratedTurn) -> PartialTurn:
        action = None
        # An action only exists once its command has been generated.
        if snapshot.action is not None and snapshot.action.command is not None:
            action = AssistantAction(command=snapshot.action.command, value=snapshot.action.value)
        results = snapshot.search_results
        if results is not None:
            results = results[:SEARCH_RESULT_COUNT]
        return PartialTurn(reply=snapshot.reply, search_results=results, action=action)
