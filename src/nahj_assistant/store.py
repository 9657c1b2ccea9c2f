"""Durable key-value persistence and the assistant's selection state."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from nahj_assistant.errors import UnsupportedModelError
from nahj_assistant.settings import OPENROUTER_MODELS
from nahj_assistant.types import Provider

PROVIDER_KEY = "ai_provider"
MODEL_KEY = "selected_model"
CREDENTIAL_KEY = "openrouter_api_key"

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """String key-value storage that survives restarts."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Volatile store, handy for tests and previews."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class JSONFileStore:
    """Persist a flat JSON object on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        raw = self.path.read_bytes()
        try:
            data = json.loads(raw.decode("utf-8").lstrip("\ufeff"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable settings file %s", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: expected a JSON object", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")


class AssistantState:
    """Provider, model and credential selection backed by a store.

    Values are read from the store on every access so that writes made by the
    host application elsewhere are picked up at the start of the next request.
    """

    def __init__(self, store: KeyValueStore | None = None) -> None:
        self.store: KeyValueStore = store if store is not None else MemoryStore()

    @property
    def provider(self) -> Provider:
        return Provider.from_identifier(self.store.get(PROVIDER_KEY))

    def set_provider(self, provider: Provider) -> None:
        self.store.set(PROVIDER_KEY, Provider(provider).value)

    @property
    def model(self) -> str:
        return self.store.get(MODEL_KEY) or OPENROUTER_MODELS[0]

    def set_model(self, model: str) -> None:
        if model not in OPENROUTER_MODELS:
            raise UnsupportedModelError(model)
        self.store.set(MODEL_KEY, model)

    @property
    def credential(self) -> str:
        return self.store.get(CREDENTIAL_KEY) or ""

    def set_credential(self, credential: str) -> None:
        self.store.set(CREDENTIAL_KEY, credential)
