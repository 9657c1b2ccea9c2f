"""Assistant backend for the Nahj al-Balagha reader."""

from nahj_assistant.actions import ActionRouter
from nahj_assistant.chat import ChatEntry, ChatSession
from nahj_assistant.service import AssistantService
from nahj_assistant.settings import OPENROUTER_MODELS, AssistantSettings, configure_logging
from nahj_assistant.store import AssistantState, JSONFileStore, MemoryStore
from nahj_assistant.types import AppSection, AssistantAction, Availability, PartialTurn, Provider

__all__ = [
    "ActionRouter",
    "AppSection",
    "AssistantAction",
    "AssistantService",
    "AssistantSettings",
    "AssistantState",
    "Availability",
    "ChatEntry",
    "ChatSession",
    "JSONFileStore",
    "MemoryStore",
    "OPENROUTER_MODELS",
    "PartialTurn",
    "Provider",
    "configure_logging",
]
