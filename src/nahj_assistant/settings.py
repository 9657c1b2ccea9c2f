"""Runtime configuration for the assistant."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

OPENROUTER_MODELS: tuple[str, ...] = (
    "openai/gpt-4o-mini",
    "openai/gpt-4o",
    "anthropic/claude-3.5-sonnet",
    "anthropic/claude-3-haiku",
    "meta-llama/llama-3.1-8b-instruct:free",
    "google/gemini-flash-1.5",
)


class AssistantSettings(BaseSettings):
    """Tunables read from ``NAHJ_*`` environment variables or a ``.env`` file."""

    model_config = SettingsConfigDict(
        env_prefix="NAHJ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Cloud backend
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    user_agent: str = "NahjulBalaghaApp/1.0"
    request_timeout_s: float = 60.0
    max_tokens: int = 500
    temperature: float = 0.7

    # Local stub pacing
    stub_thinking_delay_s: float = 0.25
    stub_answer_delay_s: float = 0.35

    store_path: Path = Path.home() / ".nahj_assistant" / "settings.json"
    log_level: str = "WARNING"


@lru_cache
def get_settings() -> AssistantSettings:
    """Return the process-wide settings instance."""
    return AssistantSettings()


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Attach a stream handler to the package logger."""
    logger = logging.getLogger("nahj_assistant")
    if level is None:
        level = get_settings().log_level
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
    return logger
