"""Action routing and keyword-based intent handling."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from nahj_assistant.types import AppSection, AssistantAction, PartialTurn

OPEN_SERMONS = "openSermons"
OPEN_LETTERS = "openLetters"
OPEN_SAYINGS = "openSayings"
SET_DARK_MODE = "setDarkMode"

SECTION_COMMANDS: dict[str, AppSection] = {
    OPEN_SERMONS: AppSection.SERMONS,
    OPEN_LETTERS: AppSection.LETTERS,
    OPEN_SAYINGS: AppSection.SAYINGS,
}

DEMO_SEARCH_RESULTS: tuple[str, ...] = (
    "Sermon 1: The Nature of Wisdom",
    "Letter 1: To Malik al-Ashtar",
    "Saying 1: On Knowledge and Action",
)

# Checked in order, first match wins.
_FALLBACK_KEYWORDS: tuple[tuple[str, AssistantAction], ...] = (
    ("sermons", AssistantAction(command=OPEN_SERMONS)),
    ("letters", AssistantAction(command=OPEN_LETTERS)),
    ("sayings", AssistantAction(command=OPEN_SAYINGS)),
    ("dark mode", AssistantAction(command=SET_DARK_MODE, value=True)),
    ("light mode", AssistantAction(command=SET_DARK_MODE, value=False)),
)

_SECTION_PHRASES: tuple[tuple[tuple[str, str], str, str], ...] = (
    (("open sermons", "go to sermons"), "Opening Sermons…", OPEN_SERMONS),
    (("open letters", "go to letters"), "Opening Letters…", OPEN_LETTERS),
    (("open sayings", "go to sayings"), "Opening Sayings…", OPEN_SAYINGS),
)

OpenHandler = Callable[[AppSection], None]
DarkModeHandler = Callable[[bool], None]

logger = logging.getLogger(__name__)


class ActionRouter:
    """Dispatch assistant actions to the host application's callbacks."""

    def __init__(
        self,
        open_section: OpenHandler | None = None,
        set_dark_mode: DarkModeHandler | None = None,
    ) -> None:
        self.open_section = open_section
        self.set_dark_mode = set_dark_mode

    def configure(self, open_section: OpenHandler, set_dark_mode: DarkModeHandler) -> None:
        """Install the callbacks used for navigation and theme changes."""
        self.open_section = open_section
        self.set_dark_mode = set_dark_mode

    def perform(self, action: AssistantAction) -> bool:
        """Run the side effect for ``action``; return whether a callback fired."""
        section = SECTION_COMMANDS.get(action.command)
        if section is not None:
            if self.open_section is None:
                return False
            logger.debug("Opening section %s", section.value)
            self.open_section(section)
            return True

        if action.command == SET_DARK_MODE:
            if action.value is None or self.set_dark_mode is None:
                return False
            logger.debug("Setting dark mode to %s", action.value)
            self.set_dark_mode(action.value)
            return True

        logger.debug("Ignoring unknown assistant command %r", action.command)
        return False


def classify_prompt(prompt: str) -> PartialTurn:
    """Map a prompt to a canned reply using local keyword matching."""
    lower = prompt.lower()

    for phrases, reply, command in _SECTION_PHRASES:
        if any(phrase in lower for phrase in phrases):
            return PartialTurn(reply=reply, action=AssistantAction(command=command))

    if "dark mode" in lower or "light mode" in lower or "theme" in lower:
        to_dark = "dark" in lower and "light" not in lower
        return PartialTurn(
            reply="Switching to dark mode." if to_dark else "Switching to light mode.",
            action=AssistantAction(command=SET_DARK_MODE, value=to_dark),
        )

    return PartialTurn(
        reply="Here are some results I found.",
        search_results=list(DEMO_SEARCH_RESULTS),
    )


def infer_action(text: str) -> AssistantAction | None:
    """Guess an action from unstructured model output."""
    lower = text.lower()
    for keyword, action in _FALLBACK_KEYWORDS:
        if keyword in lower:
            return action
    return None


def parse_structured_reply(content: str) -> PartialTurn | None:
    """Parse a JSON reply object; ``None`` when ``content`` is not one."""
    try:
        parsed: Any = json.loads(content)
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(parsed, dict):
        return None

    reply = parsed.get("reply")
    if not isinstance(reply, str):
        reply = None

    action = None
    action_obj = parsed.get("action")
    if isinstance(action_obj, dict) and isinstance(action_obj.get("command"), str):
        flag = action_obj.get("bool")
        action = AssistantAction(
            command=action_obj["command"],
            value=flag if isinstance(flag, bool) else None,
        )

    search_results = parsed.get("searchResults")
    if not (isinstance(search_results, list) and all(isinstance(r, str) for r in search_results)):
        search_results = None

    return PartialTurn(reply=reply, search_results=search_results, action=action)
