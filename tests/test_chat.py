import asyncio
import unittest
from collections.abc import AsyncIterator

from nahj_assistant.actions import DEMO_SEARCH_RESULTS
from nahj_assistant.availability import OnDeviceStatus
from nahj_assistant.chat import ChatEntry, ChatSession
from nahj_assistant.service import AssistantService
from nahj_assistant.settings import AssistantSettings
from nahj_assistant.store import AssistantState, MemoryStore
from nahj_assistant.types import AppSection, AssistantAction, GeneratedAction, GeneratedTurn, Provider


class ScriptedRuntime:
    def __init__(self, snapshots: list[GeneratedTurn], error: Exception | None = None) -> None:
        self.snapshots = snapshots
        self.error = error
        self.release = asyncio.Event()
        self.wait_for_release = False

    def status(self) -> tuple[OnDeviceStatus | None, str | None]:
        return OnDeviceStatus.AVAILABLE, None

    async def stream_structured(self, prompt: str, instructions: str) -> AsyncIterator[GeneratedTurn]:
        for snapshot in self.snapshots:
            yield snapshot
            if self.wait_for_release:
                await self.release.wait()
        if self.error is not None:
            raise self.error


class ChatSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.opened: list[AppSection] = []
        self.themes: list[bool] = []
        self.updates: list[str] = []

    def _session(self, runtime: ScriptedRuntime, provider: Provider = Provider.FOUNDATION_MODELS) -> ChatSession:
        state = AssistantState(MemoryStore({"ai_provider": provider.value}))
        settings = AssistantSettings(stub_thinking_delay_s=0, stub_answer_delay_s=0)
        service = AssistantService(state, runtime=runtime, settings=settings)
        service.make_tool_enabled_session(self.opened.append, self.themes.append)
        return ChatSession(service, on_update=lambda entry: self.updates.append(entry.text))

    def test_partial_turns_are_merged(self) -> None:
        runtime = ScriptedRuntime(
            [
                GeneratedTurn(reply="Here", search_results=["Sermon 3"]),
                GeneratedTurn(reply="Here are results", action=GeneratedAction(command="setDarkMode", value=True)),
            ]
        )
        session = self._session(runtime)

        accepted = asyncio.run(session.send("  justice  "))

        self.assertTrue(accepted)
        self.assertEqual(session.entries[0], ChatEntry(role="user", text="justice"))
        reply = session.entries[1]
        self.assertEqual(reply.text, "Here are results")
        self.assertEqual(reply.search_results, ["Sermon 3"])
        self.assertEqual(reply.action, AssistantAction(command="setDarkMode", value=True))
        self.assertEqual(self.updates, ["Here", "Here are results"])
        self.assertEqual(self.themes, [True])

    def test_blank_prompt_is_ignored(self) -> None:
        session = self._session(ScriptedRuntime([]))

        self.assertFalse(asyncio.run(session.send("   ")))
        self.assertEqual(session.entries, [])

    def test_failure_falls_back_to_local_handling(self) -> None:
        runtime = ScriptedRuntime([GeneratedTurn(reply="Op")], error=RuntimeError("model crashed"))
        session = self._session(runtime)

        with self.assertLogs("nahj_assistant.chat", level="WARNING"):
            accepted = asyncio.run(session.send("go to letters"))

        self.assertTrue(accepted)
        self.assertEqual([e.role for e in session.entries], ["user", "assistant"])
        self.assertEqual(session.entries[1].text, "Opening Letters…")
        self.assertEqual(self.opened, [AppSection.LETTERS])
        self.assertFalse(session.is_busy)

    def test_unavailable_service_answers_locally(self) -> None:
        session = self._session(ScriptedRuntime([]), provider=Provider.OPENROUTER)

        asyncio.run(session.send("what is patience?"))

        self.assertEqual(session.entries[1].text, "Here are some results I found.")
        self.assertEqual(session.entries[1].search_results, list(DEMO_SEARCH_RESULTS))

    def test_second_prompt_rejected_while_streaming(self) -> None:
        runtime = ScriptedRuntime([GeneratedTurn(reply="first")])
        runtime.wait_for_release = True
        session = self._session(runtime)

        async def scenario() -> tuple[bool, bool, bool]:
            runtime.release = asyncio.Event()
            first = asyncio.create_task(session.send("one"))
            while not self.updates:
                await asyncio.sleep(0)
            busy = session.is_busy
            second = await session.send("two")
            runtime.release.set()
            return await first, second, busy

        first, second, busy = asyncio.run(scenario())

        self.assertTrue(first)
        self.assertFalse(second)
        self.assertTrue(busy)
        self.assertEqual([e.text for e in session.entries], ["one", "first"])
        self.assertFalse(session.is_busy)


if __name__ == "__main__":
    unittest.main()
