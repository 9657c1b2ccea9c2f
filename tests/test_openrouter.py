import asyncio
import json
import unittest
from collections.abc import AsyncIterator, Callable

import httpx

from nahj_assistant.actions import ActionRouter
from nahj_assistant.providers.openrouter import OpenRouterProvider
from nahj_assistant.settings import AssistantSettings
from nahj_assistant.store import AssistantState, MemoryStore
from nahj_assistant.types import AppSection, AssistantAction, PartialTurn

BASE_URL = "https://openrouter.test/api/v1"


def completion(content: str, **extra: object) -> dict[str, object]:
    body: dict[str, object] = {
        "choices": [{"message": {"content": content, "role": "assistant"}, "finish_reason": "stop"}],
    }
    body.update(extra)
    return body


class OpenRouterProviderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.opened: list[AppSection] = []
        self.themes: list[bool] = []
        self.requests: list[httpx.Request] = []
        self.router = ActionRouter(self.opened.append, self.themes.append)
        self.state = AssistantState(MemoryStore({"openrouter_api_key": "sk-test"}))
        self.settings = AssistantSettings(openrouter_base_url=BASE_URL)

    def _provider(self, handler: Callable[[httpx.Request], httpx.Response]) -> OpenRouterProvider:
        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        client = httpx.AsyncClient(base_url=BASE_URL + "/", transport=httpx.MockTransport(record))
        return OpenRouterProvider(self.router, self.state, settings=self.settings, client=client)

    def test_structured_reply(self) -> None:
        content = '{"reply":"Here you go","action":{"command":"openLetters"},"searchResults":["a","b"]}'
        provider = self._provider(lambda _: httpx.Response(200, json=completion(content)))

        turns = asyncio.run(_collect(provider.stream("show me a letter")))

        self.assertEqual(turns[0], PartialTurn(reply="Thinking..."))
        self.assertEqual(len(turns), 2)
        self.assertEqual(turns[1].reply, "Here you go")
        self.assertEqual(turns[1].action, AssistantAction(command="openLetters"))
        self.assertEqual(turns[1].search_results, ["a", "b"])
        self.assertEqual(self.opened, [AppSection.LETTERS])

    def test_structured_dark_mode(self) -> None:
        content = json.dumps({"reply": "Done", "action": {"command": "setDarkMode", "bool": True}})
        provider = self._provider(lambda _: httpx.Response(200, json=completion(content)))

        turns = asyncio.run(_collect(provider.stream("dark please")))

        self.assertEqual(turns[-1].action, AssistantAction(command="setDarkMode", value=True))
        self.assertEqual(self.themes, [True])

    def test_unknown_command_is_ignored(self) -> None:
        content = json.dumps({"reply": "Hmm", "action": {"command": "openQuran"}})
        provider = self._provider(lambda _: httpx.Response(200, json=completion(content)))

        turns = asyncio.run(_collect(provider.stream("open quran")))

        self.assertEqual(turns[-1].action, AssistantAction(command="openQuran"))
        self.assertEqual(self.opened, [])
        self.assertEqual(self.themes, [])

    def test_plain_text_falls_back_to_keywords(self) -> None:
        content = "You should check the letters section"
        provider = self._provider(lambda _: httpx.Response(200, json=completion(content)))

        turns = asyncio.run(_collect(provider.stream("where is the letter to Malik?")))

        self.assertEqual(len(turns), 2)
        self.assertEqual(turns[1].reply, content)
        self.assertEqual(turns[1].action, AssistantAction(command="openLetters"))
        self.assertIsNone(turns[1].search_results)
        self.assertEqual(self.opened, [AppSection.LETTERS])

    def test_keyword_priority(self) -> None:
        content = "Try Light Mode while reading the Sayings"
        provider = self._provider(lambda _: httpx.Response(200, json=completion(content)))

        turns = asyncio.run(_collect(provider.stream("hi")))

        self.assertEqual(turns[1].action, AssistantAction(command="openSayings"))
        self.assertEqual(self.opened, [AppSection.SAYINGS])
        self.assertEqual(self.themes, [])

    def test_plain_text_without_keywords(self) -> None:
        provider = self._provider(lambda _: httpx.Response(200, json=completion("Peace be upon you")))

        turns = asyncio.run(_collect(provider.stream("salam")))

        self.assertEqual(turns[1], PartialTurn(reply="Peace be upon you"))
        self.assertEqual(self.opened, [])

    def test_http_error_becomes_apology(self) -> None:
        provider = self._provider(lambda _: httpx.Response(500, text="boom"))

        turns = asyncio.run(_collect(provider.stream("hello")))

        self.assertEqual(len(turns), 2)
        self.assertIn("Sorry", turns[1].reply)
        self.assertIn("500", turns[1].reply)
        self.assertIsNone(turns[1].action)

    def test_no_choices_becomes_apology(self) -> None:
        provider = self._provider(lambda _: httpx.Response(200, json={"choices": []}))

        turns = asyncio.run(_collect(provider.stream("hello")))

        self.assertIn("No response choices", turns[-1].reply)

    def test_transport_error_becomes_apology(self) -> None:
        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("offline", request=request)

        provider = self._provider(fail)

        turns = asyncio.run(_collect(provider.stream("hello")))

        self.assertEqual(turns[-1].reply, "Sorry, I encountered an error: offline")

    def test_request_shape(self) -> None:
        self.state.set_model("anthropic/claude-3-haiku")
        provider = self._provider(lambda _: httpx.Response(200, json=completion("ok", usage={"total_tokens": 9})))

        asyncio.run(_collect(provider.stream("what is patience?")))

        self.assertEqual(len(self.requests), 1)
        request = self.requests[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(str(request.url), BASE_URL + "/chat/completions")
        self.assertEqual(request.headers["Authorization"], "Bearer sk-test")
        self.assertEqual(request.headers["Content-Type"], "application/json")
        self.assertEqual(request.headers["User-Agent"], "NahjulBalaghaApp/1.0")

        body = json.loads(request.content)
        self.assertEqual(body["model"], "anthropic/claude-3-haiku")
        self.assertEqual(body["max_tokens"], 500)
        self.assertEqual(body["temperature"], 0.7)
        self.assertEqual([m["role"] for m in body["messages"]], ["system", "user"])
        self.assertEqual(body["messages"][1]["content"], "what is patience?")
        self.assertIn("setDarkMode", body["messages"][0]["content"])


async def _collect(stream: AsyncIterator[PartialTurn]) -> list[PartialTurn]:
    turns: list[PartialTurn] = []
    async for turn in stream:
        turns.append(turn)
    return turns


if __name__ == "__main__":
    unittest.main()
