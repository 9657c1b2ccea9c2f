"""Async assistant service routing prompts to the selected provider."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import httpx

from nahj_assistant.actions import ActionRouter, DarkModeHandler, OpenHandler
from nahj_assistant.availability import resolve_availability
from nahj_assistant.errors import UnsupportedProviderError
from nahj_assistant.providers.base import BaseProvider
from nahj_assistant.providers.on_device import (
    AppleFoundationRuntime,
    OnDeviceProvider,
    StructuredModelRuntime,
)
from nahj_assistant.providers.openrouter import OpenRouterProvider
from nahj_assistant.providers.stub import LocalStubProvider
from nahj_assistant.settings import AssistantSettings
from nahj_assistant.store import AssistantState
from nahj_assistant.types import Availability, PartialTurn, Provider

logger = logging.getLogger(__name__)


class AssistantService:
    """High-level coordinator between the host app and the three backends."""

    def __init__(
        self,
        state: AssistantState | None = None,
        *,
        router: ActionRouter | None = None,
        runtime: StructuredModelRuntime | None = None,
        settings: AssistantSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or AssistantSettings()
        self.state = state or AssistantState()
        self.router = router or ActionRouter()
        self.runtime: StructuredModelRuntime = runtime or AppleFoundationRuntime()

        self._cloud = OpenRouterProvider(
            self.router, self.state, settings=self.settings, client=http_client
        )
        self._providers: dict[Provider, BaseProvider] = {
            Provider.FOUNDATION_MODELS: OnDeviceProvider(self.router, self.runtime),
            Provider.OPENROUTER: self._cloud,
            Provider.LOCAL_STUB: LocalStubProvider(
                self.router,
                thinking_delay_s=self.settings.stub_thinking_delay_s,
                answer_delay_s=self.settings.stub_answer_delay_s,
            ),
        }
        self.availability: Availability = Availability.ok()
        self.update_availability()

    @property
    def current_provider(self) -> Provider:
        return self.state.provider

    @property
    def selected_model(self) -> str:
        return self.state.model

    @property
    def is_available(self) -> bool:
        return self.availability.available

    def make_tool_enabled_session(
        self, open_handler: OpenHandler, set_dark_mode: DarkModeHandler
    ) -> None:
        """Configure callbacks so a response can control navigation or theme."""
        self.router.configure(open_handler, set_dark_mode)

    def set_provider(self, provider: Provider) -> None:
        self.state.set_provider(provider)
        self.update_availability()

    def set_model(self, model: str) -> None:
        self.state.set_model(model)

    def set_credential(self, credential: str) -> None:
        self.state.set_credential(credential)
        self.update_availability()

    def provider_availability(self, provider: Provider) -> Availability:
        """Availability of ``provider`` without selecting it."""
        status, detail = (None, None)
        if provider is Provider.FOUNDATION_MODELS:
            status, detail = self.runtime.status()
        return resolve_availability(
            provider,
            credential=self.state.credential,
            on_device_status=status,
            on_device_detail=detail,
        )

    def update_availability(self) -> Availability:
        """Recompute availability for the current provider."""
        self.availability = self.provider_availability(self.current_provider)
        if not self.availability.available:
            logger.info(
                "Provider %s unavailable: %s", self.current_provider.value, self.availability.reason
            )
        return self.availability

    def get_provider(self, provider: Provider | str) -> BaseProvider:
        """Return the backend registered for ``provider`` or its identifier."""
        try:
            return self._providers[Provider(provider)]
        except (KeyError, ValueError) as exc:
            raise UnsupportedProviderError(str(provider)) from exc

    def stream_turn(self, prompt: str) -> AsyncIterator[PartialTurn]:
        """Stream partial assistant output for ``prompt``.

        Provider and availability are re-read from the state on every call,
        and unavailable providers are silently replaced by the local stub. The
        returned iterator is lazy; nothing runs until it is consumed.
        """
        provider = self.current_provider
        self.update_availability()
        if provider is not Provider.LOCAL_STUB and not self.is_available:
            logger.debug("Falling back to local stub, %s unavailable", provider.value)
            provider = Provider.LOCAL_STUB
        return self.get_provider(provider).stream(prompt)

    async def aclose(self) -> None:
        """Release the HTTP client used by the cloud backend."""
        await self._cloud.aclose()
