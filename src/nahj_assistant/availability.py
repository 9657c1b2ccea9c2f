"""Availability resolution for the assistant providers."""

from __future__ import annotations

from enum import Enum

from nahj_assistant.types import Availability, Provider

CREDENTIAL_REQUIRED = "OpenRouter API key required. Set it in Settings."
PLATFORM_UNSUPPORTED = "Foundation Models not available on this platform."


class OnDeviceStatus(str, Enum):
    """Readiness reported by the on-device model runtime."""

    AVAILABLE = "available"
    DEVICE_NOT_ELIGIBLE = "device_not_eligible"
    NOT_ENABLED = "not_enabled"
    MODEL_NOT_READY = "model_not_ready"
    OTHER = "other"


def resolve_availability(
    provider: Provider,
    *,
    credential: str = "",
    on_device_status: OnDeviceStatus | None = None,
    on_device_detail: str | None = None,
) -> Availability:
    """Return whether ``provider`` can serve requests right now.

    ``on_device_status`` is ``None`` when no on-device runtime is installed.
    The function has no side effects; callers re-run it after changing the
    provider, credential or environment.
    """
    if provider is Provider.FOUNDATION_MODELS:
        return _on_device_availability(on_device_status, on_device_detail)
    if provider is Provider.OPENROUTER:
        if credential:
            return Availability.ok()
        return Availability.unavailable(CREDENTIAL_REQUIRED)
    return Availability.ok()


def _on_device_availability(status: OnDeviceStatus | None, detail: str | None) -> Availability:
    if status is None:
        return Availability.unavailable(PLATFORM_UNSUPPORTED)
    if status is OnDeviceStatus.AVAILABLE:
        return Availability.ok()
    if status is OnDeviceStatus.DEVICE_NOT_ELIGIBLE:
        return Availability.unavailable("Device not eligible for Apple Intelligence.")
    if status is OnDeviceStatus.NOT_ENABLED:
        return Availability.unavailable("Enable Apple Intelligence in Settings.")
    if status is OnDeviceStatus.MODEL_NOT_READY:
        return Availability.unavailable("Model is downloading or not ready.")
    return Availability.unavailable(f"Model unavailable: {detail or 'unknown'}")
