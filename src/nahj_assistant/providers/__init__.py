"""Provider definitions for nahj_assistant."""

from .base import BaseProvider
from .on_device import AppleFoundationRuntime, OnDeviceProvider, StructuredModelRuntime
from .openrouter import OpenRouterProvider
from .stub import LocalStubProvider

__all__ = [
    "BaseProvider",
    "OnDeviceProvider",
    "OpenRouterProvider",
    "LocalStubProvider",
    "StructuredModelRuntime",
    "AppleFoundationRuntime",
]
