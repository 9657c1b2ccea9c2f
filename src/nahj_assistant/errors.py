"""Package specific exception hierarchy."""


class NahjAssistantError(Exception):
    """Base exception for nahj_assistant package."""


class ProviderNotAvailable(NahjAssistantError):
    """Raised when the requested provider cannot be used."""


class UnsupportedProviderError(NahjAssistantError):
    """Raised when a provider identifier is not known."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"Provider '{provider}' is not available.")


class UnsupportedModelError(NahjAssistantError):
    """Raised when a model is not part of the cloud allow-list."""

    def __init__(self, model: str) -> None:
        super().__init__(f"Model '{model}' is not supported.")
        self.model = model


class ProviderError(NahjAssistantError):
    """Represents provider-specific HTTP or API errors."""

    def __init__(self, provider: str, message: str, status_code: int | None = None) -> None:
        suffix = f" (status {status_code})" if status_code is not None else ""
        super().__init__(f"{provider}: {message}{suffix}")
        self.provider = provider
        self.status_code = status_code


class GenerationError(NahjAssistantError):
    """Raised when the on-device model fails while generating a turn."""
