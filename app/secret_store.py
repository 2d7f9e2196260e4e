from typing import Protocol

from app.config import Settings

GEMINI_API_KEY = "GEMINI_API_KEY"


class SecretProvider(Protocol):
    def get(self, name: str) -> str | None: ...


class SettingsSecretProvider:
    """Reads secrets provisioned as environment variables or in .env."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def get(self, name: str) -> str | None:
        value = getattr(self.settings, name.lower(), None)
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()
