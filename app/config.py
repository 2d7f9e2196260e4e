from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    gemini_api_key: str = ""
    gemini_models: list[str] = ["gemini-2.5-flash", "gemini-2.0-flash"]
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta/models"
    gemini_timeout_seconds: float = 30.0
    firebase_project_id: str = ""
    max_list_items: int | None = 200
    max_history_turns: int | None = 20
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
