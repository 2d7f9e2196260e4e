from functools import lru_cache

from fastapi import Request

from app.auth import FirebaseTokenVerifier, TokenVerifier
from app.config import get_settings
from app.llm.gateway import GeminiGateway
from app.llm.normalizer import InputLimits
from app.secret_store import SecretProvider, SettingsSecretProvider


def get_gateway(request: Request) -> GeminiGateway:
    settings = get_settings()
    return GeminiGateway(
        client=request.app.state.http_client,
        models=settings.gemini_models,
        api_base=settings.gemini_api_base,
    )


@lru_cache
def get_token_verifier() -> TokenVerifier:
    return FirebaseTokenVerifier(project_id=get_settings().firebase_project_id)


def get_secret_provider() -> SecretProvider:
    return SettingsSecretProvider(get_settings())


def get_limits() -> InputLimits:
    settings = get_settings()
    return InputLimits(
        max_list_items=settings.max_list_items,
        max_history_turns=settings.max_history_turns,
    )
