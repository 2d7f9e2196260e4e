from collections.abc import Sequence
from typing import Any

import httpx
from loguru import logger

from app.errors import ModelGatewayError
from app.llm.normalizer import safe_string

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODELS = ("gemini-2.5-flash", "gemini-2.0-flash")


def extract_text(data: Any) -> str:
    """Join the text parts of the first candidate that has any text."""
    candidates = data.get("candidates") if isinstance(data, dict) else None
    if not isinstance(candidates, list):
        return ""

    for candidate in candidates:
        content = candidate.get("content") if isinstance(candidate, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            continue
        joined = "\n".join(
            safe_string(part.get("text")) or "" if isinstance(part, dict) else ""
            for part in parts
        ).strip()
        if joined:
            return joined
    return ""


class GeminiGateway:
    """Calls generateContent on each configured model in order until one answers."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        models: Sequence[str] = DEFAULT_MODELS,
        api_base: str = GEMINI_API_BASE,
        temperature: float = 0.2,
        top_p: float = 0.9,
        response_mime_type: str = "application/json",
    ):
        self.client = client
        self.models = list(models)
        self.api_base = api_base.rstrip("/")
        self.temperature = temperature
        self.top_p = top_p
        self.response_mime_type = response_mime_type

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "topP": self.top_p,
                "responseMimeType": self.response_mime_type,
            },
        }

    async def _call_model(self, model: str, prompt: str, api_key: str) -> str:
        endpoint = f"{self.api_base}/{model}:generateContent"
        response = await self.client.post(
            endpoint,
            params={"key": api_key},
            json=self.build_payload(prompt),
        )
        if not response.is_success:
            raise ModelGatewayError(
                f"Gemini request failed for {model} ({response.status_code}): {response.text}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ModelGatewayError(f"Gemini returned a non-JSON body for {model}: {e}") from e
        if not isinstance(data, dict):
            raise ModelGatewayError(f"Gemini returned an unexpected envelope for {model}.")

        text = extract_text(data)
        if not text:
            raise ModelGatewayError(f"Gemini returned empty content for {model}.")
        return text

    async def generate(self, prompt: str, api_key: str) -> str:
        last_error: Exception | None = None

        for model in self.models:
            try:
                text = await self._call_model(model, prompt, api_key)
            except (ModelGatewayError, httpx.HTTPError) as e:
                logger.warning("Model {} failed: {}", model, e)
                last_error = e
                continue

            logger.info("Model {} answered ({} chars)", model, len(text))
            return text

        if last_error is not None:
            raise ModelGatewayError(str(last_error)) from last_error
        raise ModelGatewayError("Gemini request failed for all configured models.")
