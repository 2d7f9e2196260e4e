from typing import Protocol

from loguru import logger

from app.errors import ConfigurationError
from app.llm.decision import normalize_decision
from app.llm.parser import parse_model_json
from app.llm.prompts import build_prompt
from app.models.schemas import Context, Decision, HistoryTurn, NormalizedInput


class TextGenerator(Protocol):
    async def generate(self, prompt: str, api_key: str) -> str: ...


async def decide_transaction(
    text: str,
    context: Context,
    history: list[HistoryTurn],
    *,
    api_key: str | None,
    gateway: TextGenerator,
) -> Decision:
    """Route one utterance to the main ledger, a tour ledger, or a clarification."""
    if not api_key:
        raise ConfigurationError("Missing GEMINI_API_KEY secret.")

    prompt = build_prompt(NormalizedInput(text=text, context=context, history=history))
    logger.debug("Prompt:\n{}", prompt)

    raw = await gateway.generate(prompt, api_key)
    logger.debug("Model raw response: {}", raw)

    decision = normalize_decision(parse_model_json(raw))
    logger.info("Decision: mode={} confidence={}", decision.mode, decision.confidence)
    return decision
