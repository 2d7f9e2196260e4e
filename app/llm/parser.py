import json
import re
from typing import Any

from loguru import logger

from app.errors import ModelOutputError

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```$")


def strip_code_fences(raw_text: str) -> str:
    text = raw_text.strip()
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def _load_object(text: str) -> dict[str, Any] | None:
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, RecursionError):
        return None
    return parsed if isinstance(parsed, dict) else None


def parse_model_json(raw_text: str) -> dict[str, Any]:
    """Recover the JSON object the model meant to return.

    Tries the de-fenced text first, then the span from the first ``{`` to the
    last ``}``. Malformed JSON is not repaired.
    """
    de_fenced = strip_code_fences(raw_text)

    direct = _load_object(de_fenced)
    if direct is not None:
        return direct

    start = de_fenced.find("{")
    end = de_fenced.rfind("}")
    if start >= 0 and end > start:
        recovered = _load_object(de_fenced[start : end + 1])
        if recovered is not None:
            logger.debug("Recovered JSON object from wrapped model output")
            return recovered

    raise ModelOutputError(raw_text)
