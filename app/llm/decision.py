import math
import re
from typing import Any

from app.llm.normalizer import safe_string
from app.models.schemas import Decision, MainDraft, TourDraft

_RADIX_LITERAL = re.compile(r"0[xob][0-9a-f]+", re.IGNORECASE)


def to_number(value: Any) -> float | None:
    """Finite numbers and numeric strings become floats; anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if "_" in value:
            return None
        if _RADIX_LITERAL.fullmatch(value):
            try:
                return float(int(value, 0))
            except (ValueError, OverflowError):
                return None
    elif not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def positive_or_none(value: float | None) -> float | None:
    if value is None or value <= 0:
        return None
    return value


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [s for s in (safe_string(item) for item in value) if s is not None]


def normalize_mode(value: Any) -> str:
    mode = (safe_string(value) or "").lower()
    return mode if mode in ("main", "tour") else "clarify"


def normalize_tx_type(value: Any) -> str | None:
    tx_type = (safe_string(value) or "").lower()
    return tx_type if tx_type in ("income", "expense") else None


def _section(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def normalize_decision(parsed: Any) -> Decision:
    """Coerce whatever the model returned into a fully populated Decision.

    Never raises: every field falls back to null, an empty list, 0 or "clarify".
    """
    data = _section(parsed)
    main = _section(data.get("main"))
    tour = _section(data.get("tour"))

    confidence = to_number(data.get("confidence"))
    return Decision(
        mode=normalize_mode(data.get("mode")),
        confidence=clamp(confidence if confidence is not None else 0.0, 0.0, 1.0),
        missing_fields=string_list(data.get("missingFields")),
        clarification_question=safe_string(data.get("clarificationQuestion")),
        assistant_message=safe_string(data.get("assistantMessage")),
        main=MainDraft(
            amount=positive_or_none(to_number(main.get("amount"))),
            type=normalize_tx_type(main.get("type")),
            account_name=safe_string(main.get("accountName")),
            category_name=safe_string(main.get("categoryName")),
            date_iso=safe_string(main.get("dateIso")),
            note=safe_string(main.get("note")),
        ),
        tour=TourDraft(
            amount=positive_or_none(to_number(tour.get("amount"))),
            tour_id=safe_string(tour.get("tourId")),
            tour_name=safe_string(tour.get("tourName")),
            contributor_name=safe_string(tour.get("contributorName")),
            sharer_names=string_list(tour.get("sharerNames")),
            date_iso=safe_string(tour.get("dateIso")),
            note=safe_string(tour.get("note")),
        ),
    )
