from dataclasses import dataclass
from typing import Any

from app.errors import MissingTextError
from app.models.schemas import (
    Categories,
    Context,
    HistoryTurn,
    NamedEntity,
    NormalizedInput,
)


@dataclass(frozen=True)
class InputLimits:
    """Upper bounds applied before anything is serialized into the prompt.

    ``None`` leaves the corresponding list unbounded.
    """

    max_list_items: int | None = 200
    max_history_turns: int | None = 20


def safe_string(value: Any) -> str | None:
    """Return the stripped string, or None for non-strings and blank strings."""
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def normalize_text(value: Any) -> str:
    text = safe_string(value)
    if text is None:
        raise MissingTextError()
    return text


def normalize_named_list(items: Any, limit: int | None = None) -> list[NamedEntity]:
    if not isinstance(items, list):
        return []

    entities = []
    for item in items:
        if not isinstance(item, dict):
            continue
        entity = NamedEntity(
            id=safe_string(item.get("id")) or "",
            name=safe_string(item.get("name")) or "",
        )
        if entity.id or entity.name:
            entities.append(entity)

    if limit is not None:
        entities = entities[:limit]
    return entities


def normalize_context(value: Any, limits: InputLimits | None = None) -> Context:
    limits = limits or InputLimits()
    ctx = value if isinstance(value, dict) else {}
    categories = ctx.get("categories")
    if not isinstance(categories, dict):
        categories = {}

    max_items = limits.max_list_items
    return Context(
        entry_point=safe_string(ctx.get("entryPoint")) or "mainDashboard",
        current_tour_id=safe_string(ctx.get("currentTourId")),
        accounts=normalize_named_list(ctx.get("accounts"), max_items),
        categories=Categories(
            expense=normalize_named_list(categories.get("expense"), max_items),
            income=normalize_named_list(categories.get("income"), max_items),
        ),
        tours=normalize_named_list(ctx.get("tours"), max_items),
    )


def normalize_history(value: Any, limit: int | None = None) -> list[HistoryTurn]:
    """Keep well-formed turns in chronological order, most recent ``limit`` only."""
    if not isinstance(value, list):
        return []

    turns = []
    for item in value:
        if not isinstance(item, dict):
            continue
        text = safe_string(item.get("text"))
        if text is None:
            continue
        turns.append(HistoryTurn(role=safe_string(item.get("role")) or "user", text=text))

    if limit is not None:
        turns = turns[-limit:] if limit > 0 else []
    return turns


def normalize_request(body: Any, limits: InputLimits | None = None) -> NormalizedInput:
    """Coerce a raw request body into text, context and history.

    Raises MissingTextError when ``text`` is absent, blank or not a string.
    Everything else degrades to defaults.
    """
    limits = limits or InputLimits()
    payload = body if isinstance(body, dict) else {}
    text = normalize_text(payload.get("text"))
    return NormalizedInput(
        text=text,
        context=normalize_context(payload.get("context"), limits),
        history=normalize_history(payload.get("history"), limits.max_history_turns),
    )
