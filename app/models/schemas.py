from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NamedEntity(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str = ""
    name: str = ""


class Categories(CamelModel):
    expense: list[NamedEntity] = []
    income: list[NamedEntity] = []


class Context(CamelModel):
    entry_point: str = "mainDashboard"
    current_tour_id: str | None = None
    accounts: list[NamedEntity] = []
    categories: Categories = Field(default_factory=Categories)
    tours: list[NamedEntity] = []


class HistoryTurn(CamelModel):
    role: str = "user"
    text: str


class NormalizedInput(CamelModel):
    text: str
    context: Context = Field(default_factory=Context)
    history: list[HistoryTurn] = []


class MainDraft(CamelModel):
    amount: float | None = None
    type: Literal["income", "expense"] | None = None
    account_name: str | None = None
    category_name: str | None = None
    date_iso: str | None = None
    note: str | None = None


class TourDraft(CamelModel):
    amount: float | None = None
    tour_id: str | None = None
    tour_name: str | None = None
    contributor_name: str | None = None
    sharer_names: list[str] = []
    date_iso: str | None = None
    note: str | None = None


class Decision(CamelModel):
    mode: Literal["main", "tour", "clarify"] = "clarify"
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    missing_fields: list[str] = []
    clarification_question: str | None = None
    assistant_message: str | None = None
    main: MainDraft = Field(default_factory=MainDraft)
    tour: TourDraft = Field(default_factory=TourDraft)


class DecisionResponse(CamelModel):
    decision: Decision


class ErrorResponse(CamelModel):
    error: str
    details: str | None = None
