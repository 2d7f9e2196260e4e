import json

from app.models.schemas import NormalizedInput

DECISION_SCHEMA = {
    "mode": "main | tour | clarify",
    "confidence": "number 0..1",
    "missingFields": ["string"],
    "clarificationQuestion": "string | null",
    "assistantMessage": "string | null",
    "main": {
        "amount": "number | null",
        "type": "income | expense | null",
        "accountName": "string | null",
        "categoryName": "string | null",
        "dateIso": "ISO-8601 date/time string | null",
        "note": "string | null",
    },
    "tour": {
        "amount": "number | null",
        "tourId": "string | null",
        "tourName": "string | null",
        "contributorName": "string | null",
        "sharerNames": ["string"],
        "dateIso": "ISO-8601 date/time string | null",
        "note": "string | null",
    },
}

INSTRUCTIONS = [
    "You are CashFlow's transaction intent router.",
    "Goal: classify one user utterance into MAIN personal transaction or TOUR transaction.",
    "If ambiguous, respond with mode=clarify and ask exactly one short question.",
    "Return only JSON. No markdown. No prose outside JSON.",
    "Use only entity names that are present in context lists.",
    "If user says a close misspelling, map it to the nearest available name.",
    "If amount/date missing, include them in missingFields and ask concise clarification.",
    "When entryPoint is tourDashboard and context.currentTourId is present, "
    "prefer that tour unless text clearly points to another tour.",
]


def _compact_json(value) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def build_prompt(data: NormalizedInput) -> str:
    context = data.context.model_dump(by_alias=True)
    history = [turn.model_dump(by_alias=True) for turn in data.history]

    return "\n".join(
        [
            *INSTRUCTIONS,
            "",
            "Output JSON schema:",
            _compact_json(DECISION_SCHEMA),
            "",
            "Context JSON:",
            _compact_json(context),
            "",
            "Conversation history JSON:",
            _compact_json(history),
            "",
            "Latest user utterance:",
            data.text,
        ]
    )
