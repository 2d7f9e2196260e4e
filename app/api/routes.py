import json
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from loguru import logger

from app.auth import TokenVerifier, verify_bearer
from app.deps import get_gateway, get_limits, get_secret_provider, get_token_verifier
from app.errors import MissingTextError
from app.llm.gateway import GeminiGateway
from app.llm.normalizer import InputLimits, normalize_request
from app.llm.pipeline import decide_transaction
from app.models.schemas import DecisionResponse, ErrorResponse
from app.secret_store import GEMINI_API_KEY, SecretProvider

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

OTHER_METHODS = ["GET", "HEAD", "PUT", "PATCH", "DELETE"]


def _json(payload: DecisionResponse | ErrorResponse, status_code: int) -> JSONResponse:
    return JSONResponse(
        payload.model_dump(by_alias=True, exclude_none=isinstance(payload, ErrorResponse)),
        status_code=status_code,
        headers=CORS_HEADERS,
    )


def _error(message: str, status_code: int, details: str | None = None) -> JSONResponse:
    return _json(ErrorResponse(error=message, details=details), status_code)


def _method_not_allowed() -> JSONResponse:
    return _error("Method not allowed", 405)


async def _read_body(request: Request) -> Any:
    raw = await request.body()
    try:
        return json.loads(raw)
    except RecursionError as e:
        raise ValueError("JSON body is nested too deeply") from e


async def _preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/aiTransactionDecision")
async def ai_transaction_decision(
    request: Request,
    gateway: GeminiGateway = Depends(get_gateway),
    verifier: TokenVerifier = Depends(get_token_verifier),
    secrets: SecretProvider = Depends(get_secret_provider),
    limits: InputLimits = Depends(get_limits),
):
    try:
        auth = await verify_bearer(request.headers.get("Authorization"), verifier)
        if not auth.ok:
            return _error(auth.error, 401)

        try:
            body = await _read_body(request)
        except ValueError:
            body = {}

        data = normalize_request(body, limits)
        decision = await decide_transaction(
            data.text,
            data.context,
            data.history,
            api_key=secrets.get(GEMINI_API_KEY),
            gateway=gateway,
        )
        return _json(DecisionResponse(decision=decision), 200)
    except MissingTextError as e:
        return _error(str(e), 400)
    except Exception as e:
        logger.exception("aiTransactionDecision failed")
        return _error("Failed to classify transaction intent.", 500, details=str(e))


router.add_api_route("/aiTransactionDecision", _preflight, methods=["OPTIONS"])


@router.api_route("/aiTransactionDecision", methods=OTHER_METHODS)
async def ai_transaction_decision_other():
    return _method_not_allowed()


router.add_api_route("/transactionDecision", _preflight, methods=["OPTIONS"])


@router.post("/transactionDecision")
async def transaction_decision(
    request: Request,
    gateway: GeminiGateway = Depends(get_gateway),
    secrets: SecretProvider = Depends(get_secret_provider),
    limits: InputLimits = Depends(get_limits),
):
    api_key = secrets.get(GEMINI_API_KEY)
    if not api_key:
        return _error("Missing GEMINI_API_KEY secret", 500)

    try:
        body = await _read_body(request)
    except ValueError:
        return _error("Invalid JSON body", 400)

    try:
        data = normalize_request(body, limits)
    except MissingTextError as e:
        return _error(str(e), 400)

    try:
        decision = await decide_transaction(
            data.text,
            data.context,
            data.history,
            api_key=api_key,
            gateway=gateway,
        )
    except Exception as e:
        logger.exception("transactionDecision failed")
        return _error("Gemini proxy failed", 500, details=str(e))
    return _json(DecisionResponse(decision=decision), 200)


@router.api_route("/transactionDecision", methods=OTHER_METHODS)
async def transaction_decision_other():
    return _method_not_allowed()


@router.get("/health")
async def health():
    return {"status": "ok"}
