import sys

import httpx
from fastapi import FastAPI, Request, Response
from loguru import logger

from app.api.routes import router
from app.config import get_settings

settings = get_settings()

# Configure loguru
logger.remove()
logger.add(sys.stderr, level=settings.log_level, format="{time:HH:mm:ss} | {level:<7} | {message}")

app = FastAPI(title="Transaction Decision Proxy", version="0.1.0")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("{} {}", request.method, request.url.path)
    response: Response = await call_next(request)
    logger.info("→ {}", response.status_code)
    return response


app.include_router(router)


@app.on_event("startup")
async def startup():
    """Open the shared client used for upstream model calls."""
    app.state.http_client = httpx.AsyncClient(timeout=settings.gemini_timeout_seconds)
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY not set — decision endpoints will return 500")
    logger.info("Model chain: {}", ", ".join(settings.gemini_models))


@app.on_event("shutdown")
async def shutdown():
    client = getattr(app.state, "http_client", None)
    if client:
        await client.aclose()
        logger.info("HTTP client closed")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
