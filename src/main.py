"""Entry point for the Vonage communications gateway service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.routes import router as api_router
from auth.credentials import get_credentials
from auth.errors import ProviderError
from config.settings import get_settings

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Parse the private key up front so a malformed key fails the boot, not the first call.
    credentials = get_credentials()
    LOGGER.info("Loaded Vonage credentials: %r", credentials)
    yield


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(
    title="Vonage Communications Gateway",
    description="Video sessions, voice call control and messaging webhooks on the Vonage APIs.",
    lifespan=lifespan,
)
app.include_router(api_router, prefix="/api")


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError) -> JSONResponse:
    if exc.status_code >= 500:
        LOGGER.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
