"""FastAPI routes exposing the Vonage integrations."""

from __future__ import annotations

from fastapi import APIRouter

from api.messages_routes import router as messages_router
from api.video_routes import router as video_router
from api.voice_routes import router as voice_router
from auth.credentials import get_credentials

router = APIRouter()
router.include_router(messages_router)
router.include_router(voice_router)
router.include_router(video_router)


@router.get("/health")
async def health() -> dict:
    credentials = get_credentials()
    return {
        "status": "ok",
        "application_configured": credentials.has_application(),
        "api_key_configured": credentials.has_api_key(),
    }
