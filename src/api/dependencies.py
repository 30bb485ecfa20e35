"""Shared FastAPI dependencies.

Separated to avoid circular imports between route modules.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from fastapi import Header, HTTPException

from auth.credentials import get_credentials
from config.settings import get_settings
from messages.client import MessagesClient
from messages.webhook import WebhookHandler, log_inbound, log_status
from video.client import VideoClient
from video.registry import SessionRegistry
from voice.client import VoiceClient


@lru_cache(maxsize=1)
def get_session_registry() -> SessionRegistry:
    settings = get_settings()
    return SessionRegistry(
        get_credentials().application_id,
        session_ttl=timedelta(hours=settings.video_session_ttl_hours),
        fail_open=settings.video_session_fail_open,
    )


@lru_cache(maxsize=1)
def get_video_client() -> VideoClient:
    settings = get_settings()
    return VideoClient(
        get_credentials(),
        registry=get_session_registry(),
        base_url=settings.vonage_video_base_url,
        timeout=settings.vonage_http_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_voice_client() -> VoiceClient:
    settings = get_settings()
    return VoiceClient(
        get_credentials(),
        base_url=settings.vonage_api_base_url,
        timeout=settings.vonage_http_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_messages_client() -> MessagesClient:
    settings = get_settings()
    return MessagesClient(
        get_credentials(),
        base_url=settings.vonage_api_base_url,
        timeout=settings.vonage_http_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_webhook_handler() -> WebhookHandler:
    return WebhookHandler().on_inbound(log_inbound).on_status(log_status)


def require_api_key(x_api_key: Annotated[str | None, Header()] = None) -> None:
    settings = get_settings()
    if settings.service_api_key and x_api_key != settings.service_api_key:
        raise HTTPException(status_code=401, detail="Unauthorized")
