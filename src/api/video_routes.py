"""Video session and join-token endpoints."""

from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends

from api.dependencies import get_video_client
from api.schemas import (
    CreateVideoSessionRequest,
    CreateVideoTokenRequest,
    SweepResponse,
    VideoSessionResponse,
    VideoTokenResponse,
)
from video.client import VideoClient
from video.types import CreateSessionOptions, TokenOptions, utcnow

router = APIRouter(prefix="/video", tags=["video"])


@router.post("/sessions", response_model=VideoSessionResponse)
async def create_session(
    payload: CreateVideoSessionRequest,
    client: VideoClient = Depends(get_video_client),
) -> VideoSessionResponse:
    options = CreateSessionOptions(
        location=payload.location,
        media_mode=payload.media_mode,
        archive_mode=payload.archive_mode,
    )
    record = await client.create_session_for_topic(payload.topic_key, options)
    return VideoSessionResponse.from_record(record)


@router.post("/sessions/sweep", response_model=SweepResponse)
async def sweep_sessions(client: VideoClient = Depends(get_video_client)) -> SweepResponse:
    removed = await client.cleanup_expired_sessions()
    return SweepResponse(removed=removed, remaining=await client.cached_session_count())


@router.get("/sessions/{session_id}", response_model=VideoSessionResponse)
async def get_session(
    session_id: str,
    client: VideoClient = Depends(get_video_client),
) -> VideoSessionResponse:
    record = await client.get_session(session_id)
    return VideoSessionResponse.from_record(record)


@router.post("/sessions/{session_id}/tokens", response_model=VideoTokenResponse)
async def create_token(
    session_id: str,
    payload: CreateVideoTokenRequest,
    client: VideoClient = Depends(get_video_client),
) -> VideoTokenResponse:
    # Only hand out tokens for live sessions; raises 404/410 otherwise.
    await client.get_session(session_id)

    options = TokenOptions(role=payload.role, data=payload.data)
    if payload.ttl_seconds is not None:
        options.expire_time = utcnow() + timedelta(seconds=payload.ttl_seconds)

    token = client.generate_token(session_id, payload.user_id, options)
    return VideoTokenResponse(
        token=token.token,
        session_id=token.session_id,
        api_key=token.api_key,
        expires_at=token.expires_at,
    )
