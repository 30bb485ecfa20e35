"""API-facing Pydantic models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from video.types import ArchiveMode, MediaMode, Role, SessionRecord


class CreateVideoSessionRequest(BaseModel):
    topic_key: str = Field(min_length=1, description="Sessions are reused per topic until they expire.")
    location: str = ""
    media_mode: MediaMode | None = None
    archive_mode: ArchiveMode | None = None


class VideoSessionResponse(BaseModel):
    session_id: str
    topic_key: str
    created_at: datetime
    expires_at: datetime
    is_synthetic: bool

    @classmethod
    def from_record(cls, record: SessionRecord) -> VideoSessionResponse:
        return cls(
            session_id=record.session_id,
            topic_key=record.topic_key,
            created_at=record.created_at,
            expires_at=record.expires_at,
            is_synthetic=record.is_synthetic,
        )


class CreateVideoTokenRequest(BaseModel):
    user_id: str = Field(min_length=1)
    role: Role = Role.PUBLISHER
    data: str = ""
    ttl_seconds: int | None = Field(default=None, gt=0, le=30 * 24 * 3600)


class VideoTokenResponse(BaseModel):
    token: str
    session_id: str
    api_key: str
    expires_at: int = Field(description="Unix seconds.")


class SweepResponse(BaseModel):
    removed: int
    remaining: int


class OutboundCallRequest(BaseModel):
    to_number: str = Field(min_length=3, description="E.164 without '+'.")


class OutboundCallResponse(BaseModel):
    call_uuid: str
    status: str
    to_number: str


class SendSMSRequest(BaseModel):
    to_number: str = Field(min_length=3)
    text: str = Field(min_length=1)
    client_ref: str | None = None


class SendSMSResponse(BaseModel):
    message_uuid: str
