"""Video API types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict

DEFAULT_SESSION_TTL = timedelta(hours=24)
DEFAULT_TOKEN_TTL = timedelta(hours=24)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class SessionRecord:
    """Cached session. Records are replaced, never mutated."""

    session_id: str
    created_at: datetime
    expires_at: datetime
    topic_key: str = ""
    project_id: str = ""
    is_synthetic: bool = False

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) > self.expires_at

    def is_valid(self, now: datetime | None = None) -> bool:
        return bool(self.session_id) and not self.is_expired(now)


class Role(str, Enum):
    PUBLISHER = "publisher"
    SUBSCRIBER = "subscriber"
    MODERATOR = "moderator"


class MediaMode(str, Enum):
    RELAYED = "relayed"
    ROUTED = "routed"


class ArchiveMode(str, Enum):
    MANUAL = "manual"
    ALWAYS = "always"


@dataclass(frozen=True, slots=True)
class CreateSessionOptions:
    location: str = ""
    media_mode: MediaMode | None = None
    archive_mode: ArchiveMode | None = None

    def to_form(self) -> dict[str, str]:
        form: dict[str, str] = {}
        if self.location:
            form["location"] = self.location
        if self.media_mode is not None:
            form["p2p.preference"] = self.media_mode.value
        if self.archive_mode is not None:
            form["archiveMode"] = self.archive_mode.value
        return form


class CreateSessionResponse(BaseModel):
    """One element of the ``/session/create`` response."""

    model_config = ConfigDict(extra="ignore")

    session_id: str = ""
    project_id: str = ""
    create_dt: str = ""
    media_server_url: str = ""


@dataclass(slots=True)
class TokenOptions:
    role: Role = Role.PUBLISHER
    expire_time: datetime | None = None
    data: str = ""
    initial_layout_class_list: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class VideoToken:
    token: str
    session_id: str
    api_key: str
    expires_at: int
