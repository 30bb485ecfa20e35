"""Client tokens for joining video sessions."""

from __future__ import annotations

import base64
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from auth.errors import TokenExpiryError
from auth.tokens import TokenMinter
from video.types import DEFAULT_TOKEN_TTL, Role, TokenOptions, VideoToken, utcnow

LOGGER = logging.getLogger(__name__)

MOCK_TOKEN_PREFIX = "mock_"
MOCK_API_KEY = "mock_api_key"


class VideoTokenGenerator:
    """Issues ``session.connect`` JWTs, or mock tokens when no minter is configured."""

    def __init__(self, minter: TokenMinter | None) -> None:
        self._minter = minter

    def generate_token(self, session_id: str, user_id: str, options: TokenOptions | None = None) -> VideoToken:
        opts = options or TokenOptions()
        now = utcnow()
        expire_time = opts.expire_time or now + DEFAULT_TOKEN_TTL
        if expire_time.tzinfo is None:
            # Naive datetimes are taken as UTC.
            expire_time = expire_time.replace(tzinfo=timezone.utc)
        if expire_time <= now:
            raise TokenExpiryError(f"Token expire time {expire_time.isoformat()} is not in the future")
        role = Role(opts.role)

        if self._minter is None:
            return self._generate_mock_token(session_id, user_id, role, expire_time)

        claims: dict[str, Any] = {
            "scope": "session.connect",
            "session_id": session_id,
            "role": role.value,
        }
        if opts.data:
            claims["data"] = opts.data
        if opts.initial_layout_class_list:
            claims["initial_layout_class_list"] = list(opts.initial_layout_class_list)

        token = self._minter.mint_token(expire_time - now, claims)

        LOGGER.debug("Generated Vonage Video token session=%s user=%s role=%s", session_id, user_id, role.value)
        return VideoToken(
            token=token.signed_value,
            session_id=session_id,
            api_key=self._minter.application_id,
            expires_at=int(token.expires_at.timestamp()),
        )

    def generate_publisher_token(self, session_id: str, user_id: str) -> VideoToken:
        return self.generate_token(session_id, user_id, TokenOptions(role=Role.PUBLISHER, data=user_id))

    def generate_subscriber_token(self, session_id: str, user_id: str) -> VideoToken:
        return self.generate_token(session_id, user_id, TokenOptions(role=Role.SUBSCRIBER, data=user_id))

    def generate_moderator_token(self, session_id: str, user_id: str) -> VideoToken:
        return self.generate_token(session_id, user_id, TokenOptions(role=Role.MODERATOR, data=user_id))

    def builder(self, session_id: str, user_id: str) -> TokenBuilder:
        return TokenBuilder(self, session_id, user_id)

    @staticmethod
    def _generate_mock_token(session_id: str, user_id: str, role: Role, expire_time: datetime) -> VideoToken:
        expires_at = int(expire_time.timestamp())
        payload = {
            "session_id": session_id,
            "user_id": user_id,
            "role": role.value,
            "exp": expires_at,
            "mock": True,
        }
        encoded = base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")

        LOGGER.debug("Generated mock video token session=%s user=%s", session_id, user_id)
        return VideoToken(
            token=MOCK_TOKEN_PREFIX + encoded,
            session_id=session_id,
            api_key=MOCK_API_KEY,
            expires_at=expires_at,
        )


class TokenBuilder:
    def __init__(self, generator: VideoTokenGenerator, session_id: str, user_id: str) -> None:
        self._generator = generator
        self._session_id = session_id
        self._user_id = user_id
        self._options = TokenOptions()

    def with_role(self, role: Role) -> TokenBuilder:
        self._options.role = role
        return self

    def with_expire_time(self, expire_time: datetime) -> TokenBuilder:
        self._options.expire_time = expire_time
        return self

    def with_ttl(self, ttl: timedelta) -> TokenBuilder:
        self._options.expire_time = utcnow() + ttl
        return self

    def with_data(self, data: str) -> TokenBuilder:
        self._options.data = data
        return self

    def with_layout_classes(self, *classes: str) -> TokenBuilder:
        self._options.initial_layout_class_list = list(classes)
        return self

    def build(self) -> VideoToken:
        return self._generator.generate_token(self._session_id, self._user_id, self._options)
