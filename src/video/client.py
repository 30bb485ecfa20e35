"""Vonage Video API client."""

from __future__ import annotations

import json
import logging

import httpx

from auth.credentials import Credentials
from auth.errors import NotConfiguredError, ProviderAPIError
from auth.tokens import TokenMinter
from video.registry import SessionRegistry
from video.tokens import VideoTokenGenerator
from video.types import (
    DEFAULT_SESSION_TTL,
    CreateSessionOptions,
    CreateSessionResponse,
    SessionRecord,
    TokenOptions,
    VideoToken,
)

LOGGER = logging.getLogger(__name__)

BASE_URL = "https://video.api.vonage.com"


class VideoClient:
    """Creates video sessions and join tokens.

    Sessions are cached in a :class:`SessionRegistry`; when the API is not
    configured or unreachable the registry hands out mock sessions instead.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        registry: SessionRegistry | None = None,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._application_id = credentials.application_id
        self._minter: TokenMinter | None = credentials.token_minter() if credentials.has_application() else None
        self._registry = registry or SessionRegistry(credentials.application_id, session_ttl=DEFAULT_SESSION_TTL)
        self._tokens = VideoTokenGenerator(self._minter)
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    @property
    def tokens(self) -> VideoTokenGenerator:
        return self._tokens

    def is_configured(self) -> bool:
        return self._minter is not None and bool(self._application_id)

    async def create_session_via_api(self, options: CreateSessionOptions | None = None) -> CreateSessionResponse:
        """Call ``/session/create``; this is the registry's creation callback."""

        if self._minter is None:
            raise NotConfiguredError("Vonage Video API not configured")

        headers = {
            "Authorization": f"Bearer {self._minter.mint_api_token()}",
            "Accept": "application/json",
        }
        form = options.to_form() if options else {}
        url = f"{self._base_url}/session/create"

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(url, data=form or None, headers=headers)

        if response.status_code != 200:
            LOGGER.error("Vonage Video API error status=%s url=%s body=%s", response.status_code, url, response.text)
            raise ProviderAPIError(response.status_code, response.text)

        try:
            payload = response.json()
        except json.JSONDecodeError as exc:
            LOGGER.error("Failed to parse Vonage Video API response: %s", response.text)
            raise ProviderAPIError(response.status_code, response.text, "failed to parse response") from exc

        # The API answers with an array of sessions, older deployments with a single object.
        results = payload if isinstance(payload, list) else [payload]
        if not results or not isinstance(results[0], dict):
            raise ProviderAPIError(response.status_code, response.text, "empty response from API")
        return CreateSessionResponse.model_validate(results[0])

    async def create_session(self, options: CreateSessionOptions | None = None) -> SessionRecord:
        if not self.is_configured():
            LOGGER.warning("Vonage Video API not configured, using mock session")
        return await self._registry.create(self.create_session_via_api, options)

    async def create_session_for_topic(
        self,
        topic_key: str,
        options: CreateSessionOptions | None = None,
    ) -> SessionRecord:
        return await self._registry.create_for_topic(topic_key, self.create_session_via_api, options)

    get_or_create_session = create_session_for_topic

    async def get_session(self, session_id: str) -> SessionRecord:
        return await self._registry.get(session_id)

    async def cleanup_expired_sessions(self) -> int:
        return await self._registry.sweep()

    async def cached_session_count(self) -> int:
        return await self._registry.size()

    def generate_token(self, session_id: str, user_id: str, options: TokenOptions | None = None) -> VideoToken:
        return self._tokens.generate_token(session_id, user_id, options)
