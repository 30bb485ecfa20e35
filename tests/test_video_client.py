from __future__ import annotations

import httpx
import pytest

from auth.credentials import Credentials
from auth.errors import NotConfiguredError, ProviderAPIError, SessionCreationError
from video.client import VideoClient
from video.registry import SessionRegistry
from video.types import ArchiveMode, CreateSessionOptions, MediaMode


def _client(credentials, handler, **kwargs) -> VideoClient:
    return VideoClient(
        credentials,
        base_url="https://video.example.test/",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_create_session_posts_form_with_bearer_token(credentials):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"session_id": "2_MX4xMjM", "project_id": "p1", "create_dt": "now"}])

    client = _client(credentials, handler)
    options = CreateSessionOptions(location="10.0.0.1", media_mode=MediaMode.ROUTED, archive_mode=ArchiveMode.ALWAYS)

    record = await client.create_session_for_topic("consult-42", options)

    assert record.session_id == "2_MX4xMjM"
    assert record.project_id == "p1"
    assert not record.is_synthetic

    request = seen[0]
    assert str(request.url) == "https://video.example.test/session/create"
    assert request.headers["Authorization"].startswith("Bearer ")
    assert request.headers["Accept"] == "application/json"
    form = dict(httpx.QueryParams(request.content.decode("ascii")))
    assert form == {"location": "10.0.0.1", "p2p.preference": "routed", "archiveMode": "always"}


@pytest.mark.asyncio
async def test_single_object_response_is_accepted(credentials):
    client = _client(credentials, lambda request: httpx.Response(200, json={"session_id": "solo"}))

    response = await client.create_session_via_api()

    assert response.session_id == "solo"


@pytest.mark.asyncio
async def test_topic_sessions_are_cached(credentials):
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(200, json=[{"session_id": f"s{calls}"}])

    client = _client(credentials, handler)

    first = await client.get_or_create_session("topic")
    second = await client.get_or_create_session("topic")

    assert first == second
    assert calls == 1
    assert await client.cached_session_count() == 1


@pytest.mark.asyncio
async def test_api_error_raises_provider_error(credentials):
    client = _client(credentials, lambda request: httpx.Response(401, text="unauthorized"))

    with pytest.raises(ProviderAPIError) as excinfo:
        await client.create_session_via_api()

    assert excinfo.value.is_unauthorized()
    assert excinfo.value.body == "unauthorized"


@pytest.mark.asyncio
async def test_api_error_degrades_to_mock_session_when_fail_open(credentials):
    client = _client(credentials, lambda request: httpx.Response(500, text="boom"))

    record = await client.create_session()

    assert record.is_synthetic
    assert record.session_id.startswith("mock_aaaaaaaa_")
    token = client.generate_token(record.session_id, "user")
    assert token.session_id == record.session_id


@pytest.mark.asyncio
async def test_api_error_raises_when_fail_closed(credentials):
    client = _client(
        credentials,
        lambda request: httpx.Response(503, text="down"),
        registry=SessionRegistry(credentials.application_id, fail_open=False),
    )

    with pytest.raises(SessionCreationError):
        await client.create_session_for_topic("topic")


@pytest.mark.asyncio
async def test_unconfigured_client_uses_mock_sessions_and_tokens():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    client = _client(Credentials(), handler)

    assert not client.is_configured()
    with pytest.raises(NotConfiguredError):
        await client.create_session_via_api()

    record = await client.create_session()
    token = client.generate_token(record.session_id, "user")

    assert record.session_id.startswith("mock_mock_")
    assert token.api_key == "mock_api_key"


@pytest.mark.asyncio
async def test_cleanup_expired_sessions_on_empty_cache(credentials):
    client = _client(credentials, lambda request: httpx.Response(200, json=[{"session_id": "s"}]))

    assert await client.cleanup_expired_sessions() == 0
