from __future__ import annotations

import base64
import json
from datetime import timedelta, timezone

import jwt
import pytest

from auth.errors import TokenExpiryError
from auth.tokens import TokenMinter
from video.tokens import MOCK_API_KEY, VideoTokenGenerator
from video.types import Role, TokenOptions, utcnow

APP_ID = "video-app"


@pytest.fixture()
def generator(rsa_key) -> VideoTokenGenerator:
    return VideoTokenGenerator(TokenMinter(APP_ID, rsa_key))


def _claims(token: str, public_key) -> dict:
    return jwt.decode(token, public_key, algorithms=["RS256"])


def test_token_carries_session_connect_claims(generator, public_key):
    token = generator.generate_token("sess-1", "alice", TokenOptions(role=Role.MODERATOR, data="name=alice"))

    claims = _claims(token.token, public_key)

    assert claims["scope"] == "session.connect"
    assert claims["session_id"] == "sess-1"
    assert claims["role"] == "moderator"
    assert claims["data"] == "name=alice"
    assert claims["application_id"] == APP_ID
    assert "initial_layout_class_list" not in claims
    assert token.api_key == APP_ID
    assert token.expires_at == claims["exp"]


def test_default_token_lives_a_day(generator, public_key):
    token = generator.generate_publisher_token("sess-1", "alice")

    claims = _claims(token.token, public_key)

    assert claims["role"] == "publisher"
    assert claims["data"] == "alice"
    assert abs((claims["exp"] - claims["iat"]) - 24 * 3600) <= 1


def test_builder_sets_layout_and_ttl(generator, public_key):
    token = (
        generator.builder("sess-1", "bob")
        .with_role(Role.SUBSCRIBER)
        .with_ttl(timedelta(minutes=10))
        .with_layout_classes("focus", "full")
        .build()
    )

    claims = _claims(token.token, public_key)

    assert claims["role"] == "subscriber"
    assert claims["initial_layout_class_list"] == ["focus", "full"]
    assert abs((claims["exp"] - claims["iat"]) - 600) <= 1


def test_expire_time_in_past_is_rejected(generator):
    with pytest.raises(TokenExpiryError):
        generator.generate_token("sess-1", "alice", TokenOptions(expire_time=utcnow() - timedelta(minutes=1)))
    with pytest.raises(TokenExpiryError):
        generator.builder("sess-1", "alice").with_expire_time(utcnow() - timedelta(seconds=1)).build()


def test_past_expire_time_rejected_without_minter():
    with pytest.raises(TokenExpiryError):
        VideoTokenGenerator(None).generate_token("mock_1", "alice", TokenOptions(expire_time=utcnow()))


def test_naive_expire_time_is_taken_as_utc(generator, public_key):
    expire_time = (utcnow() + timedelta(hours=1)).replace(tzinfo=None)

    token = generator.builder("sess-1", "alice").with_expire_time(expire_time).build()

    claims = _claims(token.token, public_key)
    assert abs(claims["exp"] - int(expire_time.replace(tzinfo=timezone.utc).timestamp())) <= 1


def test_mock_token_without_minter():
    token = VideoTokenGenerator(None).generate_subscriber_token("mock_mock_1", "carol")

    assert token.token.startswith("mock_")
    assert token.api_key == MOCK_API_KEY
    payload = json.loads(base64.b64decode(token.token.removeprefix("mock_")))
    assert payload["session_id"] == "mock_mock_1"
    assert payload["user_id"] == "carol"
    assert payload["role"] == "subscriber"
    assert payload["mock"] is True
    assert payload["exp"] == token.expires_at
