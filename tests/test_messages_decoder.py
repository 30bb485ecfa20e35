from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from auth.errors import UnrecognizedFormatError
from messages.decoder import INBOUND_DETECTORS, decode_inbound, decode_status


def _body(payload) -> bytes:
    return json.dumps(payload).encode("utf-8")


def test_decodes_legacy_sms():
    message = decode_inbound(
        _body(
            {
                "msisdn": "819011112222",
                "to": "815012345678",
                "messageId": "m1",
                "text": "hi",
                "type": "text",
                "keyword": "HI",
                "message-timestamp": "2024-05-01 09:30:00",
            }
        )
    )

    assert message.message_id == "m1"
    assert message.from_ == "819011112222"
    assert message.to == "815012345678"
    assert message.channel == "sms"
    assert message.content_type == "text"
    assert message.text == "hi"
    assert message.timestamp == datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def test_legacy_sms_with_malformed_timestamp_still_decodes():
    message = decode_inbound(
        _body({"msisdn": "8190", "to": "8150", "messageId": "m2", "text": "x", "message-timestamp": "yesterday"})
    )

    assert message.timestamp is None


def test_decodes_messages_api_payload():
    message = decode_inbound(
        _body(
            {
                "message_uuid": "u1",
                "from": "819011112222",
                "to": "815012345678",
                "channel": "sms",
                "message_type": "text",
                "text": "hi",
                "timestamp": "2024-05-01T09:30:00Z",
            }
        )
    )

    assert message.message_id == "u1"
    assert message.from_ == "819011112222"
    assert message.channel == "sms"
    assert message.text == "hi"
    assert message.timestamp == datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def test_messages_api_media_is_carried():
    message = decode_inbound(
        _body(
            {
                "message_uuid": "u2",
                "from": "8190",
                "to": "8150",
                "channel": "whatsapp",
                "message_type": "image",
                "image": {"url": "https://cdn.example.test/a.jpg", "caption": "receipt"},
            }
        )
    )

    assert message.channel == "whatsapp"
    assert message.content_type == "image"
    assert message.text is None
    assert message.media.url == "https://cdn.example.test/a.jpg"
    assert message.media.caption == "receipt"


def test_messages_api_wins_when_both_shapes_match():
    message = decode_inbound(_body({"message_uuid": "u3", "msisdn": "8190", "from": "8191", "text": "both"}))

    assert message.message_id == "u3"
    assert message.from_ == "8191"


def test_detectors_are_ordered():
    assert [d.__name__ for d in INBOUND_DETECTORS] == ["detect_messages_api", "detect_legacy_sms"]


@pytest.mark.parametrize(
    "body",
    [
        b'{"foo": "bar"}',
        b'{"message_uuid": "", "msisdn": ""}',
        b"[1, 2, 3]",
        b"not json",
        b"",
    ],
)
def test_unrecognized_bodies(body):
    with pytest.raises(UnrecognizedFormatError):
        decode_inbound(body)


def test_decodes_delivery_status():
    status = decode_status(
        _body(
            {
                "message_uuid": "u1",
                "to": "8190",
                "from": "8150",
                "timestamp": "2024-05-01T09:31:00Z",
                "status": "delivered",
                "channel": "sms",
                "usage": {"currency": "EUR", "price": "0.0333"},
                "client_ref": "order-7",
            }
        )
    )

    assert status.is_delivered()
    assert status.is_terminal()
    assert not status.is_failed()
    assert status.usage.price == "0.0333"
    assert status.client_ref == "order-7"


def test_decodes_failed_status_with_error():
    status = decode_status(
        _body({"message_uuid": "u1", "status": "rejected", "error": {"type": "https://x/errors", "title": 1340}})
    )

    assert status.is_failed()
    assert status.error.title == 1340


def test_status_requires_json_object():
    with pytest.raises(UnrecognizedFormatError):
        decode_status(b'"delivered"')


@pytest.mark.parametrize(
    "body",
    [
        b'{"msisdn": ' + b"9" * 5000 + b"}",
        b"[" * 100_000 + b"]" * 100_000,
    ],
    ids=["oversized-integer", "deep-nesting"],
)
def test_pathological_json_is_unrecognized(body):
    with pytest.raises(UnrecognizedFormatError):
        decode_inbound(body)
    with pytest.raises(UnrecognizedFormatError):
        decode_status(body)
