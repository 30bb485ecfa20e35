"""Inbound webhook decoding.

Vonage posts inbound messages in one of two shapes:

* Messages API: carries ``message_uuid``, ``from``, ``channel``, ``message_type``.
* Legacy SMS API: carries ``msisdn``, ``messageId``, ``message-timestamp``.

Both shapes share field names such as ``to`` and ``text``, so a structural parse
alone cannot tell them apart. Each detector therefore also requires its own
identifying field to be non-empty. Detectors run in ``INBOUND_DETECTORS`` order
and return ``None`` for "not this format"; add a detector to support a new one.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from auth.errors import UnrecognizedFormatError
from messages.types import (
    Channel,
    InboundMessage,
    LegacyInboundSMS,
    MessagesApiInbound,
    MessageStatus,
    MessageType,
)

LOGGER = logging.getLogger(__name__)

LEGACY_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

Detector = Callable[[dict[str, Any]], InboundMessage | None]


def detect_messages_api(payload: dict[str, Any]) -> InboundMessage | None:
    try:
        parsed = MessagesApiInbound.model_validate(payload)
    except ValidationError:
        return None
    if not parsed.message_uuid:
        return None
    return parsed.to_inbound_message()


def detect_legacy_sms(payload: dict[str, Any]) -> InboundMessage | None:
    try:
        parsed = LegacyInboundSMS.model_validate(payload)
    except ValidationError:
        return None
    if not parsed.msisdn:
        return None
    return legacy_to_inbound_message(parsed)


def legacy_to_inbound_message(sms: LegacyInboundSMS) -> InboundMessage:
    return InboundMessage(
        message_id=sms.message_id,
        from_=sms.msisdn,
        to=sms.to,
        timestamp=_parse_legacy_timestamp(sms.message_timestamp),
        channel=Channel.SMS.value,
        content_type=MessageType.TEXT.value,
        text=sms.text,
    )


INBOUND_DETECTORS: tuple[Detector, ...] = (
    detect_messages_api,
    detect_legacy_sms,
)


def decode_inbound(raw: bytes | str) -> InboundMessage:
    """Decode an inbound webhook body into the canonical message.

    Raises:
        UnrecognizedFormatError: if the body is not a JSON object or matches no known format.
    """

    payload = _load_object(raw)
    for detector in INBOUND_DETECTORS:
        message = detector(payload)
        if message is not None:
            return message
    raise UnrecognizedFormatError()


def decode_legacy_sms(raw: bytes | str) -> LegacyInboundSMS | None:
    """Return the raw legacy SMS body, or None when the body is in another format.

    Raises:
        UnrecognizedFormatError: if the body is not a JSON object.
    """

    payload = _load_object(raw)
    if detect_messages_api(payload) is not None:
        return None
    try:
        parsed = LegacyInboundSMS.model_validate(payload)
    except ValidationError:
        return None
    return parsed if parsed.msisdn else None


def decode_status(raw: bytes | str) -> MessageStatus:
    payload = _load_object(raw)
    try:
        return MessageStatus.model_validate(payload)
    except ValidationError as exc:
        raise UnrecognizedFormatError(f"failed to parse message status: {exc.error_count()} errors") from exc


def _load_object(raw: bytes | str) -> dict[str, Any]:
    try:
        payload = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        # ValueError covers bad JSON, bad UTF-8 and oversized integer literals.
        raise UnrecognizedFormatError("webhook body is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise UnrecognizedFormatError("webhook body is not a JSON object")
    return payload


def _parse_legacy_timestamp(value: str) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.strptime(value, LEGACY_TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        LOGGER.debug("Ignoring malformed legacy message-timestamp %r", value)
        return None
