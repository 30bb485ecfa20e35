"""Dispatch of decoded Messages API webhooks to application callbacks.

Vonage treats any non-2xx webhook response as a delivery failure and retries,
so nothing here raises: decode and callback errors are logged and dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from auth.errors import UnrecognizedFormatError
from messages.decoder import decode_inbound, decode_legacy_sms, decode_status
from messages.types import InboundMessage, LegacyInboundSMS, MessageStatus

LOGGER = logging.getLogger(__name__)

InboundHandler = Callable[[InboundMessage], Awaitable[None]]
StatusHandler = Callable[[MessageStatus], Awaitable[None]]
LegacySMSHandler = Callable[[LegacyInboundSMS], Awaitable[None]]


class WebhookHandler:
    def __init__(self) -> None:
        self._on_inbound: InboundHandler | None = None
        self._on_status: StatusHandler | None = None
        self._on_legacy_sms: LegacySMSHandler | None = None

    def on_inbound(self, handler: InboundHandler) -> WebhookHandler:
        self._on_inbound = handler
        return self

    def on_status(self, handler: StatusHandler) -> WebhookHandler:
        self._on_status = handler
        return self

    def on_legacy_sms(self, handler: LegacySMSHandler) -> WebhookHandler:
        """Receive legacy SMS bodies unconverted; they then skip the inbound handler."""
        self._on_legacy_sms = handler
        return self

    async def handle_inbound(self, body: bytes) -> InboundMessage | None:
        try:
            message = decode_inbound(body)
        except UnrecognizedFormatError:
            LOGGER.warning("Unknown inbound webhook format: %s", body[:512])
            return None

        if self._on_legacy_sms is not None:
            legacy = decode_legacy_sms(body)
            if legacy is not None:
                try:
                    await self._on_legacy_sms(legacy)
                except Exception:
                    LOGGER.exception("Error handling legacy inbound SMS %s", legacy.message_id)
                return message

        if self._on_inbound is not None:
            try:
                await self._on_inbound(message)
            except Exception:
                LOGGER.exception("Error handling inbound message %s", message.message_id)
        return message

    async def handle_status(self, body: bytes) -> MessageStatus | None:
        try:
            status = decode_status(body)
        except UnrecognizedFormatError:
            LOGGER.warning("Failed to parse status webhook: %s", body[:512])
            return None

        if self._on_status is not None:
            try:
                await self._on_status(status)
            except Exception:
                LOGGER.exception(
                    "Error handling message status %s (%s)",
                    status.message_uuid,
                    status.status,
                )
        return status


async def log_inbound(message: InboundMessage) -> None:
    LOGGER.info(
        "Inbound %s message %s from %s",
        message.channel,
        message.message_id,
        message.from_,
    )


async def log_status(status: MessageStatus) -> None:
    LOGGER.info("Message %s status %s", status.message_uuid, status.status)
