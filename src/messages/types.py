"""Messages API types: outbound requests, inbound webhooks and delivery status."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Channel(str, Enum):
    SMS = "sms"
    MMS = "mms"
    WHATSAPP = "whatsapp"
    VIBER = "viber_service"
    MESSENGER = "messenger"


class MessageType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    FILE = "file"
    CUSTOM = "custom"
    TEMPLATE = "template"


class Status(str, Enum):
    SUBMITTED = "submitted"
    DELIVERED = "delivered"
    READ = "read"
    REJECTED = "rejected"
    FAILED = "failed"


# ---- outbound ----


class MediaContent(BaseModel):
    url: str
    caption: str | None = None
    name: str | None = None


class WhatsAppTemplateParam(BaseModel):
    default: str


class WhatsAppTemplate(BaseModel):
    name: str
    parameters: list[WhatsAppTemplateParam] | None = None


class WhatsAppOptions(BaseModel):
    policy: str | None = None
    locale: str | None = None
    template: WhatsAppTemplate | None = None


class SendRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(default="", alias="from")
    to: str = ""
    message_type: MessageType = MessageType.TEXT
    text: str | None = None
    channel: Channel = Channel.SMS

    image: MediaContent | None = None
    audio: MediaContent | None = None
    video: MediaContent | None = None
    file: MediaContent | None = None

    whatsapp: WhatsAppOptions | None = None

    client_ref: str | None = None
    webhook_url: str | None = None
    webhook_version: str | None = None

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class SendResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message_uuid: str = ""


# ---- inbound ----


class InboundMedia(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str = ""
    caption: str | None = None
    name: str | None = None


class InboundMessage(BaseModel):
    """Canonical inbound message, whichever webhook format delivered it."""

    model_config = ConfigDict(populate_by_name=True)

    message_id: str
    from_: str = Field(default="", alias="from")
    to: str = ""
    timestamp: datetime | None = None
    channel: str = Channel.SMS.value
    content_type: str = MessageType.TEXT.value
    text: str | None = None
    media: InboundMedia | None = None


class MessagesApiInbound(BaseModel):
    """Messages API (v1) inbound webhook body."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message_uuid: str = ""
    from_: str = Field(default="", alias="from")
    to: str = ""
    timestamp: datetime | None = None
    channel: str = ""
    message_type: str = ""
    text: str | None = None

    image: InboundMedia | None = None
    audio: InboundMedia | None = None
    video: InboundMedia | None = None
    file: InboundMedia | None = None

    def media(self) -> InboundMedia | None:
        return self.image or self.audio or self.video or self.file

    def to_inbound_message(self) -> InboundMessage:
        return InboundMessage(
            message_id=self.message_uuid,
            from_=self.from_,
            to=self.to,
            timestamp=self.timestamp,
            channel=self.channel,
            content_type=self.message_type,
            text=self.text,
            media=self.media(),
        )


class LegacyInboundSMS(BaseModel):
    """Older SMS API inbound body, still sent by some account configurations."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    msisdn: str = ""
    to: str = ""
    message_id: str = Field(default="", alias="messageId")
    text: str = ""
    message_timestamp: str = Field(default="", alias="message-timestamp")
    type: str | None = None
    keyword: str | None = None


# ---- status ----


class StatusError(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str | None = None
    title: str | int | None = None
    detail: str | None = None
    instance: str | None = None


class Usage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    currency: str | None = None
    price: str | None = None


class MessageStatus(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message_uuid: str = ""
    to: str = ""
    from_: str = Field(default="", alias="from")
    timestamp: datetime | None = None
    status: str = ""
    channel: str | None = None
    error: StatusError | None = None
    usage: Usage | None = None
    client_ref: str | None = None

    def is_delivered(self) -> bool:
        return self.status in (Status.DELIVERED.value, Status.READ.value)

    def is_failed(self) -> bool:
        return self.status in (Status.REJECTED.value, Status.FAILED.value)

    def is_terminal(self) -> bool:
        return self.is_delivered() or self.is_failed()
