"""Voice API request/response and webhook types."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from voice.ncco import CallProgram

TERMINAL_CALL_STATUSES = frozenset({"completed", "failed", "rejected", "busy", "cancelled", "timeout"})


class CallStatus(str, Enum):
    STARTED = "started"
    RINGING = "ringing"
    ANSWERED = "answered"
    COMPLETED = "completed"
    FAILED = "failed"
    REJECTED = "rejected"
    BUSY = "busy"
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"


class EndpointType(str, Enum):
    PHONE = "phone"
    SIP = "sip"
    WEBSOCKET = "websocket"
    VBC = "vbc"


class Endpoint(BaseModel):
    type: EndpointType
    number: str | None = None
    uri: str | None = None

    @classmethod
    def phone(cls, number: str) -> Endpoint:
        return cls(type=EndpointType.PHONE, number=number)

    @classmethod
    def sip(cls, uri: str) -> Endpoint:
        return cls(type=EndpointType.SIP, uri=uri)


class CreateCallOptions(BaseModel):
    to: Endpoint
    from_: Endpoint | None = Field(default=None, description="Defaults to the client's phone number.")
    answer_url: str = ""
    answer_method: str = ""
    event_url: str = ""
    event_method: str = ""
    ncco: CallProgram | None = Field(default=None, description="Inline NCCO used instead of answer_url.")


class CreateCallResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    uuid: str = ""
    status: str = ""
    direction: str = ""
    conversation_uuid: str = ""


class CallInfo(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    uuid: str = ""
    status: str = ""
    direction: str = ""
    rate: str = ""
    price: str = ""
    duration: str = ""
    start_time: datetime | None = None
    end_time: datetime | None = None
    conversation_uuid: str = ""
    network: str = ""
    to: Endpoint | None = None
    from_: Endpoint | None = Field(default=None, alias="from")


class CallEvent(BaseModel):
    """Payload posted to the call event webhook."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    uuid: str = ""
    conversation_uuid: str = ""
    status: str = ""
    direction: str = ""
    timestamp: str = ""
    from_: str = Field(default="", alias="from")
    to: str = ""
    duration: str = ""
    rate: str = ""
    price: str = ""

    def is_terminal(self) -> bool:
        return self.status in TERMINAL_CALL_STATUSES


class ASRMatch(BaseModel):
    confidence: float | str = ""
    text: str = ""


class ASRSpeech(BaseModel):
    model_config = ConfigDict(extra="ignore")

    timeout_reason: str = ""
    results: list[ASRMatch] = Field(default_factory=list)


class ASRResult(BaseModel):
    """Payload posted to an input action's event URL."""

    model_config = ConfigDict(extra="ignore")

    speech: ASRSpeech = Field(default_factory=ASRSpeech)
    dtmf: str | dict[str, Any] = ""
    uuid: str = ""
    conversation_uuid: str = ""
    timed_out: bool = False

    def dtmf_digits(self) -> str:
        # Newer webhooks nest digits: {"digits": "12", "timed_out": true}
        if isinstance(self.dtmf, dict):
            return str(self.dtmf.get("digits") or "")
        return self.dtmf

    def best_transcript(self) -> str:
        if self.speech.results:
            return self.speech.results[0].text
        return ""

    def has_speech(self) -> bool:
        return bool(self.speech.results)

    def has_dtmf(self) -> bool:
        return bool(self.dtmf_digits())
