"""NCCO (Nexmo Call Control Object) model and fluent builder.

A call program is an ordered list of actions executed one after another by the
Vonage call engine::

    ncco = (
        NCCOBuilder()
        .talk("こんにちは").japanese().done()
        .input().speech().event_url("https://example.com/voice/input").done()
        .build()
    )

Sub-builders hold a reference to their parent; ``done()`` appends the action
and hands the parent back. Unset optional fields are omitted from the JSON.
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, RootModel
from pydantic.alias_generators import to_camel

ActionType = Literal["talk", "stream", "input", "record", "notify"]

DEFAULT_EVENT_METHOD = "POST"
JAPANESE_VOICE = "Mizuki"
JAPANESE_LANGUAGE = "ja-JP"


class CallAction(BaseModel):
    """Single NCCO action; one flat model covers every action type."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    action: ActionType

    # talk
    text: str | None = None
    voice_name: str | None = None
    language: str | None = None
    style: int | None = None
    premium: bool | None = None
    level: float | None = None
    barge_in: bool | None = None
    loop: int | None = None

    # stream
    stream_url: list[str] | None = None

    # input
    type: list[str] | None = None
    event_url: list[str] | None = None
    event_method: str | None = None
    end_on_silence: float | None = None
    start_timeout: int | None = None
    max_duration: int | None = None
    max_digits: int | None = None
    submit_on_hash: bool | None = None
    time_out: int | None = None

    # notify
    payload: dict[str, Any] | None = None

    # record
    format: str | None = None
    beep_start: bool | None = None
    end_on_key: str | None = None
    channels: int | None = None
    split: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class CallProgram(RootModel[list[CallAction]]):
    """Ordered NCCO, serialised as a JSON array."""

    def __iter__(self):  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index: int) -> CallAction:
        return self.root[index]

    def to_list(self) -> list[dict[str, Any]]:
        return [action.to_wire() for action in self.root]

    def to_json(self) -> str:
        return json.dumps(self.to_list(), ensure_ascii=False)


class NCCOBuilder:
    def __init__(self) -> None:
        self._actions: list[CallAction] = []

    def talk(self, text: str) -> TalkBuilder:
        return TalkBuilder(self, CallAction(action="talk", text=text))

    def stream(self, *urls: str) -> StreamBuilder:
        return StreamBuilder(self, CallAction(action="stream", stream_url=list(urls)))

    def input(self) -> InputBuilder:
        return InputBuilder(self, CallAction(action="input"))

    def record(self) -> RecordBuilder:
        return RecordBuilder(self, CallAction(action="record"))

    def notify(self, event_url: str, payload: dict[str, Any]) -> NCCOBuilder:
        self._actions.append(
            CallAction(
                action="notify",
                event_url=[event_url],
                event_method=DEFAULT_EVENT_METHOD,
                payload=payload,
            )
        )
        return self

    def build(self) -> CallProgram:
        return CallProgram([action.model_copy(deep=True) for action in self._actions])

    def _append(self, action: CallAction) -> None:
        self._actions.append(action)


class _ActionBuilder:
    def __init__(self, parent: NCCOBuilder, action: CallAction) -> None:
        self._parent = parent
        self._action = action
        self._finished = False

    def _finalize(self) -> None:
        """Hook for per-action defaults applied at ``done()``."""

    def done(self) -> NCCOBuilder:
        if self._finished:
            raise RuntimeError(f"{self._action.action} action already finalized")
        self._finalize()
        self._finished = True
        # Later setter calls on this builder must not reach the program.
        self._parent._append(self._action.model_copy(deep=True))
        return self._parent


class TalkBuilder(_ActionBuilder):
    def voice_name(self, name: str) -> TalkBuilder:
        self._action.voice_name = name
        return self

    def language(self, lang: str) -> TalkBuilder:
        self._action.language = lang
        return self

    def style(self, style: int) -> TalkBuilder:
        self._action.style = style
        return self

    def premium(self) -> TalkBuilder:
        self._action.premium = True
        return self

    def level(self, level: float) -> TalkBuilder:
        # Vonage accepts -1..1; not range-checked here.
        self._action.level = level
        return self

    def barge_in(self) -> TalkBuilder:
        self._action.barge_in = True
        return self

    def loop(self, count: int) -> TalkBuilder:
        # 0 loops forever.
        self._action.loop = count
        return self

    def japanese(self) -> TalkBuilder:
        self._action.voice_name = JAPANESE_VOICE
        self._action.language = JAPANESE_LANGUAGE
        return self


class StreamBuilder(_ActionBuilder):
    def level(self, level: float) -> StreamBuilder:
        self._action.level = level
        return self

    def barge_in(self) -> StreamBuilder:
        self._action.barge_in = True
        return self

    def loop(self, count: int) -> StreamBuilder:
        self._action.loop = count
        return self


class InputBuilder(_ActionBuilder):
    def _add_type(self, kind: str) -> None:
        kinds = self._action.type or []
        if kind not in kinds:
            kinds.append(kind)
        self._action.type = kinds

    def speech(self) -> InputBuilder:
        self._add_type("speech")
        return self

    def dtmf(self) -> InputBuilder:
        self._add_type("dtmf")
        return self

    def speech_and_dtmf(self) -> InputBuilder:
        self._action.type = ["speech", "dtmf"]
        return self

    def event_url(self, url: str) -> InputBuilder:
        self._action.event_url = [url]
        return self

    def event_method(self, method: str) -> InputBuilder:
        self._action.event_method = method
        return self

    def end_on_silence(self, seconds: float) -> InputBuilder:
        self._action.end_on_silence = seconds
        return self

    def start_timeout(self, seconds: int) -> InputBuilder:
        self._action.start_timeout = seconds
        return self

    def max_duration(self, seconds: int) -> InputBuilder:
        self._action.max_duration = seconds
        return self

    def max_digits(self, digits: int) -> InputBuilder:
        self._action.max_digits = digits
        return self

    def submit_on_hash(self) -> InputBuilder:
        self._action.submit_on_hash = True
        return self

    def time_out(self, seconds: int) -> InputBuilder:
        self._action.time_out = seconds
        return self

    def _finalize(self) -> None:
        if not self._action.event_method:
            self._action.event_method = DEFAULT_EVENT_METHOD


class RecordBuilder(_ActionBuilder):
    def format(self, fmt: str) -> RecordBuilder:
        self._action.format = fmt
        return self

    def end_on_silence(self, seconds: float) -> RecordBuilder:
        self._action.end_on_silence = seconds
        return self

    def end_on_key(self, key: str) -> RecordBuilder:
        self._action.end_on_key = key
        return self

    def beep_start(self) -> RecordBuilder:
        self._action.beep_start = True
        return self

    def event_url(self, url: str) -> RecordBuilder:
        self._action.event_url = [url]
        return self

    def split(self) -> RecordBuilder:
        self._action.split = "conversation"
        return self

    def channels(self, channels: int) -> RecordBuilder:
        self._action.channels = channels
        return self


def talk_and_input(
    text: str,
    language: str,
    voice_name: str,
    input_event_url: str,
    end_on_silence: float,
    *,
    start_timeout: int = 5,
    max_duration: int = 30,
) -> CallProgram:
    """Speak, then wait for speech input."""

    return (
        NCCOBuilder()
        .talk(text).voice_name(voice_name).language(language).done()
        .input().speech().event_url(input_event_url)
        .end_on_silence(end_on_silence).start_timeout(start_timeout).max_duration(max_duration).done()
        .build()
    )


def talk_japanese(text: str) -> CallProgram:
    return NCCOBuilder().talk(text).japanese().done().build()


def talk_and_input_japanese(text: str, input_event_url: str) -> CallProgram:
    return talk_and_input(text, JAPANESE_LANGUAGE, JAPANESE_VOICE, input_event_url, 1.5)


def stream_and_input(audio_url: str, input_event_url: str, end_on_silence: float) -> CallProgram:
    """Play an audio file, then wait for speech input."""

    return (
        NCCOBuilder()
        .stream(audio_url).done()
        .input().speech().event_url(input_event_url)
        .end_on_silence(end_on_silence).start_timeout(5).max_duration(30).done()
        .build()
    )
