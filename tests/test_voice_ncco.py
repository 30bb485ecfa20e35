from __future__ import annotations

import json

import pytest

from voice.ncco import NCCOBuilder, stream_and_input, talk_and_input, talk_and_input_japanese, talk_japanese


def test_talk_then_speech_input():
    program = (
        NCCOBuilder()
        .talk("こんにちは").japanese().done()
        .input().speech().event_url("https://x/input").end_on_silence(1.5).done()
        .build()
    )

    assert program.to_list() == [
        {"action": "talk", "text": "こんにちは", "voiceName": "Mizuki", "language": "ja-JP"},
        {
            "action": "input",
            "type": ["speech"],
            "eventUrl": ["https://x/input"],
            "eventMethod": "POST",
            "endOnSilence": 1.5,
        },
    ]


def test_unset_fields_are_omitted():
    program = NCCOBuilder().talk("hello").done().build()

    assert program.to_list() == [{"action": "talk", "text": "hello"}]


def test_explicit_event_method_is_kept():
    program = NCCOBuilder().input().dtmf().event_method("GET").max_digits(4).submit_on_hash().done().build()

    assert program[0].to_wire() == {
        "action": "input",
        "type": ["dtmf"],
        "eventMethod": "GET",
        "maxDigits": 4,
        "submitOnHash": True,
    }


def test_actions_keep_insertion_order():
    program = (
        NCCOBuilder()
        .stream("https://x/a.mp3", "https://x/b.mp3").loop(2).done()
        .record().format("mp3").beep_start().split().channels(2).done()
        .notify("https://x/notify", {"step": "recorded"})
        .talk("bye").barge_in().level(0.5).done()
        .build()
    )

    assert [action.action for action in program] == ["stream", "record", "notify", "talk"]
    wire = program.to_list()
    assert wire[0] == {"action": "stream", "streamUrl": ["https://x/a.mp3", "https://x/b.mp3"], "loop": 2}
    assert wire[1] == {"action": "record", "format": "mp3", "beepStart": True, "split": "conversation", "channels": 2}
    assert wire[2] == {
        "action": "notify",
        "eventUrl": ["https://x/notify"],
        "eventMethod": "POST",
        "payload": {"step": "recorded"},
    }
    assert wire[3] == {"action": "talk", "text": "bye", "bargeIn": True, "level": 0.5}


def test_zero_loop_is_emitted():
    program = NCCOBuilder().talk("again").loop(0).done().build()

    assert program.to_list()[0]["loop"] == 0


def test_input_types_are_deduplicated():
    program = NCCOBuilder().input().speech().speech().dtmf().done().build()

    assert program[0].type == ["speech", "dtmf"]


def test_done_twice_raises():
    builder = NCCOBuilder()
    talk = builder.talk("once")
    talk.done()

    with pytest.raises(RuntimeError):
        talk.done()
    assert len(builder.build()) == 1


def test_build_returns_snapshot():
    builder = NCCOBuilder().talk("one").done()
    first = builder.build()
    builder.talk("two").done()

    assert len(first) == 1
    assert len(builder.build()) == 2


def test_talk_and_input_helper():
    program = talk_and_input("hi", "en-US", "Joey", "https://x/in", 2.0, start_timeout=3, max_duration=20)

    assert program.to_list() == [
        {"action": "talk", "text": "hi", "voiceName": "Joey", "language": "en-US"},
        {
            "action": "input",
            "type": ["speech"],
            "eventUrl": ["https://x/in"],
            "eventMethod": "POST",
            "endOnSilence": 2.0,
            "startTimeout": 3,
            "maxDuration": 20,
        },
    ]


def test_japanese_helpers():
    assert talk_japanese("はい").to_list() == [
        {"action": "talk", "text": "はい", "voiceName": "Mizuki", "language": "ja-JP"}
    ]

    program = talk_and_input_japanese("どうぞ", "https://x/in")
    assert program[1].end_on_silence == 1.5
    assert program[1].start_timeout == 5
    assert program[1].max_duration == 30


def test_stream_and_input_helper():
    program = stream_and_input("https://x/greeting.mp3", "https://x/in", 1.0)

    assert [action.action for action in program] == ["stream", "input"]
    assert program[0].stream_url == ["https://x/greeting.mp3"]


def test_to_json_keeps_non_ascii_text():
    encoded = talk_japanese("こんにちは").to_json()

    assert "こんにちは" in encoded
    assert json.loads(encoded)[0]["voiceName"] == "Mizuki"


def test_setters_after_done_do_not_reach_program():
    builder = NCCOBuilder()
    talk = builder.talk("hi")
    program = talk.done().build()

    talk.language("en-US")

    assert program.to_list() == [{"action": "talk", "text": "hi"}]
    assert builder.build().to_list() == [{"action": "talk", "text": "hi"}]


def test_built_programs_are_independent():
    builder = NCCOBuilder().input().speech().done()
    first = builder.build()

    first[0].type.append("dtmf")

    assert builder.build()[0].type == ["speech"]
