"""Vonage Voice integration.

This module provides:
- Answer webhook returning the greeting NCCO for inbound/outbound calls.
- Event and speech-input webhooks.
- Endpoint to place an outbound call that lands on the answer webhook.
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from api.dependencies import get_voice_client, require_api_key
from api.schemas import OutboundCallRequest, OutboundCallResponse
from config.settings import get_settings
from voice.client import VoiceClient
from voice.ncco import CallProgram, NCCOBuilder, talk_and_input
from voice.types import ASRResult, CallEvent

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/voice", tags=["voice"])


def _public_url(request: Request, path: str, route_name: str) -> str:
    settings = get_settings()
    if settings.public_base_url:
        return f"{settings.public_base_url.rstrip('/')}/api/voice/{path}"
    return str(request.url_for(route_name))


def _ncco_response(program: CallProgram) -> JSONResponse:
    return JSONResponse(content=program.to_list())


def _greeting(request: Request) -> CallProgram:
    settings = get_settings()
    return talk_and_input(
        settings.voice_greeting,
        settings.voice_language,
        settings.voice_name,
        _public_url(request, "input", "voice_input_webhook"),
        settings.voice_end_on_silence,
        start_timeout=settings.voice_start_timeout,
        max_duration=settings.voice_max_duration,
    )


async def _read_json(request: Request) -> dict:
    body = await request.body()
    if not body:
        return {}
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        LOGGER.warning("Ignoring non-JSON voice webhook body: %s", body[:512])
        return {}
    return payload if isinstance(payload, dict) else {}


@router.api_route("/answer", methods=["GET", "POST"], name="voice_answer_webhook")
async def voice_answer_webhook(request: Request) -> JSONResponse:
    LOGGER.info("Answering call uuid=%s", request.query_params.get("uuid", "unknown"))
    return _ncco_response(_greeting(request))


@router.post("/event", name="voice_event_webhook")
async def voice_event_webhook(request: Request) -> Response:
    # Non-2xx responses make Vonage retry; always acknowledge.
    payload = await _read_json(request)
    try:
        event = CallEvent.model_validate(payload)
    except ValidationError:
        LOGGER.warning("Unparseable call event: %s", payload)
        return Response(status_code=200)

    if event.is_terminal():
        LOGGER.info("Call %s ended status=%s duration=%s", event.uuid, event.status, event.duration)
    else:
        LOGGER.debug("Call %s status=%s", event.uuid, event.status)
    return Response(status_code=200)


@router.post("/input", name="voice_input_webhook")
async def voice_input_webhook(request: Request) -> JSONResponse:
    settings = get_settings()
    payload = await _read_json(request)
    try:
        result = ASRResult.model_validate(payload)
    except ValidationError:
        LOGGER.warning("Unparseable input result: %s", payload)
        result = ASRResult()

    heard = result.best_transcript() or result.dtmf_digits()
    if not heard:
        LOGGER.info("No input on call %s (%s), prompting again", result.uuid, result.speech.timeout_reason)
        return _ncco_response(_greeting(request))

    LOGGER.info("Input on call %s: %s", result.uuid, heard)
    program = (
        NCCOBuilder()
        .talk(settings.voice_acknowledgement)
        .voice_name(settings.voice_name)
        .language(settings.voice_language)
        .done()
        .build()
    )
    return _ncco_response(program)


@router.post("/calls", response_model=OutboundCallResponse, dependencies=[Depends(require_api_key)])
async def create_outbound_call(
    payload: OutboundCallRequest,
    request: Request,
    client: VoiceClient = Depends(get_voice_client),
) -> OutboundCallResponse:
    result = await client.create_call_to_phone(
        payload.to_number,
        _public_url(request, "answer", "voice_answer_webhook"),
        _public_url(request, "event", "voice_event_webhook"),
    )
    return OutboundCallResponse(call_uuid=result.uuid, status=result.status, to_number=payload.to_number)
