"""Vonage Voice API client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from auth.credentials import Credentials
from auth.errors import ProviderAPIError
from auth.tokens import TokenMinter
from voice.ncco import CallProgram
from voice.types import CallInfo, CreateCallOptions, CreateCallResponse, Endpoint

LOGGER = logging.getLogger(__name__)

BASE_URL = "https://api.nexmo.com"
DEFAULT_METHOD = "POST"


class VoiceClient:
    """Outbound call creation and in-call control.

    A fresh API token is minted for every request.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._minter: TokenMinter = credentials.token_minter()
        self._phone_number = credentials.phone_number
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def phone_number(self) -> str:
        return self._phone_number

    async def create_call(self, options: CreateCallOptions) -> CreateCallResponse:
        sender = options.from_ or Endpoint.phone(self._phone_number)
        body: dict[str, Any] = {
            "to": [options.to.model_dump(exclude_none=True, mode="json")],
            "from": sender.model_dump(exclude_none=True, mode="json"),
        }

        if options.ncco is not None:
            body["ncco"] = options.ncco.to_list()
        else:
            if options.answer_url:
                body["answer_url"] = [options.answer_url]
            body["answer_method"] = options.answer_method or DEFAULT_METHOD

        if options.event_url:
            body["event_url"] = [options.event_url]
            body["event_method"] = options.event_method or DEFAULT_METHOD

        response = await self._request("POST", "/v1/calls", json=body, expected=(200, 201))
        result = CreateCallResponse.model_validate(response.json())
        LOGGER.debug("Call created uuid=%s status=%s", result.uuid, result.status)
        return result

    async def create_call_to_phone(self, to_number: str, answer_url: str, event_url: str) -> CreateCallResponse:
        return await self.create_call(
            CreateCallOptions(to=Endpoint.phone(to_number), answer_url=answer_url, event_url=event_url)
        )

    async def create_call_with_ncco(self, to_number: str, ncco: CallProgram, event_url: str) -> CreateCallResponse:
        return await self.create_call(CreateCallOptions(to=Endpoint.phone(to_number), ncco=ncco, event_url=event_url))

    async def get_call_info(self, call_uuid: str) -> CallInfo:
        response = await self._request("GET", f"/v1/calls/{call_uuid}")
        return CallInfo.model_validate(response.json())

    async def transfer_call(self, call_uuid: str, ncco_url: str) -> None:
        body = {"action": "transfer", "destination": {"type": "ncco", "url": [ncco_url]}}
        await self._request("PUT", f"/v1/calls/{call_uuid}", json=body, expected=(200, 204))
        LOGGER.debug("Call transferred uuid=%s ncco_url=%s", call_uuid, ncco_url)

    async def hangup_call(self, call_uuid: str) -> None:
        await self._call_action(call_uuid, "hangup")

    async def mute_call(self, call_uuid: str) -> None:
        await self._call_action(call_uuid, "mute")

    async def unmute_call(self, call_uuid: str) -> None:
        await self._call_action(call_uuid, "unmute")

    async def earmuff_call(self, call_uuid: str) -> None:
        """The callee stops hearing the call."""
        await self._call_action(call_uuid, "earmuff")

    async def unearmuff_call(self, call_uuid: str) -> None:
        await self._call_action(call_uuid, "unearmuff")

    async def send_dtmf(self, call_uuid: str, digits: str) -> None:
        await self._request("PUT", f"/v1/calls/{call_uuid}/dtmf", json={"digits": digits})

    async def talk_into_call(self, call_uuid: str, text: str, voice_name: str = "", loop: int = 1) -> None:
        body: dict[str, Any] = {"text": text, "loop": loop}
        if voice_name:
            body["voice_name"] = voice_name
        await self._request("PUT", f"/v1/calls/{call_uuid}/talk", json=body)

    async def stop_talk(self, call_uuid: str) -> None:
        await self._request("DELETE", f"/v1/calls/{call_uuid}/talk", expected=(200, 204))

    async def stream_into_call(self, call_uuid: str, stream_url: str, loop: int = 1) -> None:
        body = {"stream_url": [stream_url], "loop": loop}
        await self._request("PUT", f"/v1/calls/{call_uuid}/stream", json=body)

    async def stop_stream(self, call_uuid: str) -> None:
        await self._request("DELETE", f"/v1/calls/{call_uuid}/stream", expected=(200, 204))

    async def _call_action(self, call_uuid: str, action: str) -> None:
        await self._request("PUT", f"/v1/calls/{call_uuid}", json={"action": action}, expected=(200, 204))
        LOGGER.debug("Call action executed uuid=%s action=%s", call_uuid, action)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        expected: tuple[int, ...] = (200,),
    ) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self._minter.mint_api_token()}",
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.request(method, f"{self._base_url}{path}", json=json, headers=headers)

        if response.status_code not in expected:
            LOGGER.error("Vonage Voice API error status=%s path=%s body=%s", response.status_code, path, response.text)
            raise ProviderAPIError(response.status_code, response.text)
        return response
