"""Vonage Messages API client."""

from __future__ import annotations

import logging

import httpx

from auth.credentials import Credentials
from auth.errors import NotConfiguredError, ProviderAPIError
from messages.types import Channel, MediaContent, MessageType, SendRequest, SendResponse

LOGGER = logging.getLogger(__name__)

BASE_URL = "https://api.nexmo.com"


class MessagesClient:
    """Sends SMS, MMS and WhatsApp messages.

    Uses an application JWT when application credentials are configured and
    falls back to HTTP basic auth with the API key pair otherwise.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not credentials.is_configured():
            raise NotConfiguredError()
        self._credentials = credentials
        self._minter = credentials.token_minter() if credentials.has_application() else None
        self._phone_number = credentials.phone_number
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def phone_number(self) -> str:
        return self._phone_number

    async def send(self, request: SendRequest) -> SendResponse:
        if not request.from_:
            request = request.model_copy(update={"from_": self._phone_number})

        headers = {"Authorization": self._authorization(), "Content-Type": "application/json"}
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(f"{self._base_url}/v1/messages", json=request.to_wire(), headers=headers)

        if response.status_code not in (200, 202):
            LOGGER.error("Vonage Messages API error status=%s body=%s", response.status_code, response.text)
            raise ProviderAPIError(response.status_code, response.text)

        result = SendResponse.model_validate(response.json())
        LOGGER.debug(
            "Message sent uuid=%s to=%s channel=%s",
            result.message_uuid,
            request.to,
            request.channel.value,
        )
        return result

    async def send_sms(self, to: str, text: str, *, client_ref: str | None = None) -> SendResponse:
        return await self.send(SendRequest(to=to, text=text, channel=Channel.SMS, client_ref=client_ref))

    async def send_sms_from(self, sender: str, to: str, text: str, *, client_ref: str | None = None) -> SendResponse:
        return await self.send(
            SendRequest(from_=sender, to=to, text=text, channel=Channel.SMS, client_ref=client_ref)
        )

    async def send_mms(self, to: str, image_url: str, caption: str = "") -> SendResponse:
        return await self.send(
            SendRequest(
                to=to,
                message_type=MessageType.IMAGE,
                channel=Channel.MMS,
                image=MediaContent(url=image_url, caption=caption or None),
            )
        )

    async def send_whatsapp(self, to: str, text: str) -> SendResponse:
        return await self.send(SendRequest(to=to, text=text, channel=Channel.WHATSAPP))

    async def send_whatsapp_image(self, to: str, image_url: str, caption: str = "") -> SendResponse:
        return await self.send(
            SendRequest(
                to=to,
                message_type=MessageType.IMAGE,
                channel=Channel.WHATSAPP,
                image=MediaContent(url=image_url, caption=caption or None),
            )
        )

    def new_message(self) -> MessageBuilder:
        return MessageBuilder(self)

    def _authorization(self) -> str:
        if self._minter is not None:
            return f"Bearer {self._minter.mint_api_token()}"
        return self._credentials.basic_auth()


class MessageBuilder:
    def __init__(self, client: MessagesClient) -> None:
        self._client = client
        self._request = SendRequest(from_=client.phone_number)

    def to(self, to: str) -> MessageBuilder:
        self._request.to = to
        return self

    def sender(self, sender: str) -> MessageBuilder:
        self._request.from_ = sender
        return self

    def sms(self) -> MessageBuilder:
        self._request.channel = Channel.SMS
        return self

    def whatsapp(self) -> MessageBuilder:
        self._request.channel = Channel.WHATSAPP
        return self

    def viber(self) -> MessageBuilder:
        self._request.channel = Channel.VIBER
        return self

    def text(self, text: str) -> MessageBuilder:
        self._request.message_type = MessageType.TEXT
        self._request.text = text
        return self

    def image(self, url: str, caption: str = "") -> MessageBuilder:
        self._request.message_type = MessageType.IMAGE
        self._request.image = MediaContent(url=url, caption=caption or None)
        return self

    def audio(self, url: str) -> MessageBuilder:
        self._request.message_type = MessageType.AUDIO
        self._request.audio = MediaContent(url=url)
        return self

    def video(self, url: str, caption: str = "") -> MessageBuilder:
        self._request.message_type = MessageType.VIDEO
        self._request.video = MediaContent(url=url, caption=caption or None)
        return self

    def file(self, url: str, name: str = "") -> MessageBuilder:
        self._request.message_type = MessageType.FILE
        self._request.file = MediaContent(url=url, name=name or None)
        return self

    def client_ref(self, ref: str) -> MessageBuilder:
        self._request.client_ref = ref
        return self

    async def send(self) -> SendResponse:
        return await self._client.send(self._request)
