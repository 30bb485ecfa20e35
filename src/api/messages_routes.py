"""Messages API webhooks and outbound SMS."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from api.dependencies import get_messages_client, get_webhook_handler, require_api_key
from api.schemas import SendSMSRequest, SendSMSResponse
from messages.client import MessagesClient
from messages.webhook import WebhookHandler

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("/inbound")
async def inbound_webhook(
    request: Request,
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> Response:
    await handler.handle_inbound(await request.body())
    return Response(status_code=200)


@router.post("/status")
async def status_webhook(
    request: Request,
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> Response:
    await handler.handle_status(await request.body())
    return Response(status_code=200)


@router.post("/sms", response_model=SendSMSResponse, dependencies=[Depends(require_api_key)])
async def send_sms(
    payload: SendSMSRequest,
    client: MessagesClient = Depends(get_messages_client),
) -> SendSMSResponse:
    result = await client.send_sms(payload.to_number, payload.text, client_ref=payload.client_ref)
    return SendSMSResponse(message_uuid=result.message_uuid)
