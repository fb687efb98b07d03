"""
Carrier status webhook endpoint.
"""
import asyncio
import logging
import time

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from app.api.auth import authenticate_carrier, check_ip_whitelist, client_ip, read_payload
from app.schemas.webhook import WebhookErrorResponse
from app.services.errors import BatchTimeoutError
from app.services.webhook_processor import StatusWebhookProcessor

router = APIRouter()
logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Request timeout"


@router.post("/status", dependencies=[Depends(check_ip_whitelist)])
async def process_status_webhook(
    request: Request,
    client_id: str = Depends(authenticate_carrier),
):
    """
    Receive a batch of shipment status updates.

    200 tells the carrier not to retry; 400 means the payload itself is bad;
    500 and 504 invite a retry.
    """
    state = request.app.state
    settings = state.settings
    payload = await read_payload(request)

    processor = StatusWebhookProcessor(
        state.db.session,
        state.image_store,
        state.waybill_locks,
        deadline=time.monotonic() + settings.request_timeout,
    )
    try:
        outcome = await asyncio.wait_for(
            run_in_threadpool(processor.process, payload),
            timeout=settings.request_timeout,
        )
        status_code, body = outcome.status_code, outcome.body
    except (asyncio.TimeoutError, BatchTimeoutError):
        logger.error("Webhook from %s timed out after %.0fs", client_id, settings.request_timeout)
        status_code = status.HTTP_504_GATEWAY_TIMEOUT
        body = WebhookErrorResponse(message=TIMEOUT_MESSAGE).model_dump(exclude_none=True)
    except Exception as e:
        logger.exception("Webhook processing error")
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        body = WebhookErrorResponse(
            message="Server error processing webhook",
            error=str(e) if settings.is_development else "Internal server error",
        ).model_dump(exclude_none=True)

    await run_in_threadpool(
        state.request_logger.log,
        request.url.path,
        status_code,
        body,
        payload,
        request.method,
        client_ip(request),
        client_id,
        dict(request.headers),
        dict(request.query_params),
    )
    return JSONResponse(status_code=status_code, content=body)
