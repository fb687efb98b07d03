"""
Carrier authentication dependencies for the status webhook.
"""
import hmac
import logging
from typing import Any, Optional

from fastapi import HTTPException, Request, status
from starlette.concurrency import run_in_threadpool

from app.schemas.webhook import WebhookErrorResponse

logger = logging.getLogger(__name__)


def client_ip(request: Request) -> str:
    """Peer address, or the first X-Forwarded-For hop when proxy headers are trusted."""
    settings = getattr(request.app.state, "settings", None)
    if settings is not None and settings.trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def read_payload(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        return None


async def reject(request: Request, status_code: int, message: str, hint: Optional[str] = None) -> None:
    """Audit a rejected webhook call, then abort the request."""
    body = WebhookErrorResponse(message=message, hint=hint).model_dump(exclude_none=True)
    request_logger = getattr(request.app.state, "request_logger", None)
    if request_logger is not None:
        await run_in_threadpool(
            request_logger.log,
            request.url.path,
            status_code,
            body,
            await read_payload(request),
            request.method,
            client_ip(request),
            request.headers.get("client-id"),
            dict(request.headers),
            dict(request.query_params),
        )
    raise HTTPException(status_code=status_code, detail=body)


async def authenticate_carrier(request: Request) -> str:
    """Validate client-id and license-key headers against configured values."""
    settings = request.app.state.settings
    headers = request.headers
    client_id = headers.get("client-id") or headers.get("client_id")
    license_key = headers.get("license-key") or headers.get("license key")

    if not client_id or not license_key:
        logger.warning("Rejected webhook from %s: missing credentials", client_ip(request))
        await reject(
            request,
            status.HTTP_401_UNAUTHORIZED,
            "Unauthorized: Missing client-id or License Key headers",
            hint="Please include headers: client-id and license-key",
        )

    valid = hmac.compare_digest(client_id.encode(), settings.client_id.encode()) and hmac.compare_digest(
        license_key.encode(), settings.license_key.encode()
    )
    if not valid:
        logger.warning("Rejected webhook from %s: invalid credentials", client_ip(request))
        await reject(request, status.HTTP_401_UNAUTHORIZED, "Unauthorized: Invalid credentials")
    return client_id


async def check_ip_whitelist(request: Request) -> None:
    """Only enforced in production when ENABLE_IP_WHITELIST is set."""
    settings = request.app.state.settings
    if not (settings.is_production and settings.enable_ip_whitelist):
        return
    ip = client_ip(request)
    if ip not in settings.allowed_ips:
        logger.warning("Rejected webhook from non-whitelisted address %s", ip)
        await reject(request, status.HTTP_403_FORBIDDEN, "Forbidden: IP address not whitelisted")
