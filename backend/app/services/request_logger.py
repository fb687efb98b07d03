"""
Request/response audit logging for the status webhook.
"""
import logging
import ntpath
import posixpath
import re
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Session

from app.models import WebhookAuditLog
from app.services.validation import BATCH_KEY, entry_waybill

logger = logging.getLogger(__name__)

IMAGE_PLACEHOLDER = "[IMAGE_DATA_REMOVED]"

# Payload keys whose values are images or image references
IMAGE_FIELDS = frozenset({
    "IDImage",
    "Signature",
    "Pictures",
    "PODImage",
    "DCImage",
    "RWImageURL",
})

BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/=]+$")

SENSITIVE_HEADERS = frozenset({"license-key", "license key", "authorization"})


def extract_filename(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    return posixpath.basename(ntpath.basename(path))


def _sanitize_image_value(value: Any) -> Any:
    if isinstance(value, str):
        if value.startswith("data:image/") or (len(value) > 100 and BASE64_PATTERN.match(value)):
            return IMAGE_PLACEHOLDER
        return extract_filename(value)
    return IMAGE_PLACEHOLDER


def sanitize_images(obj: Any) -> Any:
    """Replace embedded image data with a placeholder and paths with file names."""
    if isinstance(obj, dict):
        sanitized = {}
        for key, value in obj.items():
            if key in IMAGE_FIELDS:
                if isinstance(value, list):
                    sanitized[key] = [_sanitize_image_value(item) for item in value]
                elif value is None:
                    sanitized[key] = None
                else:
                    sanitized[key] = _sanitize_image_value(value)
            else:
                sanitized[key] = sanitize_images(value)
        return sanitized
    if isinstance(obj, list):
        return [sanitize_images(item) for item in obj]
    return obj


def redact_headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    return {
        key: ("***" if key.lower() in SENSITIVE_HEADERS else value)
        for key, value in (headers or {}).items()
    }


def first_waybill(payload: Any) -> Optional[str]:
    if isinstance(payload, dict) and isinstance(payload.get(BATCH_KEY), list) and payload[BATCH_KEY]:
        waybill_no = entry_waybill(payload[BATCH_KEY][0])
        return None if waybill_no == "unknown" else waybill_no[:20]
    return None


class RequestLogger:
    """
    Writes one webhook_audit_log row per response.

    Uses its own session so a failed batch transaction never takes the audit
    row with it. Failures here are logged and never raised.
    """

    def __init__(self, session_factory: Callable[[], Session], sanitize: bool = True):
        self.session_factory = session_factory
        self.sanitize = sanitize

    def log(
        self,
        api_endpoint: str,
        status_code: int,
        response_data: Dict[str, Any],
        payload: Any = None,
        method: str = "POST",
        client_ip: Optional[str] = None,
        client_id: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        query: Optional[Dict[str, Any]] = None,
    ) -> None:
        try:
            body = sanitize_images(payload) if self.sanitize else payload
            response_body = sanitize_images(response_data) if self.sanitize else response_data
            now = datetime.utcnow().isoformat()
            success = bool(response_data.get("success"))

            entry = WebhookAuditLog(
                waybill_no=first_waybill(payload),
                payload=body,
                request_data={
                    "method": method,
                    "path": api_endpoint,
                    "body": body,
                    "query": query or {},
                    "timestamp": now,
                },
                response_data={
                    "statusCode": status_code,
                    "data": response_body,
                    "timestamp": now,
                },
                response_status=status_code,
                response_message="Success" if success else "Error",
                error_message=None if success else (response_data.get("error") or response_data.get("message")),
                client_ip=client_ip,
                client_id=(client_id or "unknown")[:100],
                api_endpoint=api_endpoint,
                headers=redact_headers(headers),
            )
            db = self.session_factory()
            try:
                db.add(entry)
                db.commit()
            finally:
                db.close()
            logger.info(
                "Logged request: %s %s - Client: %s - Status: %d",
                method,
                api_endpoint,
                client_id or "unknown",
                status_code,
            )
        except Exception as e:
            logger.error("Error logging request/response: %s", e)
