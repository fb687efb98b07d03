from .webhook import EntryError, ProcessedShipment, WebhookSuccessResponse, WebhookErrorResponse
from .shipment import (
    ShipmentResponse,
    ShipmentDetailResponse,
    ShipmentListResponse,
    ShipmentDetailEnvelope,
    Pagination,
)

__all__ = [
    "EntryError",
    "ProcessedShipment",
    "WebhookSuccessResponse",
    "WebhookErrorResponse",
    "ShipmentResponse",
    "ShipmentDetailResponse",
    "ShipmentListResponse",
    "ShipmentDetailEnvelope",
    "Pagination",
]
