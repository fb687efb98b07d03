"""
Status webhook response schemas.
"""
from pydantic import BaseModel
from typing import List, Optional


class EntryError(BaseModel):
    waybill_no: str
    error: str


class ProcessedShipment(BaseModel):
    waybill_no: str
    shipment_id: int
    status: str = "processed"


class WebhookSuccessResponse(BaseModel):
    success: bool = True
    message: str = "Webhook processed successfully"
    processed: int
    shipments: List[ProcessedShipment]
    errors: Optional[List[EntryError]] = None


class WebhookErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: Optional[List[EntryError]] = None
    error: Optional[str] = None
    hint: Optional[str] = None
