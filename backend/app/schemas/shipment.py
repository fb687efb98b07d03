"""
Shipment read schemas.
"""
from pydantic import BaseModel
from datetime import datetime, date
from typing import List, Optional
from decimal import Decimal


class ScanResponse(BaseModel):
    id: int
    scan_type: Optional[str] = None
    scan_group_type: Optional[str] = None
    scan_code: Optional[str] = None
    scan: Optional[str] = None
    scan_date: Optional[date] = None
    scan_time: Optional[str] = None
    scanned_location_code: Optional[str] = None
    scanned_location: Optional[str] = None
    scanned_location_city: Optional[str] = None
    scanned_location_state_code: Optional[str] = None
    comments: Optional[str] = None
    status_timezone: Optional[str] = None
    status_latitude: Optional[str] = None
    status_longitude: Optional[str] = None
    reached_destination_location: Optional[str] = None
    secure_code: Optional[str] = None
    sorry_card_number: Optional[str] = None
    received_by: Optional[str] = None
    relation: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    id_description: Optional[str] = None
    qc_type: Optional[str] = None
    qc_reason: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DeliveryDetailsResponse(BaseModel):
    received_by: Optional[str] = None
    relation: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    id_description: Optional[str] = None
    security_code_delivery: Optional[str] = None
    signature: Optional[str] = None
    id_image: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReweighResponse(BaseModel):
    mps_number: str
    rw_actual_weight: Optional[Decimal] = None
    rw_length: Optional[Decimal] = None
    rw_breadth: Optional[Decimal] = None
    rw_height: Optional[Decimal] = None
    rw_vol_weight: Optional[Decimal] = None
    rw_image_url: Optional[str] = None

    class Config:
        from_attributes = True


class ReweighImageResponse(BaseModel):
    mps_number: str
    rw_image_url: Optional[str] = None

    class Config:
        from_attributes = True


class QCFailureResponse(BaseModel):
    qc_type: Optional[str] = None
    qc_reason: Optional[str] = None
    pictures: Optional[List[str]] = None

    class Config:
        from_attributes = True


class CallLogResponse(BaseModel):
    message: Optional[str] = None
    log_date: Optional[date] = None
    log_time: Optional[str] = None

    class Config:
        from_attributes = True


class PODDCImagesResponse(BaseModel):
    pod_images: Optional[List[str]] = None
    dc_images: Optional[List[str]] = None
    image_sequence: Optional[str] = None

    class Config:
        from_attributes = True


class ShipmentResponse(BaseModel):
    id: int
    waybill_no: str
    sender_id: Optional[str] = None
    receiver_id: Optional[str] = None
    ref_no: Optional[str] = None
    prod_code: Optional[str] = None
    sub_product_code: Optional[str] = None
    feature: Optional[str] = None
    origin: Optional[str] = None
    origin_area_code: Optional[str] = None
    destination: Optional[str] = None
    destination_area_code: Optional[str] = None
    pickup_date: Optional[date] = None
    pickup_time: Optional[str] = None
    expected_delivery_date: Optional[date] = None
    shipment_mode: Optional[str] = None
    weight: Optional[Decimal] = None
    dynamic_expected_delivery_date: Optional[date] = None
    customer_code: Optional[str] = None
    special_instruction: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ShipmentDetailResponse(ShipmentResponse):
    scans: List[ScanResponse] = []
    delivery_details: Optional[DeliveryDetailsResponse] = None
    reweigh: List[ReweighResponse] = []
    reweigh_images: List[ReweighImageResponse] = []
    qc_failed: Optional[QCFailureResponse] = None
    call_logs: List[CallLogResponse] = []
    pod_dc_images: Optional[PODDCImagesResponse] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ShipmentListResponse(BaseModel):
    success: bool = True
    data: List[ShipmentResponse]
    pagination: Pagination


class ShipmentDetailEnvelope(BaseModel):
    success: bool = True
    data: ShipmentDetailResponse

