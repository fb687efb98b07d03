"""
Shipment read API endpoints.
"""
import math
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from app.db.database import get_db
from app.models import (
    CallLog,
    DeliveryDetails,
    PODDCImages,
    QCFailure,
    Reweigh,
    ReweighImage,
    Scan,
    Shipment,
)
from app.schemas.shipment import (
    Pagination,
    ShipmentDetailEnvelope,
    ShipmentDetailResponse,
    ShipmentListResponse,
    ShipmentResponse,
)

router = APIRouter()


@router.get("/shipments", response_model=ShipmentListResponse)
async def list_shipments(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    waybill_no: Optional[str] = None,
    ref_no: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """List shipments, newest first, with optional substring filters."""
    query = db.query(Shipment)
    if waybill_no:
        query = query.filter(Shipment.waybill_no.contains(waybill_no, autoescape=True))
    if ref_no:
        query = query.filter(Shipment.ref_no.contains(ref_no, autoescape=True))

    total = query.count()
    shipments = (
        query.order_by(Shipment.created_at.desc(), Shipment.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return ShipmentListResponse(
        data=[ShipmentResponse.model_validate(s) for s in shipments],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )


@router.get("/shipments/{waybill_no}", response_model=ShipmentDetailEnvelope)
async def get_shipment(
    waybill_no: str,
    db: Session = Depends(get_db)
):
    """Get a shipment with its scans and latest sub-entities."""
    shipment = db.query(Shipment).filter(Shipment.waybill_no == waybill_no).first()
    if not shipment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Shipment not found"
        )

    scans = (
        db.query(Scan)
        .filter(Scan.shipment_id == shipment.id)
        .order_by(Scan.scan_date.desc(), Scan.scan_time.desc(), Scan.id.desc())
        .all()
    )
    call_logs = (
        db.query(CallLog)
        .filter(CallLog.shipment_id == shipment.id)
        .order_by(CallLog.log_date.desc(), CallLog.log_time.desc())
        .all()
    )

    data = ShipmentResponse.model_validate(shipment).model_dump()
    data.update({
        "scans": scans,
        "delivery_details": db.query(DeliveryDetails).filter(DeliveryDetails.shipment_id == shipment.id).first(),
        "reweigh": db.query(Reweigh).filter(Reweigh.shipment_id == shipment.id).order_by(Reweigh.mps_number).all(),
        "reweigh_images": (
            db.query(ReweighImage)
            .filter(ReweighImage.shipment_id == shipment.id)
            .order_by(ReweighImage.mps_number)
            .all()
        ),
        "qc_failed": db.query(QCFailure).filter(QCFailure.shipment_id == shipment.id).first(),
        "call_logs": call_logs,
        "pod_dc_images": db.query(PODDCImages).filter(PODDCImages.shipment_id == shipment.id).first(),
    })
    return ShipmentDetailEnvelope(data=ShipmentDetailResponse.model_validate(data, from_attributes=True))
