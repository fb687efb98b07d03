"""
Payload normalization - reduces Lite/Plus/Advance status entries to canonical records.

Pure transformation: no database or file access happens here. Image payloads
are carried through as raw base64 strings and resolved to stored references
by the caller.
"""
import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from app.config.schema_loader import scan_fields, shipment_fields
from app.services.errors import IdentityMissingError, NormalizationError
from app.services.validation import as_list, entry_shipment

COMPACT_DATE_PATTERN = re.compile(r"^(\d{4})(\d{2})(\d{2})$")
# Numeric columns are stored with two decimal places
DECIMAL_QUANTUM = Decimal("0.01")


def norm_text(val) -> Optional[str]:
    """Normalize text: strip whitespace, empty becomes None."""
    if val is None:
        return None
    if isinstance(val, (dict, list)):
        return None
    s = str(val).strip()
    return s if s else None


def safe_decimal(val, field_name: str) -> Optional[Decimal]:
    """
    Convert a present value to Decimal.

    Empty or absent values mean "no update" and return None. A present value
    that is not numeric raises NormalizationError. Results are rounded to the
    stored scale so a replayed value compares equal to the stored one.
    """
    if val is None:
        return None
    if isinstance(val, bool):
        raise NormalizationError(field_name, val)
    if isinstance(val, str):
        s = val.strip().replace(",", "")
        if not s:
            return None
        val = s
    try:
        result = Decimal(str(val))
    except (InvalidOperation, ValueError, TypeError):
        raise NormalizationError(field_name, val)
    if not result.is_finite():
        raise NormalizationError(field_name, val)
    try:
        return result.quantize(DECIMAL_QUANTUM, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise NormalizationError(field_name, val)


def normalize_log_date(value) -> Optional[str]:
    """Reformat a compact yyyymmdd call-log date to dd-mm-yyyy."""
    text = norm_text(value)
    if text is None:
        return None
    match = COMPACT_DATE_PATTERN.match(text)
    if match:
        year, month, day = match.groups()
        return f"{day}-{month}-{year}"
    return text


def _non_empty_dict(value) -> bool:
    return isinstance(value, dict) and len(value) > 0


@dataclass
class ShipmentRecord:
    waybill_no: str
    # column -> value, only for fields carrying a non-empty value
    fields: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ScanRecord:
    # every scan column is present; absent values are None
    fields: Dict[str, Optional[str]] = field(default_factory=dict)

    @property
    def scan_code(self) -> Optional[str]:
        return self.fields.get("scan_code")

    @property
    def scan_date(self) -> Optional[str]:
        return self.fields.get("scan_date")

    @property
    def scan_time(self) -> Optional[str]:
        return self.fields.get("scan_time")


@dataclass
class DeliveryDetailsRecord:
    received_by: Optional[str] = None
    relation: Optional[str] = None
    id_type: Optional[str] = None
    id_number: Optional[str] = None
    id_description: Optional[str] = None
    security_code_delivery: Optional[str] = None
    signature_data: Optional[str] = None
    id_image_data: Optional[str] = None
    signature: Optional[str] = None
    id_image: Optional[str] = None


@dataclass
class ReweighRecord:
    mps_number: str = ""
    rw_actual_weight: Optional[Decimal] = None
    rw_length: Optional[Decimal] = None
    rw_breadth: Optional[Decimal] = None
    rw_height: Optional[Decimal] = None
    rw_vol_weight: Optional[Decimal] = None
    rw_image_url: Optional[str] = None


@dataclass
class ReweighImageRecord:
    mps_number: str = ""
    rw_image_url: Optional[str] = None


@dataclass
class QCRecord:
    qc_type: Optional[str] = None
    qc_reason: Optional[str] = None
    picture_data: List[str] = field(default_factory=list)
    pictures: Optional[List[str]] = None


@dataclass
class CallLogRecord:
    message: Optional[str] = None
    log_date: Optional[str] = None
    log_time: Optional[str] = None


@dataclass
class PODDCImagesRecord:
    pod_image_data: List[str] = field(default_factory=list)
    dc_image_data: List[str] = field(default_factory=list)
    image_sequence: Optional[str] = None
    pod_images: Optional[List[str]] = None
    dc_images: Optional[List[str]] = None


@dataclass
class ShipmentUpdate:
    """Canonical set of sub-entity updates for one status entry."""
    shipment: ShipmentRecord
    scans: List[ScanRecord] = field(default_factory=list)
    delivery_details: Optional[DeliveryDetailsRecord] = None
    reweighs: List[ReweighRecord] = field(default_factory=list)
    reweigh_images: List[ReweighImageRecord] = field(default_factory=list)
    qc: Optional[QCRecord] = None
    call_logs: List[CallLogRecord] = field(default_factory=list)
    pod_dc_images: Optional[PODDCImagesRecord] = None

    @property
    def waybill_no(self) -> str:
        return self.shipment.waybill_no


def normalize_shipment(shipment: Dict[str, Any]) -> ShipmentRecord:
    waybill_no = norm_text(shipment.get("WaybillNo"))
    if not waybill_no:
        raise IdentityMissingError("Missing Shipment or WaybillNo")

    record = ShipmentRecord(waybill_no=waybill_no)
    for spec in shipment_fields():
        if spec.column == "waybill_no":
            continue
        raw = shipment.get(spec.name)
        if spec.type == "decimal":
            value = safe_decimal(raw, spec.name)
        else:
            value = norm_text(raw)
        if value is not None:
            record.fields[spec.column] = value
    return record


def has_lite_scan(shipment: Dict[str, Any]) -> bool:
    return bool(norm_text(shipment.get("Scan")) or norm_text(shipment.get("ScanCode")))


def normalize_lite_scan(shipment: Dict[str, Any]) -> ScanRecord:
    """Build one scan from fields carried flat on the shipment object."""
    fields = {}
    for spec in scan_fields():
        fields[spec.column] = norm_text(shipment.get(spec.name)) if spec.lite else None
    return ScanRecord(fields=fields)


def normalize_scan_detail(scan: Dict[str, Any]) -> ScanRecord:
    return ScanRecord(fields={spec.column: norm_text(scan.get(spec.name)) for spec in scan_fields()})


def normalize_scans(shipment: Dict[str, Any]) -> List[ScanRecord]:
    scans: List[ScanRecord] = []
    if has_lite_scan(shipment):
        scans.append(normalize_lite_scan(shipment))

    nested = shipment.get("Scans")
    if isinstance(nested, dict):
        for detail in as_list(nested.get("ScanDetail")):
            if _non_empty_dict(detail):
                scans.append(normalize_scan_detail(detail))
    return scans


def normalize_delivery_details(data: Any) -> Optional[DeliveryDetailsRecord]:
    if not _non_empty_dict(data):
        return None
    return DeliveryDetailsRecord(
        received_by=norm_text(data.get("ReceivedBy")),
        relation=norm_text(data.get("Relation")),
        id_type=norm_text(data.get("IDType")),
        id_number=norm_text(data.get("IDNumber")),
        id_description=norm_text(data.get("IDDescription")),
        security_code_delivery=norm_text(data.get("SecurityCodeDelivery")),
        signature_data=norm_text(data.get("Signature")),
        id_image_data=norm_text(data.get("IDImage")),
    )


def normalize_reweighs(data: Any) -> List[ReweighRecord]:
    records = []
    for item in as_list(data):
        if not _non_empty_dict(item):
            continue
        records.append(ReweighRecord(
            mps_number=norm_text(item.get("MPSNumber")) or "",
            rw_actual_weight=safe_decimal(item.get("RWActualWeight"), "RWActualWeight"),
            rw_length=safe_decimal(item.get("RWLength"), "RWLength"),
            rw_breadth=safe_decimal(item.get("RWBreadth"), "RWBreadth"),
            rw_height=safe_decimal(item.get("RWHeight"), "RWHeight"),
            rw_vol_weight=safe_decimal(item.get("RWVolWeight"), "RWVolWeight"),
            rw_image_url=norm_text(item.get("RWImageURL")),
        ))
    return records


def normalize_reweigh_images(data: Any) -> List[ReweighImageRecord]:
    return [
        ReweighImageRecord(
            mps_number=norm_text(item.get("MPSNumber")) or "",
            rw_image_url=norm_text(item.get("RWImageURL")),
        )
        for item in as_list(data)
        if _non_empty_dict(item)
    ]


def normalize_qc(scans: Dict[str, Any]) -> Optional[QCRecord]:
    """
    Resolve QCFailed (Type/Reason) and QC (Result/Remarks) shapes into one record.

    QCFailed wins when both are present; within the chosen shape Type and
    Reason are preferred, Result and Remarks are the fallbacks.
    """
    qc_failed = scans.get("QCFailed")
    qc = scans.get("QC")
    data = qc_failed if _non_empty_dict(qc_failed) else qc
    if not _non_empty_dict(data):
        return None

    pictures = [p for p in as_list(data.get("Pictures")) if isinstance(p, str) and p.strip()]
    return QCRecord(
        qc_type=norm_text(data.get("Type")) or norm_text(data.get("Result")),
        qc_reason=norm_text(data.get("Reason")) or norm_text(data.get("Remarks")),
        picture_data=pictures,
    )


def normalize_call_logs(data: Any) -> List[CallLogRecord]:
    return [
        CallLogRecord(
            message=norm_text(item.get("Message")),
            log_date=normalize_log_date(item.get("LogDate")),
            log_time=norm_text(item.get("LogTime")),
        )
        for item in as_list(data)
        if _non_empty_dict(item)
    ]


def normalize_pod_dc_images(data: Any) -> Optional[PODDCImagesRecord]:
    if not _non_empty_dict(data):
        return None

    def image_list(value) -> List[str]:
        return [item for item in as_list(value) if isinstance(item, str) and item.strip()]

    sequence = (
        norm_text(data.get("Imagesequence"))
        or norm_text(data.get("ImageSequence"))
        or norm_text(data.get("image_sequence"))
    )
    return PODDCImagesRecord(
        pod_image_data=image_list(data.get("PODImage")),
        dc_image_data=image_list(data.get("DCImage")),
        image_sequence=sequence,
    )


def normalize_entry(entry: Any) -> ShipmentUpdate:
    """
    Normalize one batch entry into a ShipmentUpdate.

    Raises IdentityMissingError when the entry has no shipment or WaybillNo,
    and NormalizationError when a numeric field carries a non-numeric value.
    Sub-resources absent from the entry are left as None/empty, meaning
    "no update" rather than "clear".
    """
    shipment = entry_shipment(entry)
    if shipment is None:
        raise IdentityMissingError("Missing Shipment or WaybillNo")

    update = ShipmentUpdate(shipment=normalize_shipment(shipment))
    update.scans = normalize_scans(shipment)

    nested = shipment.get("Scans")
    if isinstance(nested, dict):
        update.delivery_details = normalize_delivery_details(nested.get("DeliveryDetails"))
        update.reweighs = normalize_reweighs(nested.get("Reweigh"))
        update.reweigh_images = normalize_reweigh_images(nested.get("RWImage"))
        update.qc = normalize_qc(nested)
        update.call_logs = normalize_call_logs(nested.get("CallLogs"))
        update.pod_dc_images = normalize_pod_dc_images(nested.get("PODDCImages"))
    return update
