"""
Payload validation - date format, field lengths and batch structure.

Validation is all-or-nothing per batch: every entry is checked and every
problem collected before the caller decides whether to persist anything.
"""
import re
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from app.config.schema_loader import FieldSpec, date_fields, length_limits
from app.services.errors import PayloadValidationError, StructuralError

BATCH_KEY = "statustracking"
ENTRY_KEY = "Shipment"

DATE_PATTERN = re.compile(r"^(\d{2})-(\d{2})-(\d{4})$")
MIN_YEAR = 1900
MAX_YEAR = 2100


def is_valid_date(value: Optional[str]) -> bool:
    """
    Validate a dd-mm-yyyy date string.

    Empty or missing values are valid (dates are optional). Anything else must
    match the pattern, describe a real calendar date and fall within
    [1900, 2100].
    """
    if value is None:
        return True
    if not isinstance(value, str):
        return False
    if value.strip() == "":
        return True

    match = DATE_PATTERN.match(value)
    if not match:
        return False

    day, month, year = (int(part) for part in match.groups())
    if year < MIN_YEAR or year > MAX_YEAR:
        return False
    try:
        date(year, month, day)
    except ValueError:
        return False
    return True


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a dd-mm-yyyy string into a date; empty yields None."""
    if value is None or not str(value).strip():
        return None
    match = DATE_PATTERN.match(str(value).strip())
    if not match:
        raise ValueError(f"Invalid date: {value}")
    day, month, year = (int(part) for part in match.groups())
    return date(year, month, day)


def check_field_length(spec: FieldSpec, value: Any) -> Optional[str]:
    if spec.max_length is None or not isinstance(value, str):
        return None
    if len(value) > spec.max_length:
        return (
            f"{spec.name} exceeds maximum length of {spec.max_length} "
            f"characters (received {len(value)})"
        )
    return None


def validate_field_lengths(shipment: Dict[str, Any], limits: Iterable[FieldSpec] = None) -> List[str]:
    """Return one message per string field longer than its schema limit."""
    errors = []
    for spec in limits if limits is not None else length_limits("shipment"):
        message = check_field_length(spec, shipment.get(spec.name))
        if message:
            errors.append(message)
    return errors


def validate_shipment_dates(shipment: Dict[str, Any]) -> List[str]:
    errors = []
    for spec in date_fields("shipment"):
        value = shipment.get(spec.name)
        if value and not is_valid_date(value):
            errors.append(f"Invalid {spec.name}: {value}")
    return errors


def as_list(value: Any) -> List[Any]:
    """A single object and a one-element collection mean the same thing."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def validate_scan_dates(shipment: Dict[str, Any]) -> List[str]:
    errors = []
    scans = shipment.get("Scans")
    if isinstance(scans, dict):
        for scan in as_list(scans.get("ScanDetail")):
            if not isinstance(scan, dict):
                continue
            scan_date = scan.get("ScanDate")
            if scan_date and not is_valid_date(scan_date):
                errors.append(f"Invalid ScanDate: {scan_date}")

    # Lite payloads carry the scan directly on the shipment
    lite_date = shipment.get("ScanDate")
    if lite_date and not is_valid_date(lite_date):
        errors.append(f"Invalid ScanDate: {lite_date}")
    return errors


def get_entries(payload: Any) -> List[Any]:
    """Return the batch entries or raise StructuralError."""
    if not isinstance(payload, dict):
        raise StructuralError("incorrect payload")
    entries = payload.get(BATCH_KEY)
    if not isinstance(entries, list):
        raise StructuralError("incorrect payload")
    return entries


def entry_shipment(entry: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(entry, dict):
        return None
    shipment = entry.get(ENTRY_KEY)
    return shipment if isinstance(shipment, dict) else None


def entry_waybill(entry: Any) -> str:
    shipment = entry_shipment(entry)
    if shipment and shipment.get("WaybillNo"):
        return str(shipment["WaybillNo"])
    return "unknown"


def collect_errors(entries: List[Any]) -> List[Dict[str, str]]:
    """Check every entry and return every problem found, in entry order."""
    errors: List[Dict[str, str]] = []
    for entry in entries:
        shipment = entry_shipment(entry)
        if not shipment or not shipment.get("WaybillNo"):
            errors.append({"waybill_no": entry_waybill(entry), "error": "Missing Shipment or WaybillNo"})
            continue

        waybill_no = str(shipment["WaybillNo"])
        messages = (
            validate_shipment_dates(shipment)
            + validate_field_lengths(shipment)
            + validate_scan_dates(shipment)
        )
        errors.extend({"waybill_no": waybill_no, "error": message} for message in messages)
    return errors


def validate_payload(payload: Any) -> List[Any]:
    """
    Validate a whole batch.

    Returns the entries when the batch is accepted; raises StructuralError for
    a missing entries collection and PayloadValidationError with the complete
    error list otherwise.
    """
    entries = get_entries(payload)
    errors = collect_errors(entries)
    if errors:
        raise PayloadValidationError(errors)
    return entries
