"""
Upsert engine - convergent writes of canonical records into the shipment graph.

Every entity is looked up by its natural key. A missing row is inserted
inside a SAVEPOINT; if a concurrent writer inserted the same key first the
unique constraint fires, the savepoint is rolled back and the existing row is
merged instead. Merges are coalesce-style: only non-empty incoming values
overwrite stored ones.
"""
import hashlib
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, Optional, Tuple, Type

from sqlalchemy import String
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.database import Base
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
from app.services.errors import ErrorKind, PersistenceError
from app.services.normalizer import (
    CallLogRecord,
    DeliveryDetailsRecord,
    PODDCImagesRecord,
    QCRecord,
    ReweighImageRecord,
    ReweighRecord,
    ScanRecord,
    ShipmentRecord,
    ShipmentUpdate,
)
from app.services.validation import parse_date

logger = logging.getLogger(__name__)

SHIPMENT_DATE_COLUMNS = ("pickup_date", "expected_delivery_date", "dynamic_expected_delivery_date")


def classify_db_error(exc: Exception) -> PersistenceError:
    """Tag a storage exception as a data violation or a transient failure."""
    if isinstance(exc, PersistenceError):
        return exc
    if isinstance(exc, (DataError, IntegrityError)):
        return PersistenceError(ErrorKind.DATA, str(getattr(exc, "orig", exc)))
    return PersistenceError(ErrorKind.TRANSIENT, str(exc))


def natural_key(*parts: Optional[str]) -> str:
    joined = "|".join(part or "" for part in parts)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()


def _to_date(value: Optional[str], column: str) -> Optional[date]:
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError:
        raise PersistenceError(ErrorKind.DATA, f"Incorrect date value: '{value}' for column '{column}'")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, dict)) and len(value) == 0:
        return True
    return False


def _check_lengths(model: Type[Base], values: Dict[str, Any]) -> None:
    """Reject string values longer than their column, as a strict SQL store would."""
    columns = model.__table__.columns
    for key, value in values.items():
        if not isinstance(value, str) or key not in columns:
            continue
        column_type = columns[key].type
        if isinstance(column_type, String) and column_type.length and len(value) > column_type.length:
            raise PersistenceError(
                ErrorKind.DATA,
                f"Data too long for column '{key}' (max {column_type.length}, received {len(value)})",
            )


@dataclass
class UpsertResult:
    shipment_id: Optional[int] = None
    shipment_created: bool = False
    inserted: Dict[str, int] = field(default_factory=dict)
    merged: Dict[str, int] = field(default_factory=dict)

    def count(self, entity: str, created: bool) -> None:
        bucket = self.inserted if created else self.merged
        bucket[entity] = bucket.get(entity, 0) + 1


class UpsertEngine:
    """Applies one ShipmentUpdate to the database inside the caller's transaction."""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, model: Type[Base], lookup: Dict[str, Any]):
        return self.db.query(model).filter_by(**lookup).first()

    def _coalesce(self, row, values: Dict[str, Any]) -> bool:
        changed = False
        for key, value in values.items():
            if _is_empty(value):
                continue
            if getattr(row, key) != value:
                setattr(row, key, value)
                changed = True
        return changed

    def upsert(
        self,
        model: Type[Base],
        lookup: Dict[str, Any],
        values: Dict[str, Any],
        merge: bool = True,
    ) -> Tuple[Any, bool]:
        """
        Insert a row for ``lookup`` or coalesce ``values`` into the existing one.

        With ``merge=False`` an existing row is left untouched (append-only
        entities). Returns ``(row, created)``.
        """
        _check_lengths(model, {**lookup, **values})
        row = self._find(model, lookup)
        if row is None:
            try:
                with self.db.begin_nested():
                    row = model(**lookup, **{k: v for k, v in values.items() if not _is_empty(v)})
                    self.db.add(row)
                    self.db.flush()
                return row, True
            except IntegrityError:
                # Lost an insert race on the natural key
                row = self._find(model, lookup)
                if row is None:
                    raise
                logger.info("Concurrent insert detected for %s %s, merging", model.__tablename__, lookup)
        if merge:
            self._coalesce(row, values)
        return row, False

    def upsert_shipment(self, record: ShipmentRecord) -> Tuple[Shipment, bool]:
        values = dict(record.fields)
        for column in SHIPMENT_DATE_COLUMNS:
            if column in values:
                values[column] = _to_date(values[column], column)
        return self.upsert(Shipment, {"waybill_no": record.waybill_no}, values)

    def insert_scan(self, shipment_id: int, record: ScanRecord) -> bool:
        values = dict(record.fields)
        values["scan_date"] = _to_date(values.get("scan_date"), "scan_date")
        key = natural_key(record.scan_code, record.scan_date, record.scan_time)
        _, created = self.upsert(Scan, {"shipment_id": shipment_id, "natural_key": key}, values, merge=False)
        return created

    def upsert_delivery_details(self, shipment_id: int, record: DeliveryDetailsRecord) -> bool:
        values = {
            "received_by": record.received_by,
            "relation": record.relation,
            "id_type": record.id_type,
            "id_number": record.id_number,
            "id_description": record.id_description,
            "security_code_delivery": record.security_code_delivery,
            "signature": record.signature,
            "id_image": record.id_image,
        }
        _, created = self.upsert(DeliveryDetails, {"shipment_id": shipment_id}, values)
        return created

    def upsert_reweigh(self, shipment_id: int, record: ReweighRecord) -> bool:
        values = {
            "rw_actual_weight": record.rw_actual_weight,
            "rw_length": record.rw_length,
            "rw_breadth": record.rw_breadth,
            "rw_height": record.rw_height,
            "rw_vol_weight": record.rw_vol_weight,
            "rw_image_url": record.rw_image_url,
        }
        lookup = {"shipment_id": shipment_id, "mps_number": record.mps_number}
        _, created = self.upsert(Reweigh, lookup, values)
        return created

    def upsert_reweigh_image(self, shipment_id: int, record: ReweighImageRecord) -> bool:
        lookup = {"shipment_id": shipment_id, "mps_number": record.mps_number}
        _, created = self.upsert(ReweighImage, lookup, {"rw_image_url": record.rw_image_url})
        return created

    def upsert_qc(self, shipment_id: int, record: QCRecord) -> bool:
        values = {
            "qc_type": record.qc_type,
            "qc_reason": record.qc_reason,
            "pictures": record.pictures or None,
        }
        _, created = self.upsert(QCFailure, {"shipment_id": shipment_id}, values)
        return created

    def insert_call_log(self, shipment_id: int, record: CallLogRecord) -> bool:
        values = {
            "message": record.message,
            "log_date": _to_date(record.log_date, "log_date"),
            "log_time": record.log_time,
        }
        key = natural_key(record.log_date, record.log_time, record.message)
        _, created = self.upsert(CallLog, {"shipment_id": shipment_id, "natural_key": key}, values, merge=False)
        return created

    def upsert_pod_dc_images(self, shipment_id: int, record: PODDCImagesRecord) -> bool:
        values = {
            "pod_images": record.pod_images or None,
            "dc_images": record.dc_images or None,
            "image_sequence": record.image_sequence,
        }
        _, created = self.upsert(PODDCImages, {"shipment_id": shipment_id}, values)
        return created

    def _apply_all(self, result: UpsertResult, entity: str, records: Iterable, writer) -> None:
        for record in records:
            result.count(entity, writer(result.shipment_id, record))

    def apply(self, update: ShipmentUpdate) -> UpsertResult:
        """
        Write every record of ``update``.

        The shipment row is resolved first; sub-entities follow in a fixed
        order. Storage failures surface as PersistenceError.
        """
        result = UpsertResult()
        try:
            shipment, created = self.upsert_shipment(update.shipment)
            self.db.flush()
            result.shipment_id = shipment.id
            result.shipment_created = created

            self._apply_all(result, "scans", update.scans, self.insert_scan)
            if update.delivery_details:
                result.count("delivery_details", self.upsert_delivery_details(shipment.id, update.delivery_details))
            self._apply_all(result, "reweigh", update.reweighs, self.upsert_reweigh)
            self._apply_all(result, "reweigh_images", update.reweigh_images, self.upsert_reweigh_image)
            if update.qc:
                result.count("qc_failed", self.upsert_qc(shipment.id, update.qc))
            self._apply_all(result, "call_logs", update.call_logs, self.insert_call_log)
            if update.pod_dc_images:
                result.count("pod_dc_images", self.upsert_pod_dc_images(shipment.id, update.pod_dc_images))

            self.db.flush()
        except PersistenceError:
            raise
        except SQLAlchemyError as e:
            raise classify_db_error(e) from e
        return result
