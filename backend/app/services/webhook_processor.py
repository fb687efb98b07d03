"""
Status webhook processor - validates a batch and persists each entry independently.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.schemas.webhook import (
    EntryError,
    ProcessedShipment,
    WebhookErrorResponse,
    WebhookSuccessResponse,
)
from app.services.errors import (
    BatchTimeoutError,
    IdentityMissingError,
    NormalizationError,
    PayloadValidationError,
    PersistenceError,
    StructuralError,
)
from app.services.image_store import ImageStore
from app.services.normalizer import ShipmentUpdate, normalize_entry
from app.services.upsert_engine import UpsertEngine, UpsertResult, classify_db_error
from app.services.validation import entry_waybill, validate_payload
from app.services.waybill_locks import WaybillLocks

logger = logging.getLogger(__name__)

INCORRECT_PAYLOAD = "incorrect payload"


@dataclass
class BatchOutcome:
    status_code: int
    response: BaseModel

    @property
    def body(self) -> Dict[str, Any]:
        return self.response.model_dump(mode="json", exclude_none=True)

    @property
    def success(self) -> bool:
        return 200 <= self.status_code < 300


def rejection(errors: Optional[List[Dict[str, str]]] = None) -> BatchOutcome:
    response = WebhookErrorResponse(
        message=INCORRECT_PAYLOAD,
        errors=[EntryError(**e) for e in errors] if errors else None,
    )
    return BatchOutcome(status_code=400, response=response)


def resolve_images(update: ShipmentUpdate, image_store: ImageStore) -> None:
    """Swap embedded base64 images for stored references; failures leave None."""
    waybill_no = update.waybill_no

    details = update.delivery_details
    if details:
        details.id_image = image_store.save(details.id_image_data, waybill_no, "id", 0)
        details.signature = image_store.save(details.signature_data, waybill_no, "signature", 0)

    if update.qc and update.qc.picture_data:
        update.qc.pictures = image_store.save_many(update.qc.picture_data, waybill_no, "qc")

    pod_dc = update.pod_dc_images
    if pod_dc:
        if pod_dc.pod_image_data:
            pod_dc.pod_images = image_store.save_many(pod_dc.pod_image_data, waybill_no, "pod")
        if pod_dc.dc_image_data:
            pod_dc.dc_images = image_store.save_many(pod_dc.dc_image_data, waybill_no, "dc")


class StatusWebhookProcessor:
    """
    Runs one status batch to completion.

    Each entry is its own transaction. A data violation found while writing an
    entry rejects the whole batch with 400, but entries committed before it
    stay committed. Any other entry failure is recorded and the batch moves on.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        image_store: ImageStore,
        locks: Optional[WaybillLocks] = None,
        deadline: Optional[float] = None,
    ):
        self.session_factory = session_factory
        self.db: Optional[Session] = None
        self.image_store = image_store
        self.locks = locks or WaybillLocks()
        # time.monotonic() value after which no new entry is started
        self.deadline = deadline

    def _check_deadline(self) -> None:
        if self.deadline is not None and time.monotonic() > self.deadline:
            raise BatchTimeoutError("Request timeout")

    def persist(self, update: ShipmentUpdate) -> UpsertResult:
        with self.locks.hold(update.waybill_no):
            resolve_images(update, self.image_store)
            try:
                result = UpsertEngine(self.db).apply(update)
                self.db.commit()
            except PersistenceError:
                self.db.rollback()
                raise
            except SQLAlchemyError as e:
                self.db.rollback()
                raise classify_db_error(e) from e
        return result

    def process(self, payload: Any) -> BatchOutcome:
        self.db = self.session_factory()
        try:
            return self._process(payload)
        finally:
            self.db.close()

    def _process(self, payload: Any) -> BatchOutcome:
        batch_start = time.perf_counter()
        try:
            entries = validate_payload(payload)
        except StructuralError:
            logger.warning("Rejected webhook batch: missing entries collection")
            return rejection()
        except PayloadValidationError as e:
            logger.warning("Rejected webhook batch with %d validation error(s)", len(e.errors))
            return rejection(e.errors)

        logger.info("Received webhook: %d shipment(s)", len(entries))
        processed: List[ProcessedShipment] = []
        errors: List[EntryError] = []

        for entry in entries:
            self._check_deadline()
            waybill_no = entry_waybill(entry)
            try:
                update = normalize_entry(entry)
                result = self.persist(update)
            except IdentityMissingError as e:
                errors.append(EntryError(waybill_no=waybill_no, error=str(e)))
                continue
            except NormalizationError as e:
                logger.warning("Skipping shipment %s: %s", waybill_no, e)
                errors.append(EntryError(waybill_no=waybill_no, error=str(e)))
                continue
            except PersistenceError as e:
                if e.is_data_error:
                    logger.warning("Data error persisting shipment %s, rejecting batch: %s", waybill_no, e)
                    return rejection([{"waybill_no": waybill_no, "error": str(e)}])
                logger.error("Error processing shipment %s: %s", waybill_no, e)
                errors.append(EntryError(waybill_no=waybill_no, error=str(e)))
                continue
            except Exception as e:
                self.db.rollback()
                logger.exception("Error processing shipment %s", waybill_no)
                errors.append(EntryError(waybill_no=waybill_no, error=str(e)))
                continue

            processed.append(ProcessedShipment(
                waybill_no=update.waybill_no,
                shipment_id=result.shipment_id,
            ))
            logger.debug(
                "Shipment %s (id=%s) inserted=%s merged=%s",
                update.waybill_no,
                result.shipment_id,
                result.inserted,
                result.merged,
            )

        logger.info(
            "Processed webhook batch: %d ok, %d error(s) in %.2fs",
            len(processed),
            len(errors),
            time.perf_counter() - batch_start,
        )
        response = WebhookSuccessResponse(
            processed=len(processed),
            shipments=processed,
            errors=errors or None,
        )
        return BatchOutcome(status_code=200, response=response)
