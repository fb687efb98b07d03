"""
Error taxonomy for the status webhook pipeline.
"""
import enum
from typing import Dict, List, Optional


class ErrorKind(str, enum.Enum):
    DATA = "data"
    TRANSIENT = "transient"


class WebhookError(Exception):
    """Base class for webhook processing errors."""


class StructuralError(WebhookError):
    """The batch is missing its entries collection."""


class PayloadValidationError(WebhookError):
    """One or more entries failed pre-persistence validation."""

    def __init__(self, errors: List[Dict[str, str]]):
        super().__init__(f"{len(errors)} validation error(s)")
        self.errors = errors


class IdentityMissingError(WebhookError):
    """An entry has no Shipment object or no WaybillNo."""


class NormalizationError(WebhookError):
    """An entry could not be reduced to canonical records."""

    def __init__(self, field: str, value, message: Optional[str] = None):
        super().__init__(message or f"Invalid numeric value for {field}: {value!r}")
        self.field = field
        self.value = value


class PersistenceError(WebhookError):
    """A storage-layer failure tagged with how the batch should treat it."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind

    @property
    def is_data_error(self) -> bool:
        return self.kind == ErrorKind.DATA


class BatchTimeoutError(WebhookError):
    """The request deadline passed before the batch finished."""
