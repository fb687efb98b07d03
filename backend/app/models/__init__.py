from .shipment import Shipment
from .scan import Scan
from .delivery_details import DeliveryDetails
from .reweigh import Reweigh, ReweighImage
from .qc_failure import QCFailure
from .call_log import CallLog
from .pod_dc_images import PODDCImages
from .webhook_audit_log import WebhookAuditLog

__all__ = [
    "Shipment",
    "Scan",
    "DeliveryDetails",
    "Reweigh",
    "ReweighImage",
    "QCFailure",
    "CallLog",
    "PODDCImages",
    "WebhookAuditLog",
]
