"""
Scan model - append-only movement/status events for a shipment.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Date, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.database import Base


class Scan(Base):
    __tablename__ = "scans"
    __table_args__ = (
        UniqueConstraint("shipment_id", "natural_key", name="uq_scans_shipment_natural_key"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    shipment_id = Column(Integer, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False, index=True)
    # sha256 of ScanCode|ScanDate|ScanTime
    natural_key = Column(String(64), nullable=False)

    scan_type = Column(String(5), nullable=True)
    scan_group_type = Column(String(5), nullable=True)
    scan_code = Column(String(10), nullable=True, index=True)
    scan = Column(String(255), nullable=True)
    scan_date = Column(Date, nullable=True, index=True)
    scan_time = Column(String(10), nullable=True)
    scanned_location_code = Column(String(10), nullable=True)
    scanned_location = Column(String(50), nullable=True)
    scanned_location_city = Column(String(50), nullable=True)
    scanned_location_state_code = Column(String(10), nullable=True)
    comments = Column(String(255), nullable=True)
    status_timezone = Column(String(10), nullable=True)
    status_latitude = Column(String(25), nullable=True)
    status_longitude = Column(String(25), nullable=True)
    reached_destination_location = Column(String(1), nullable=True)
    secure_code = Column(String(20), nullable=True)
    sorry_card_number = Column(String(25), nullable=True)
    received_by = Column(String(50), nullable=True)
    relation = Column(String(50), nullable=True)
    id_type = Column(String(20), nullable=True)
    id_number = Column(String(50), nullable=True)
    id_description = Column(String(30), nullable=True)
    qc_type = Column(String(1), nullable=True)
    qc_reason = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    shipment = relationship("Shipment", back_populates="scans")
