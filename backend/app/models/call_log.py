"""
Call log model - append-only customer contact records.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Date, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.database import Base


class CallLog(Base):
    __tablename__ = "call_logs"
    __table_args__ = (
        UniqueConstraint("shipment_id", "natural_key", name="uq_call_logs_shipment_natural_key"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    shipment_id = Column(Integer, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False, index=True)
    # sha256 of LogDate|LogTime|Message
    natural_key = Column(String(64), nullable=False)
    message = Column(String(300), nullable=True)
    log_date = Column(Date, nullable=True, index=True)
    log_time = Column(String(4), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    shipment = relationship("Shipment", back_populates="call_logs")
