"""
QC failure model - quality-control rejection reason and pictures.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.database import Base


class QCFailure(Base):
    __tablename__ = "qc_failed"

    id = Column(Integer, primary_key=True, autoincrement=True)
    shipment_id = Column(
        Integer, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    qc_type = Column(String(1), nullable=True)  # P / F, or the QCFailed type code
    qc_reason = Column(String(255), nullable=True)
    pictures = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    shipment = relationship("Shipment", back_populates="qc_failure")
