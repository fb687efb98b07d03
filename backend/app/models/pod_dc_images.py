"""
POD/DC images model - proof-of-delivery and damaged-condition image bundle.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.database import Base


class PODDCImages(Base):
    __tablename__ = "pod_dc_images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    shipment_id = Column(
        Integer, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    pod_images = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    dc_images = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    image_sequence = Column(String(50), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    shipment = relationship("Shipment", back_populates="pod_dc_images")
