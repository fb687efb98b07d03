"""
Reweigh models - dimensional re-measurement per multi-piece sub-id.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.database import Base


class Reweigh(Base):
    __tablename__ = "reweigh"
    __table_args__ = (
        UniqueConstraint("shipment_id", "mps_number", name="uq_reweigh_shipment_mps"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    shipment_id = Column(Integer, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False, index=True)
    mps_number = Column(String(50), nullable=False, default="")
    rw_actual_weight = Column(Numeric(7, 2), nullable=True)
    rw_length = Column(Numeric(7, 2), nullable=True)
    rw_breadth = Column(Numeric(7, 2), nullable=True)
    rw_height = Column(Numeric(7, 2), nullable=True)
    rw_vol_weight = Column(Numeric(7, 2), nullable=True)
    rw_image_url = Column(String(100), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    shipment = relationship("Shipment", back_populates="reweighs")


class ReweighImage(Base):
    __tablename__ = "reweigh_images"
    __table_args__ = (
        UniqueConstraint("shipment_id", "mps_number", name="uq_reweigh_images_shipment_mps"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    shipment_id = Column(Integer, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False, index=True)
    mps_number = Column(String(16), nullable=False, default="")
    rw_image_url = Column(String(100), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    shipment = relationship("Shipment", back_populates="reweigh_images")
