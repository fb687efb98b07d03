"""
Delivery details model - proof-of-delivery metadata.
"""
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.database import Base


class DeliveryDetails(Base):
    __tablename__ = "delivery_details"

    id = Column(Integer, primary_key=True, autoincrement=True)
    shipment_id = Column(
        Integer, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    received_by = Column(String(50), nullable=True)
    relation = Column(String(50), nullable=True)
    id_type = Column(String(20), nullable=True)
    id_number = Column(String(50), nullable=True)
    id_description = Column(String(30), nullable=True)
    security_code_delivery = Column(String(50), nullable=True)
    signature = Column(Text, nullable=True)  # stored image reference
    id_image = Column(Text, nullable=True)  # stored image reference

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    shipment = relationship("Shipment", back_populates="delivery_details")
