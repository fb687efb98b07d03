"""
Shipment model - one row per carrier waybill.
"""
from sqlalchemy import Column, String, DateTime, Numeric, Date, Integer
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.database import Base


class Shipment(Base):
    __tablename__ = "shipments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    waybill_no = Column(String(20), nullable=False, unique=True, index=True)

    sender_id = Column(String(10), nullable=True)
    receiver_id = Column(String(50), nullable=True)
    ref_no = Column(String(50), nullable=True, index=True)
    prod_code = Column(String(5), nullable=True)
    sub_product_code = Column(String(5), nullable=True)
    feature = Column(String(5), nullable=True)
    origin = Column(String(50), nullable=True)
    origin_area_code = Column(String(5), nullable=True)
    destination = Column(String(50), nullable=True)
    destination_area_code = Column(String(5), nullable=True)
    pickup_date = Column(Date, nullable=True)
    pickup_time = Column(String(10), nullable=True)
    expected_delivery_date = Column(Date, nullable=True)
    shipment_mode = Column(String(5), nullable=True)
    weight = Column(Numeric(7, 2), nullable=True)
    dynamic_expected_delivery_date = Column(Date, nullable=True)
    customer_code = Column(String(6), nullable=True)
    special_instruction = Column(String(50), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    scans = relationship("Scan", back_populates="shipment", cascade="all, delete-orphan")
    delivery_details = relationship(
        "DeliveryDetails", back_populates="shipment", uselist=False, cascade="all, delete-orphan"
    )
    reweighs = relationship("Reweigh", back_populates="shipment", cascade="all, delete-orphan")
    reweigh_images = relationship("ReweighImage", back_populates="shipment", cascade="all, delete-orphan")
    qc_failure = relationship("QCFailure", back_populates="shipment", uselist=False, cascade="all, delete-orphan")
    call_logs = relationship("CallLog", back_populates="shipment", cascade="all, delete-orphan")
    pod_dc_images = relationship(
        "PODDCImages", back_populates="shipment", uselist=False, cascade="all, delete-orphan"
    )
