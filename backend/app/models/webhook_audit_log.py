"""
Webhook audit log model - one row per webhook request/response pair.
"""
from sqlalchemy import Column, String, DateTime, Integer, Text, JSON
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime
from app.db.database import Base

JSONType = JSON().with_variant(JSONB, "postgresql")


class WebhookAuditLog(Base):
    __tablename__ = "webhook_audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    waybill_no = Column(String(20), nullable=True, index=True)
    payload = Column(JSONType, nullable=True)
    request_data = Column(JSONType, nullable=True)
    response_data = Column(JSONType, nullable=True)
    response_status = Column(Integer, nullable=True, index=True)
    response_message = Column(Text, nullable=True)
    error_message = Column(Text, nullable=True)
    client_ip = Column(String(45), nullable=True)
    client_id = Column(String(100), nullable=True)
    api_endpoint = Column(String(255), nullable=True)
    headers = Column(JSONType, nullable=True)
    processed_at = Column(DateTime, default=datetime.utcnow, index=True)
