"""
Shared fixtures: in-memory SQLite database, app wiring and sample payloads.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient

from app.config.settings import Settings
from app.db.database import Database
from app.main import create_app
from app.services.image_store import ImageStore
from app.services.request_logger import RequestLogger
from app.services.waybill_locks import WaybillLocks
from app.services.webhook_processor import StatusWebhookProcessor

CLIENT_ID = "test-client"
LICENSE_KEY = "test-license"

# 1x1 transparent PNG
PNG_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


@pytest.fixture
def database():
    db = Database("sqlite+pysqlite:///:memory:")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def image_store(tmp_path):
    return ImageStore(str(tmp_path / "uploads"))


@pytest.fixture
def processor(database, image_store):
    return StatusWebhookProcessor(database.session, image_store, WaybillLocks())


@pytest.fixture
def request_logger(database):
    return RequestLogger(database.session)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url="sqlite+pysqlite:///:memory:",
        upload_dir=str(tmp_path / "uploads"),
        client_id=CLIENT_ID,
        license_key=LICENSE_KEY,
        request_timeout=30,
        app_env="test",
    )


@pytest.fixture
def client(settings, database):
    app = create_app(settings=settings, database=database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    return {"client-id": CLIENT_ID, "license-key": LICENSE_KEY}


def make_shipment(waybill_no="50012345678", **fields):
    shipment = {
        "SenderID": "BDART",
        "WaybillNo": waybill_no,
        "RefNo": "ORD-1001",
        "Origin": "MUMBAI",
        "Destination": "DELHI",
        "PickUpDate": "17-11-2025",
    }
    shipment.update(fields)
    return shipment


def make_payload(*shipments):
    return {"statustracking": [{"Shipment": s} for s in shipments]}


def plus_scan(**fields):
    scan = {
        "ScanType": "UD",
        "ScanGroupType": "T",
        "ScanCode": "015",
        "Scan": "SHIPMENT DELIVERED",
        "ScanDate": "19-11-2025",
        "ScanTime": "1445",
        "ScannedLocationCode": "DEL",
        "ScannedLocation": "DELHI HUB",
    }
    scan.update(fields)
    return scan
