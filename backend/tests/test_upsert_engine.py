"""
Tests for convergent writes: idempotence, enrichment and natural-key dedup.
"""
from decimal import Decimal

import pytest

from app.models import CallLog, DeliveryDetails, QCFailure, Reweigh, Scan, Shipment
from app.services.errors import PersistenceError
from app.services.normalizer import normalize_entry
from app.services.upsert_engine import UpsertEngine, natural_key
from conftest import make_shipment, plus_scan


def apply(database, shipment):
    with database.session() as db:
        result = UpsertEngine(db).apply(normalize_entry({"Shipment": shipment}))
        db.commit()
    return result


def count(database, model):
    with database.session() as db:
        return db.query(model).count()


def load_shipment(database, waybill_no):
    with database.session() as db:
        shipment = db.query(Shipment).filter_by(waybill_no=waybill_no).one()
        db.expunge(shipment)
        return shipment


class TestShipmentUpsert:
    def test_insert_then_merge(self, database):
        first = apply(database, make_shipment("W1"))
        second = apply(database, make_shipment("W1"))

        assert first.shipment_created
        assert not second.shipment_created
        assert first.shipment_id == second.shipment_id
        assert count(database, Shipment) == 1

    def test_empty_incoming_never_overwrites(self, database):
        apply(database, make_shipment("W1", Weight="2.50", CustomerCode="C1"))
        apply(database, {"WaybillNo": "W1", "Origin": "", "Weight": None, "CustomerCode": "  "})

        shipment = load_shipment(database, "W1")
        assert shipment.origin == "MUMBAI"
        assert shipment.weight == Decimal("2.50")
        assert shipment.customer_code == "C1"

    def test_non_empty_incoming_overwrites(self, database):
        apply(database, make_shipment("W1", Destination="DELHI"))
        apply(database, {"WaybillNo": "W1", "Destination": "GURGAON", "ExpectedDeliveryDate": "21-11-2025"})

        shipment = load_shipment(database, "W1")
        assert shipment.destination == "GURGAON"
        assert shipment.expected_delivery_date.isoformat() == "2025-11-21"
        assert shipment.sender_id == "BDART"

    def test_over_long_value_is_a_data_error(self, database):
        with database.session() as db:
            update = normalize_entry({"Shipment": make_shipment("W1", Scans={
                "ScanDetail": plus_scan(ScanCode="X" * 11),
            })})
            with pytest.raises(PersistenceError) as exc_info:
                UpsertEngine(db).apply(update)
        assert exc_info.value.is_data_error
        assert "scan_code" in str(exc_info.value)

    def test_bad_call_log_date_is_a_data_error(self, database):
        with database.session() as db:
            update = normalize_entry({"Shipment": make_shipment("W1", Scans={
                "CallLogs": {"Message": "hi", "LogDate": "2025/11/18", "LogTime": "1010"},
            })})
            with pytest.raises(PersistenceError) as exc_info:
                UpsertEngine(db).apply(update)
        assert exc_info.value.is_data_error


class TestAppendOnlyEntities:
    def test_scan_replay_is_idempotent(self, database):
        shipment = make_shipment("W1", Scans={"ScanDetail": [plus_scan(), plus_scan(ScanCode="002")]})
        first = apply(database, shipment)
        second = apply(database, shipment)

        assert first.inserted["scans"] == 2
        assert second.merged["scans"] == 2
        assert "scans" not in second.inserted
        assert count(database, Scan) == 2

    def test_same_scan_under_two_shipments(self, database):
        apply(database, make_shipment("W1", Scans={"ScanDetail": plus_scan()}))
        apply(database, make_shipment("W2", Scans={"ScanDetail": plus_scan()}))
        assert count(database, Scan) == 2

    def test_lite_then_plus_dedups(self, database):
        apply(database, make_shipment("W1", ScanCode="015", ScanDate="19-11-2025", ScanTime="1445"))
        apply(database, make_shipment("W1", Scans={"ScanDetail": plus_scan()}))
        assert count(database, Scan) == 1

    def test_existing_scan_left_untouched(self, database):
        apply(database, make_shipment("W1", Scans={"ScanDetail": plus_scan(Comments="first")}))
        apply(database, make_shipment("W1", Scans={"ScanDetail": plus_scan(Comments="second")}))
        with database.session() as db:
            assert db.query(Scan).one().comments == "first"

    def test_call_log_dedup(self, database):
        logs = {"CallLogs": [
            {"Message": "Customer reached", "LogDate": "20251118", "LogTime": "1010"},
            {"Message": "Customer reached", "LogDate": "18-11-2025", "LogTime": "1010"},
            {"Message": "Call back later", "LogDate": "20251118", "LogTime": "1010"},
        ]}
        apply(database, make_shipment("W1", Scans=logs))
        apply(database, make_shipment("W1", Scans=logs))

        assert count(database, CallLog) == 2
        with database.session() as db:
            assert {log.log_date.isoformat() for log in db.query(CallLog)} == {"2025-11-18"}


class TestSingletonEntities:
    def test_delivery_details_enriched(self, database):
        apply(database, make_shipment("W1", Scans={"DeliveryDetails": {"ReceivedBy": "R SHARMA"}}))
        apply(database, make_shipment("W1", Scans={"DeliveryDetails": {"Relation": "SELF", "ReceivedBy": ""}}))

        with database.session() as db:
            details = db.query(DeliveryDetails).one()
            assert details.received_by == "R SHARMA"
            assert details.relation == "SELF"

    def test_qc_single_row(self, database):
        apply(database, make_shipment("W1", Scans={"QCFailed": {"Type": "F", "Reason": "Damaged"}}))
        apply(database, make_shipment("W1", Scans={"QC": {"Remarks": "Rechecked"}}))

        with database.session() as db:
            qc = db.query(QCFailure).one()
            assert qc.qc_type == "F"
            assert qc.qc_reason == "Rechecked"

    def test_reweigh_keyed_by_mps_number(self, database):
        apply(database, make_shipment("W1", Scans={"Reweigh": [
            {"MPSNumber": "M1", "RWActualWeight": "2.5"},
            {"MPSNumber": "M2", "RWActualWeight": "3.0"},
        ]}))
        apply(database, make_shipment("W1", Scans={"Reweigh": {"MPSNumber": "M1", "RWLength": "12"}}))

        with database.session() as db:
            rows = {r.mps_number: r for r in db.query(Reweigh)}
            assert set(rows) == {"M1", "M2"}
            assert rows["M1"].rw_actual_weight == Decimal("2.50")
            assert rows["M1"].rw_length == Decimal("12.00")

    def test_absent_sub_resource_keeps_stored_state(self, database):
        apply(database, make_shipment("W1", Scans={"DeliveryDetails": {"ReceivedBy": "R SHARMA"}}))
        apply(database, make_shipment("W1"))
        with database.session() as db:
            assert db.query(DeliveryDetails).one().received_by == "R SHARMA"


class TestInsertRace:
    def test_lost_insert_race_merges_into_winner(self, database, monkeypatch):
        with database.session() as db:
            db.add(Shipment(waybill_no="W1", origin="MUMBAI"))
            db.commit()

        engine_cls = UpsertEngine
        original_find = engine_cls._find
        calls = {"n": 0}

        def stale_find(self, model, lookup):
            calls["n"] += 1
            if calls["n"] == 1:
                # The first lookup misses the row a concurrent writer just committed
                return None
            return original_find(self, model, lookup)

        monkeypatch.setattr(engine_cls, "_find", stale_find)
        with database.session() as db:
            row, created = UpsertEngine(db).upsert(
                Shipment, {"waybill_no": "W1"}, {"destination": "DELHI", "origin": None}
            )
            db.commit()
            assert not created

        shipment = load_shipment(database, "W1")
        assert shipment.origin == "MUMBAI"
        assert shipment.destination == "DELHI"
        assert count(database, Shipment) == 1


def test_natural_key_is_stable():
    assert natural_key("015", "19-11-2025", "1445") == natural_key("015", "19-11-2025", "1445")
    assert natural_key("015", None, "1445") == natural_key("015", "", "1445")
    assert natural_key("015", "19-11-2025", "1445") != natural_key("016", "19-11-2025", "1445")
