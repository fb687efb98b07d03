"""
Tests for batch validation: dates, field lengths and structure.
"""
import pytest

from app.config.schema_loader import FieldSpec, length_limits
from app.services.errors import PayloadValidationError, StructuralError
from app.services.validation import (
    check_field_length,
    collect_errors,
    is_valid_date,
    parse_date,
    validate_field_lengths,
    validate_payload,
)
from conftest import make_payload, make_shipment, plus_scan


class TestIsValidDate:
    @pytest.mark.parametrize("value", ["01-01-1900", "31-12-2100", "29-02-2024", "17-11-2025"])
    def test_real_dates_are_valid(self, value):
        assert is_valid_date(value)

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_is_valid(self, value):
        assert is_valid_date(value)

    @pytest.mark.parametrize("value", [
        "31-02-2024",
        "29-02-2023",
        "00-01-2024",
        "01-13-2024",
        "31-12-1899",
        "01-01-2101",
        "2024-01-01",
        "1-1-2024",
        "01/01/2024",
        "01-01-2024 ",
    ])
    def test_invalid_dates(self, value):
        assert not is_valid_date(value)

    def test_non_string_is_invalid(self):
        assert not is_valid_date(20240101)

    def test_parse_date(self):
        parsed = parse_date("17-11-2025")
        assert (parsed.year, parsed.month, parsed.day) == (2025, 11, 17)
        assert parse_date("") is None
        with pytest.raises(ValueError):
            parse_date("2025-11-17")


class TestFieldLengths:
    def test_at_limit_passes(self):
        spec = FieldSpec(name="WaybillNo", column="waybill_no", max_length=20)
        assert check_field_length(spec, "x" * 20) is None

    def test_over_limit_reports_received_length(self):
        spec = FieldSpec(name="WaybillNo", column="waybill_no", max_length=20)
        message = check_field_length(spec, "x" * 21)
        assert message == "WaybillNo exceeds maximum length of 20 characters (received 21)"

    def test_non_strings_are_not_length_checked(self):
        spec = FieldSpec(name="Weight", column="weight", max_length=5)
        assert check_field_length(spec, 123456) is None

    def test_shipment_limits_from_schema(self):
        limits = {spec.name: spec.max_length for spec in length_limits("shipment")}
        assert limits["SenderID"] == 10
        assert limits["CustomerCode"] == 6
        assert limits["PickUpTime"] == 10

    def test_every_violation_reported(self):
        shipment = make_shipment(SenderID="S" * 11, CustomerCode="C" * 7)
        errors = validate_field_lengths(shipment)
        assert len(errors) == 2
        assert errors[0].startswith("SenderID exceeds maximum length of 10")
        assert errors[1].startswith("CustomerCode exceeds maximum length of 6")


class TestValidatePayload:
    def test_valid_batch_returns_entries(self):
        payload = make_payload(make_shipment("W1"), make_shipment("W2"))
        entries = validate_payload(payload)
        assert len(entries) == 2

    def test_empty_batch_is_valid(self):
        assert validate_payload({"statustracking": []}) == []

    @pytest.mark.parametrize("payload", [None, [], {}, {"statustracking": {}}, {"other": []}])
    def test_missing_entries_collection(self, payload):
        with pytest.raises(StructuralError):
            validate_payload(payload)

    def test_collects_errors_across_entries(self):
        payload = make_payload(
            make_shipment("W1", PickUpDate="31-02-2024"),
            make_shipment("W2"),
            make_shipment("W3", ExpectedDeliveryDate="2025-11-20", Scans={"ScanDetail": plus_scan(ScanDate="99-99-2025")}),
        )
        with pytest.raises(PayloadValidationError) as exc_info:
            validate_payload(payload)

        errors = exc_info.value.errors
        assert errors == [
            {"waybill_no": "W1", "error": "Invalid PickUpDate: 31-02-2024"},
            {"waybill_no": "W3", "error": "Invalid ExpectedDeliveryDate: 2025-11-20"},
            {"waybill_no": "W3", "error": "Invalid ScanDate: 99-99-2025"},
        ]

    def test_lite_scan_date_is_checked(self):
        errors = collect_errors([{"Shipment": make_shipment("W1", ScanDate="32-01-2025")}])
        assert errors == [{"waybill_no": "W1", "error": "Invalid ScanDate: 32-01-2025"}]

    def test_missing_identity_is_a_validation_error(self):
        errors = collect_errors([{"Shipment": {"RefNo": "R1"}}, {"NotShipment": {}}])
        assert errors == [
            {"waybill_no": "unknown", "error": "Missing Shipment or WaybillNo"},
            {"waybill_no": "unknown", "error": "Missing Shipment or WaybillNo"},
        ]

    def test_empty_dates_are_allowed(self):
        payload = make_payload(make_shipment("W1", PickUpDate="", DynamicExpectedDeliveryDate=None))
        assert len(validate_payload(payload)) == 1
