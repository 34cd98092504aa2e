from datetime import date
from decimal import Decimal

import pytest

from services.enrollment_validator import find_missing_fields, validate_enrollment, validate_update
from services.errors import ValidationError


def _raw(**overrides):
    raw = {
        "name": "Asha",
        "phone": "9876543210",
        "floor": "2nd Floor",
        "seat_no": "s21",
        "fees": "1500",
        "paid": "500",
        "package_months": "3",
    }
    raw.update(overrides)
    return raw


def test_valid_enrollment_is_parsed():
    data = validate_enrollment(_raw(joining_date=date(2025, 1, 5), remarks="  morning batch "))
    assert data.name == "Asha"
    assert data.seat_no == "S21"
    assert data.fees == Decimal("1500.00")
    assert data.paid == Decimal("500.00")
    assert data.package_months == 3
    assert data.joining_date == date(2025, 1, 5)
    assert data.remarks == "morning batch"


def test_missing_fields_listed_in_order():
    assert find_missing_fields({}) == ["name", "floor", "seat_no", "fees", "package_months"]
    assert find_missing_fields(_raw(name="  ", fees=None)) == ["name", "fees"]
    assert find_missing_fields(_raw()) == []


def test_phone_is_optional_and_unvalidated():
    data = validate_enrollment(_raw(phone="call reception"))
    assert data.phone == "call reception"
    assert validate_enrollment(_raw(phone=None)).phone is None


def test_paid_defaults_to_zero():
    assert validate_enrollment(_raw(paid=None)).paid == Decimal("0")


def test_missing_and_invalid_reported_together():
    with pytest.raises(ValidationError) as exc:
        validate_enrollment(_raw(name="", fees="lots", package_months=0))
    assert exc.value.missing_fields == ["name"]
    assert set(exc.value.invalid_fields) == {"fees", "package_months"}


def test_negative_amounts_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_enrollment(_raw(paid=-5))
    assert "paid" in exc.value.invalid_fields


def test_unknown_floor_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_enrollment(_raw(floor="Basement"))
    assert "floor" in exc.value.invalid_fields


@pytest.mark.parametrize("seat", ["F3", "S43", "C5", "X1", "12"])
def test_seat_must_belong_to_floor(seat):
    with pytest.raises(ValidationError) as exc:
        validate_enrollment(_raw(floor="2nd Floor", seat_no=seat))
    assert "seat_no" in exc.value.invalid_fields


def test_cabin_seat_accepted():
    assert validate_enrollment(_raw(floor="Cabin", seat_no="c4")).seat_no == "C4"


def test_fractional_months_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_enrollment(_raw(package_months=1.5))
    assert "package_months" in exc.value.invalid_fields


def test_update_only_checks_present_fields():
    assert validate_update({"remarks": "moved"}, current_floor="1st Floor", current_seat="F1") == {"remarks": "moved"}


def test_update_cannot_blank_required_field():
    with pytest.raises(ValidationError) as exc:
        validate_update({"name": ""})
    assert exc.value.missing_fields == ["name"]


def test_update_floor_change_must_fit_current_seat():
    with pytest.raises(ValidationError) as exc:
        validate_update({"floor": "2nd Floor"}, current_floor="1st Floor", current_seat="F1")
    assert "seat_no" in exc.value.invalid_fields

    cleaned = validate_update({"floor": "2nd Floor", "seat_no": "s2"}, current_floor="1st Floor", current_seat="F1")
    assert cleaned == {"floor": "2nd Floor", "seat_no": "S2"}


def test_validation_error_detail_shape():
    err = ValidationError(["name"], {"fees": "not a number: 'x'"})
    detail = err.to_detail()
    assert detail["missing_fields"] == ["name"]
    assert detail["invalid_fields"] == {"fees": "not a number: 'x'"}
    assert "name" in detail["message"]


@pytest.mark.parametrize("fees", ["1e30", "1e20"])
def test_oversized_fees_rejected(fees):
    with pytest.raises(ValidationError) as exc:
        validate_enrollment(_raw(fees=fees))
    assert "fees" in exc.value.invalid_fields


def test_package_months_capped():
    assert validate_enrollment(_raw(package_months=120)).package_months == 120
    with pytest.raises(ValidationError) as exc:
        validate_enrollment(_raw(package_months=120000))
    assert "package_months" in exc.value.invalid_fields


def test_iso_date_strings_are_parsed():
    data = validate_enrollment(_raw(joining_date="2025-01-05", allotted_date=" 2025-01-15 "))
    assert data.joining_date == date(2025, 1, 5)
    assert data.allotted_date == date(2025, 1, 15)

    data = validate_enrollment(_raw(joining_date="", allotted_date=None))
    assert data.joining_date is None
    assert data.allotted_date is None


def test_unparsable_date_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_enrollment(_raw(joining_date="next tuesday"))
    assert "joining_date" in exc.value.invalid_fields


def test_update_parses_dates_and_caps_months():
    cleaned = validate_update({"allotted_date": "2025-03-01", "next_payment_date": "2025-04-01"})
    assert cleaned == {"allotted_date": date(2025, 3, 1), "next_payment_date": date(2025, 4, 1)}

    with pytest.raises(ValidationError) as exc:
        validate_update({"package_months": 121, "fees": "1e30"})
    assert set(exc.value.invalid_fields) == {"package_months", "fees"}
