from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from dateutil.parser import isoparse

from services.billing_calculator import to_money, ZERO
from services.errors import ValidationError
from services.seat_occupancy import SEAT_UNIVERSE, Zone, normalize_seat, zone_for_floor, zone_for_seat

REQUIRED_FIELDS = ("name", "floor", "seat_no", "fees", "package_months")
DATE_FIELDS = ("joining_date", "allotted_date", "next_payment_date")
MAX_PACKAGE_MONTHS = 120


@dataclass
class EnrollmentData:
    name: str
    floor: str
    seat_no: str
    fees: Decimal
    package_months: int
    paid: Decimal = ZERO
    phone: Optional[str] = None
    receipt_no: Optional[str] = None
    payment_method: Optional[str] = None
    remarks: Optional[str] = None
    joining_date: Optional[date] = None
    allotted_date: Optional[date] = None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _clean_text(value: Any) -> Optional[str]:
    if _is_blank(value):
        return None
    return str(value).strip()


def find_missing_fields(raw: Mapping[str, Any]) -> List[str]:
    """Names of required fields that are absent or blank, in canonical order."""
    return [f for f in REQUIRED_FIELDS if _is_blank(raw.get(f))]


def parse_package_months(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("must be a whole number of months")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("must be a whole number of months")
        value = int(value)
    try:
        months = int(str(value).strip())
    except ValueError:
        raise ValueError("must be a whole number of months")
    if months < 1:
        raise ValueError("must be at least 1")
    if months > MAX_PACKAGE_MONTHS:
        raise ValueError(f"must be at most {MAX_PACKAGE_MONTHS}")
    return months


def parse_date(value: Any) -> Optional[date]:
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return isoparse(str(value).strip()).date()
    except (ValueError, OverflowError):
        raise ValueError(f"not a date: {value!r}")


def _check_seat(seat_no: str, floor: Optional[str], universe: Iterable[Zone], invalid: Dict[str, str]):
    zone = zone_for_seat(seat_no, universe)
    if zone is None:
        invalid["seat_no"] = f"{seat_no} is not a seat in the layout"
    elif floor is not None and zone.floor != floor:
        invalid["seat_no"] = f"{seat_no} is not on {floor}"


def validate_enrollment(raw: Mapping[str, Any], universe: Iterable[Zone] = SEAT_UNIVERSE) -> EnrollmentData:
    """Check and parse the fields of a new enrollment.

    Raises ValidationError listing every missing and unparsable field at
    once, so the form can highlight all of them.
    """
    universe = tuple(universe)
    missing = find_missing_fields(raw)
    invalid: Dict[str, str] = {}

    fees = paid = None
    months = None
    if "fees" not in missing:
        try:
            fees = to_money(raw.get("fees"))
        except ValueError as e:
            invalid["fees"] = str(e)
    try:
        paid = to_money(raw.get("paid"), default=ZERO)
    except ValueError as e:
        invalid["paid"] = str(e)
    if "package_months" not in missing:
        try:
            months = parse_package_months(raw.get("package_months"))
        except ValueError as e:
            invalid["package_months"] = str(e)

    dates: Dict[str, Optional[date]] = {}
    for key in ("joining_date", "allotted_date"):
        try:
            dates[key] = parse_date(raw.get(key))
        except ValueError as e:
            invalid[key] = str(e)

    floor = _clean_text(raw.get("floor"))
    if floor is not None and zone_for_floor(floor, universe) is None:
        invalid["floor"] = f"unknown floor {floor!r}"
        floor = None
    seat_no = normalize_seat(raw.get("seat_no"))
    if seat_no:
        _check_seat(seat_no, floor, universe, invalid)

    if missing or invalid:
        raise ValidationError(missing, invalid)

    return EnrollmentData(
        name=_clean_text(raw.get("name")),
        floor=floor,
        seat_no=seat_no,
        fees=fees,
        package_months=months,
        paid=paid,
        phone=_clean_text(raw.get("phone")),
        receipt_no=_clean_text(raw.get("receipt_no")),
        payment_method=_clean_text(raw.get("payment_method")),
        remarks=_clean_text(raw.get("remarks")),
        joining_date=dates.get("joining_date"),
        allotted_date=dates.get("allotted_date"),
    )


def validate_update(
    patch: Mapping[str, Any],
    current_floor: Optional[str] = None,
    current_seat: Optional[str] = None,
    universe: Iterable[Zone] = SEAT_UNIVERSE,
) -> Dict[str, Any]:
    """Parse the fields present in an edit patch.

    Required fields may be left out of a patch but can't be blanked. Returns
    the cleaned patch.
    """
    universe = tuple(universe)
    missing = [f for f in REQUIRED_FIELDS if f in patch and _is_blank(patch[f])]
    invalid: Dict[str, str] = {}
    cleaned: Dict[str, Any] = {}

    for key, value in patch.items():
        if key in missing:
            continue
        try:
            if key in ("fees", "paid"):
                cleaned[key] = to_money(value, default=ZERO if key == "paid" else None)
            elif key == "package_months":
                cleaned[key] = parse_package_months(value)
            elif key in DATE_FIELDS:
                cleaned[key] = parse_date(value)
            elif key == "seat_no":
                cleaned[key] = normalize_seat(value)
            elif key in ("name", "floor", "phone", "receipt_no", "payment_method", "remarks"):
                cleaned[key] = _clean_text(value)
            else:
                cleaned[key] = value
        except ValueError as e:
            invalid[key] = str(e)

    floor = cleaned.get("floor", current_floor)
    if "floor" in cleaned and zone_for_floor(cleaned["floor"], universe) is None:
        invalid["floor"] = f"unknown floor {cleaned['floor']!r}"
        floor = None
    # a floor change has to keep the (possibly unchanged) seat on that floor
    seat_no = cleaned.get("seat_no") or normalize_seat(current_seat)
    touches_seat = "seat_no" in cleaned or "floor" in cleaned
    if touches_seat and seat_no and "floor" not in invalid:
        _check_seat(seat_no, floor, universe, invalid)

    if missing or invalid:
        raise ValidationError(missing, invalid)
    return cleaned
