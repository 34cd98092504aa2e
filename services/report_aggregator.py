"""Read-only rollups over the student and payment sets.

These back the monthly history report, the revenue chart and the dashboard
stat cards. Nothing here is persisted.
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from dateutil.parser import isoparse

from services.billing_calculator import ZERO, to_money


@dataclass
class MonthlyAggregate:
    month: str
    year: int
    month_number: int
    new_students: int = 0
    total_collected: Decimal = ZERO
    pending: Decimal = ZERO

    @property
    def sort_key(self) -> int:
        return self.year * 12 + self.month_number


@dataclass
class RevenuePoint:
    month: str
    year: int
    month_number: int
    total_amount: Decimal = ZERO


def _field(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def _as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return isoparse(str(value)).date()


def _amount(value: Any) -> Decimal:
    # stored amounts are trusted; a legacy negative pending still has to add up
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return to_money(value)
    except ValueError:
        return Decimal(str(value))


def month_label(year: int, month: int) -> str:
    return f"{calendar.month_abbr[month]} {year}"


def aggregate_monthly(students: Iterable[Any]) -> List[MonthlyAggregate]:
    """Group students by the month they joined, most recent month first.

    Students without a joining date are left out. Pending totals use each
    record's stored pending_amount as-is.
    """
    months: Dict[int, MonthlyAggregate] = {}
    for s in students:
        joined = _as_date(_field(s, "joining_date"))
        if joined is None:
            continue
        key = joined.year * 12 + joined.month
        agg = months.get(key)
        if agg is None:
            agg = months[key] = MonthlyAggregate(
                month=month_label(joined.year, joined.month),
                year=joined.year,
                month_number=joined.month,
            )
        agg.new_students += 1
        agg.total_collected += _amount(_field(s, "paid"))
        agg.pending += _amount(_field(s, "pending_amount"))
    return sorted(months.values(), key=lambda a: a.sort_key, reverse=True)


def chart_series(aggregates: List[MonthlyAggregate]) -> Dict[str, list]:
    return {
        "labels": [a.month for a in aggregates],
        "collected": [a.total_collected for a in aggregates],
        "pending": [a.pending for a in aggregates],
    }


def revenue_by_month(payments: Iterable[Any]) -> List[RevenuePoint]:
    """Sum payment amounts per calendar month, oldest month first."""
    points: Dict[int, RevenuePoint] = {}
    for p in payments:
        paid_on = _as_date(_field(p, "date"))
        if paid_on is None:
            continue
        key = paid_on.year * 12 + paid_on.month
        point = points.get(key)
        if point is None:
            point = points[key] = RevenuePoint(
                month=month_label(paid_on.year, paid_on.month),
                year=paid_on.year,
                month_number=paid_on.month,
            )
        point.total_amount += _amount(_field(p, "amount"))
    return [points[k] for k in sorted(points)]


def floor_occupancy(students: Iterable[Any]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for s in students:
        floor = _field(s, "floor") or "Unknown"
        counts[floor] = counts.get(floor, 0) + 1
    return counts


def dashboard_summary(students: Iterable[Any], payments: Iterable[Any]) -> Dict[str, Any]:
    students = list(students)
    return {
        "total_students": len(students),
        "total_payments": sum((_amount(_field(p, "amount")) for p in payments), ZERO),
        "total_pending": sum((_amount(_field(s, "pending_amount")) for s in students), ZERO),
        "floor_occupancy": floor_occupancy(students),
    }


@dataclass
class UpcomingPayment:
    id: Optional[int]
    name: Optional[str]
    floor: Optional[str]
    seat_no: Optional[str]
    next_payment_date: date
    days_left: int
    status: str
    urgency: str


def payment_status(days_left: int) -> str:
    if days_left > 0:
        return f"{days_left} days left"
    if days_left == 0:
        return "Due Today"
    return f"Overdue ({-days_left} days)"


def payment_urgency(days_left: int) -> str:
    # overdue and due-today rows fall in the first band too
    if days_left <= 3:
        return "high"
    if days_left <= 7:
        return "medium"
    return "low"


def upcoming_payments(students: Iterable[Any], today: Optional[date] = None) -> List[UpcomingPayment]:
    """Students with a due date, soonest first, with days left counted from ``today``.

    Students without a next payment date are left out.
    """
    today = today or date.today()
    rows = []
    for s in students:
        due = _as_date(_field(s, "next_payment_date"))
        if due is None:
            continue
        days_left = (due - today).days
        rows.append(UpcomingPayment(
            id=_field(s, "id"),
            name=_field(s, "name"),
            floor=_field(s, "floor"),
            seat_no=_field(s, "seat_no"),
            next_payment_date=due,
            days_left=days_left,
            status=payment_status(days_left),
            urgency=payment_urgency(days_left),
        ))
    return sorted(rows, key=lambda r: r.next_payment_date)
