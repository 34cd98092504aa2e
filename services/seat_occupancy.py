from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple
import re


@dataclass(frozen=True)
class Zone:
    floor: str
    prefix: str
    capacity: int

    def seat_ids(self) -> List[str]:
        return [f"{self.prefix}{n}" for n in range(1, self.capacity + 1)]


# Fixed seating catalogue: 1st floor F1-F15, 2nd floor S1-S42, cabins C1-C4
SEAT_UNIVERSE: Tuple[Zone, ...] = (
    Zone("1st Floor", "F", 15),
    Zone("2nd Floor", "S", 42),
    Zone("Cabin", "C", 4),
)

_SEAT_RE = re.compile(r"^([A-Z]+)(\d+)$")


class SeatState(str, Enum):
    booked = "booked"
    available = "available"
    selected = "selected"


def normalize_seat(seat_no: Optional[str]) -> str:
    return (seat_no or "").strip().upper()


def zone_for_floor(floor: str, universe: Iterable[Zone] = SEAT_UNIVERSE) -> Optional[Zone]:
    for zone in universe:
        if zone.floor == floor:
            return zone
    return None


def zone_for_seat(seat_no: str, universe: Iterable[Zone] = SEAT_UNIVERSE) -> Optional[Zone]:
    """Return the zone a seat id belongs to, or None if it isn't a real seat."""
    m = _SEAT_RE.match(normalize_seat(seat_no))
    if not m:
        return None
    prefix, number = m.group(1), int(m.group(2))
    for zone in universe:
        if zone.prefix == prefix and 1 <= number <= zone.capacity:
            return zone
    return None


def _seat_of(record: Any) -> Optional[str]:
    if isinstance(record, dict):
        return record.get("seat_no")
    return getattr(record, "seat_no", None)


def booked_seats(records: Iterable[Any]) -> Set[str]:
    """Upper-cased seat ids held by any record with a non-blank seat_no."""
    booked = set()
    for r in records:
        seat = normalize_seat(_seat_of(r))
        if seat:
            booked.add(seat)
    return booked


def is_seat_available(seat_no: str, records: Iterable[Any], universe: Iterable[Zone] = SEAT_UNIVERSE) -> bool:
    seat = normalize_seat(seat_no)
    return zone_for_seat(seat, universe) is not None and seat not in booked_seats(records)


class SeatSelection:
    """The seat one admin session has clicked while filling in an enrollment.

    Holds at most one seat. Never persisted.
    """

    def __init__(self, universe: Iterable[Zone] = SEAT_UNIVERSE):
        self.universe = tuple(universe)
        self._selected: Optional[str] = None

    @property
    def selected(self) -> Optional[str]:
        return self._selected

    def select(self, seat_no: str, booked: Set[str]) -> bool:
        """Select ``seat_no``, replacing any earlier choice.

        Booked seats and ids outside the universe are ignored and leave the
        current selection untouched.
        """
        seat = normalize_seat(seat_no)
        if seat in booked or zone_for_seat(seat, self.universe) is None:
            return False
        self._selected = seat
        return True

    def clear(self):
        self._selected = None


def build_seat_index(
    records: Iterable[Any],
    selection: Optional[SeatSelection] = None,
    universe: Iterable[Zone] = SEAT_UNIVERSE,
) -> Dict[str, SeatState]:
    booked = booked_seats(records)
    selected = selection.selected if selection else None
    index: Dict[str, SeatState] = {}
    for zone in universe:
        for seat in zone.seat_ids():
            if seat in booked:
                index[seat] = SeatState.booked
            elif seat == selected:
                index[seat] = SeatState.selected
            else:
                index[seat] = SeatState.available
    return index


def seat_layout(
    records: Iterable[Any],
    selection: Optional[SeatSelection] = None,
    universe: Iterable[Zone] = SEAT_UNIVERSE,
) -> List[Dict[str, Any]]:
    """Seat index grouped per zone, with counts for the floor headers."""
    universe = tuple(universe)
    index = build_seat_index(records, selection, universe)
    layout = []
    for zone in universe:
        seats = [{"seat_no": s, "state": index[s].value} for s in zone.seat_ids()]
        booked_count = sum(1 for s in seats if s["state"] == SeatState.booked.value)
        layout.append({
            "floor": zone.floor,
            "prefix": zone.prefix,
            "capacity": zone.capacity,
            "booked": booked_count,
            "available": zone.capacity - booked_count,
            "seats": seats,
        })
    return layout
