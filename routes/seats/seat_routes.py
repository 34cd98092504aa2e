from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from typing import List, Optional
from sqlalchemy.orm import Session

from db import get_db
from routes.http_errors import to_http_exception
from services.errors import StudyHallError
from services.record_store import RecordStore
from services.seat_occupancy import (
    SeatSelection,
    SeatState,
    booked_seats,
    normalize_seat,
    seat_layout,
    zone_for_seat,
)

router = APIRouter(prefix="/api/seats", tags=["Seats"])


class SeatOut(BaseModel):
    seat_no: str
    state: SeatState


class ZoneOut(BaseModel):
    floor: str
    prefix: str
    capacity: int
    booked: int
    available: int
    seats: List[SeatOut]


class SeatLayoutOut(BaseModel):
    selected: Optional[str] = None
    zones: List[ZoneOut]


class SeatCheckOut(BaseModel):
    seat_no: str
    floor: str
    state: SeatState


# The seat grid. `selected` is the seat this admin session has clicked; it is
# only echoed back when the seat is still free.
@router.get("/layout", response_model=SeatLayoutOut)
def get_seat_layout(selected: Optional[str] = Query(None), db: Session = Depends(get_db)):
    try:
        students = RecordStore(db).select_all("students")
    except StudyHallError as e:
        raise to_http_exception(e)
    selection = SeatSelection()
    if selected:
        selection.select(selected, booked_seats(students))
    return {"selected": selection.selected, "zones": seat_layout(students, selection)}


@router.get("/check/{seat_no}", response_model=SeatCheckOut)
def check_seat(seat_no: str, db: Session = Depends(get_db)):
    seat = normalize_seat(seat_no)
    zone = zone_for_seat(seat)
    if zone is None:
        raise HTTPException(status_code=404, detail=f"Seat {seat} does not exist")
    try:
        holders = RecordStore(db).select_all("students", seat_no=seat)
    except StudyHallError as e:
        raise to_http_exception(e)
    state = SeatState.booked if holders else SeatState.available
    return {"seat_no": seat, "floor": zone.floor, "state": state}
