from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import List, Optional
from sqlalchemy.orm import Session
from datetime import date, datetime
from decimal import Decimal

from db import get_db
from routes.http_errors import to_http_exception
from services.errors import StudyHallError
from services.record_store import RecordStore

router = APIRouter(prefix="/api/payments", tags=["Payments"])


class PaymentOut(BaseModel):
    id: int
    student_id: int
    amount: Decimal
    date: datetime
    next_due_date: Optional[date]
    created_at: datetime

    class Config:
        from_attributes = True


# Payments are append-only: they are created with an enrollment and never edited here
@router.get("/get-all", response_model=List[PaymentOut])
def get_all_payments(db: Session = Depends(get_db)):
    try:
        return RecordStore(db).select_all("payments", order_by="date", descending=True)
    except StudyHallError as e:
        raise to_http_exception(e)


@router.get("/get-by/student/{student_id}", response_model=List[PaymentOut])
def get_payments_by_student(student_id: int, db: Session = Depends(get_db)):
    store = RecordStore(db)
    try:
        store.get("students", student_id)
        return store.select_all("payments", order_by="date", student_id=student_id)
    except StudyHallError as e:
        raise to_http_exception(e)
