from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from typing import List, Optional, Union
from sqlalchemy.orm import Session
from datetime import date, datetime
from decimal import Decimal
import logging

from db import get_db
from routes.http_errors import to_http_exception
from services.billing_calculator import ZERO, compute_billing, mark_paid, resolve_anchor_date
from services.enrollment_validator import MAX_PACKAGE_MONTHS, validate_enrollment, validate_update
from services.errors import SeatUnavailableError, StudyHallError
from services.record_store import RecordStore
from services.seat_occupancy import is_seat_available

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/students", tags=["Students"])


# Pydantic Schemas
# Inputs are deliberately loose; the enrollment validator reports every bad field at once.
class StudentCreate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    floor: Optional[str] = None
    seat_no: Optional[str] = None
    receipt_no: Optional[str] = None
    package_months: Optional[Union[int, str]] = None
    fees: Optional[Union[Decimal, str]] = None
    paid: Optional[Union[Decimal, str]] = None
    joining_date: Optional[date] = None
    allotted_date: Optional[date] = None
    payment_method: Optional[str] = None
    remarks: Optional[str] = None


class StudentUpdate(StudentCreate):
    next_payment_date: Optional[date] = None


class MarkPaidRequest(BaseModel):
    months_paid: int = Field(1, ge=1, le=MAX_PACKAGE_MONTHS)


class StudentOut(BaseModel):
    id: int
    name: str
    phone: Optional[str]
    floor: str
    seat_no: str
    receipt_no: Optional[str]
    package_months: int
    fees: Decimal
    paid: Decimal
    pending_amount: Decimal
    credit_balance: Decimal
    joining_date: Optional[date]
    allotted_date: Optional[date]
    next_payment_date: Optional[date]
    payment_method: Optional[str]
    remarks: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


def _ensure_seat_free(store: RecordStore, seat_no: str, student_id: Optional[int] = None):
    others = [h for h in store.select_all("students", seat_no=seat_no) if h.id != student_id]
    if not is_seat_available(seat_no, others):
        raise SeatUnavailableError(seat_no)


# Enroll a student; an initial payment is recorded alongside in the same transaction
@router.post("/create", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(payload: StudentCreate, db: Session = Depends(get_db)):
    store = RecordStore(db)
    try:
        data = validate_enrollment(payload.model_dump())
        _ensure_seat_free(store, data.seat_no)

        joining = data.joining_date or date.today()
        allotted = data.allotted_date or joining
        billing = compute_billing(data.fees, data.paid, data.package_months, resolve_anchor_date(allotted, joining))

        has_payment = data.paid > ZERO
        student = store.insert("students", {
            "name": data.name,
            "phone": data.phone,
            "floor": data.floor,
            "seat_no": data.seat_no,
            "receipt_no": data.receipt_no,
            "package_months": data.package_months,
            "fees": data.fees,
            "paid": data.paid,
            "pending_amount": billing.pending_amount,
            "credit_balance": billing.credit_balance,
            "joining_date": joining,
            "allotted_date": allotted,
            "next_payment_date": billing.next_payment_date,
            "payment_method": data.payment_method,
            "remarks": data.remarks,
        }, commit=not has_payment)

        if has_payment:
            store.insert("payments", {
                "student_id": student.id,
                "amount": data.paid,
                "date": datetime.utcnow(),
                "next_due_date": billing.next_payment_date,
            })
            db.refresh(student)
    except StudyHallError as e:
        logger.info("Enrollment rejected: %s", e)
        raise to_http_exception(e)
    return student


# Get all students, soonest payment due first
@router.get("/get-all", response_model=List[StudentOut])
def get_all_students(db: Session = Depends(get_db)):
    try:
        return RecordStore(db).select_all("students", order_by="next_payment_date")
    except StudyHallError as e:
        raise to_http_exception(e)


# Get student by ID
@router.get("/get-by/{student_id}", response_model=StudentOut)
def get_student_by_id(student_id: int, db: Session = Depends(get_db)):
    try:
        return RecordStore(db).get("students", student_id)
    except StudyHallError as e:
        raise to_http_exception(e)


# Edit a student; derived billing fields are recomputed from the edited values
@router.put("/put-by/{student_id}", response_model=StudentOut)
def update_student(student_id: int, payload: StudentUpdate, db: Session = Depends(get_db)):
    store = RecordStore(db)
    try:
        student = store.get("students", student_id, for_update=True)
        patch = validate_update(
            payload.model_dump(exclude_unset=True),
            current_floor=student.floor,
            current_seat=student.seat_no,
        )
        if patch.get("seat_no") and patch["seat_no"] != student.seat_no:
            _ensure_seat_free(store, patch["seat_no"], student_id)

        fees = patch.get("fees", student.fees)
        paid = patch.get("paid", student.paid)
        months = patch.get("package_months", student.package_months)
        joining = patch.get("joining_date", student.joining_date)
        allotted = patch.get("allotted_date", student.allotted_date)
        billing = compute_billing(fees, paid, months, resolve_anchor_date(allotted, joining))

        patch["pending_amount"] = billing.pending_amount
        patch["credit_balance"] = billing.credit_balance
        if "next_payment_date" not in patch and ("package_months" in patch or "allotted_date" in patch):
            patch["next_payment_date"] = billing.next_payment_date

        student = store.update("students", student_id, patch, row=student)
    except StudyHallError as e:
        raise to_http_exception(e)
    return student


# Mark the current due payment as settled and move the due date forward
@router.post("/mark-paid/{student_id}", response_model=StudentOut)
def mark_student_paid(student_id: int, payload: Optional[MarkPaidRequest] = None, db: Session = Depends(get_db)):
    months = payload.months_paid if payload else 1
    store = RecordStore(db)
    try:
        student = store.get("students", student_id, for_update=True)
        previous_due = student.next_payment_date or resolve_anchor_date(student.allotted_date, student.joining_date)
        result = mark_paid(previous_due, months)
        paid = max(student.paid, student.fees)
        student = store.update("students", student_id, {
            "next_payment_date": result.next_payment_date,
            "pending_amount": result.pending_amount,
            "paid": paid,
            "credit_balance": max(paid - student.fees, ZERO),
        }, row=student)
    except StudyHallError as e:
        raise to_http_exception(e)
    logger.info("Student %s marked paid for %s month(s), next due %s", student_id, months, student.next_payment_date)
    return student


# Delete student by ID (payments go with it)
@router.delete("/delete-by/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(student_id: int, db: Session = Depends(get_db)):
    try:
        RecordStore(db).delete("students", student_id)
    except StudyHallError as e:
        raise to_http_exception(e)
    return
