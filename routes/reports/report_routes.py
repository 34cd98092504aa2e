from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask
from pydantic import BaseModel
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4
import logging
import os

from db import get_db
from routes.http_errors import to_http_exception
from services.errors import StudyHallError
from services.record_store import RecordStore
from services.report_aggregator import (
    aggregate_monthly,
    chart_series,
    dashboard_summary,
    revenue_by_month,
    upcoming_payments,
)
from services.report_pdf_generator import generate_monthly_report_pdf

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["Reports"])


class MonthlyAggregateOut(BaseModel):
    month: str
    year: int
    month_number: int
    new_students: int
    total_collected: Decimal
    pending: Decimal

    class Config:
        from_attributes = True


class ChartSeriesOut(BaseModel):
    labels: List[str]
    collected: List[Decimal]
    pending: List[Decimal]


class MonthlyReportOut(BaseModel):
    months: List[MonthlyAggregateOut]
    chart: ChartSeriesOut


class RevenuePointOut(BaseModel):
    month: str
    year: int
    month_number: int
    total_amount: Decimal

    class Config:
        from_attributes = True


class DashboardOut(BaseModel):
    total_students: int
    total_payments: Decimal
    total_pending: Decimal
    floor_occupancy: Dict[str, int]


class UpcomingPaymentOut(BaseModel):
    id: Optional[int]
    name: Optional[str]
    floor: Optional[str]
    seat_no: Optional[str]
    next_payment_date: date
    days_left: int
    status: str
    urgency: str

    class Config:
        from_attributes = True


def _load(db: Session, table: str):
    try:
        return RecordStore(db).select_all(table)
    except StudyHallError as e:
        raise to_http_exception(e)


# Monthly enrollments, collections and pending, newest month first
@router.get("/monthly", response_model=MonthlyReportOut)
def get_monthly_report(db: Session = Depends(get_db)):
    aggregates = aggregate_monthly(_load(db, "students"))
    return {"months": aggregates, "chart": chart_series(aggregates)}


@router.get("/monthly/pdf")
def download_monthly_report(db: Session = Depends(get_db)):
    aggregates = aggregate_monthly(_load(db, "students"))
    filename = f"monthly_report_{datetime.utcnow().strftime('%Y%m%d%H%M%S')}_{uuid4().hex[:6]}.pdf"
    pdf_path = generate_monthly_report_pdf(aggregates, filename=filename)
    logger.info("Monthly report written to %s", pdf_path)
    # the file is only needed for this response
    return FileResponse(
        path=pdf_path,
        media_type="application/pdf",
        filename=os.path.basename(pdf_path),
        background=BackgroundTask(os.remove, pdf_path),
    )


@router.get("/dashboard", response_model=DashboardOut)
def get_dashboard(db: Session = Depends(get_db)):
    return dashboard_summary(_load(db, "students"), _load(db, "payments"))


# Collected revenue per calendar month, oldest first, for the revenue chart
@router.get("/revenue", response_model=List[RevenuePointOut])
def get_revenue(db: Session = Depends(get_db)):
    return revenue_by_month(_load(db, "payments"))


# Students with a due date, soonest first, with days left and overdue status
@router.get("/upcoming", response_model=List[UpcomingPaymentOut])
def get_upcoming_payments(as_of: Optional[date] = None, db: Session = Depends(get_db)):
    return upcoming_payments(_load(db, "students"), today=as_of)
