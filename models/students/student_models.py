from sqlalchemy import Column, Integer, String, Text, Numeric, Date, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from db import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    floor = Column(String, nullable=False, index=True)  # 1st Floor / 2nd Floor / Cabin
    # upper-cased seat id (F3, S21, C2); unique so a seat can't be booked twice
    seat_no = Column(String, nullable=False, unique=True, index=True)
    receipt_no = Column(String, nullable=True)
    package_months = Column(Integer, nullable=False, default=1)
    fees = Column(Numeric(10, 2), nullable=False, default=0)
    paid = Column(Numeric(10, 2), nullable=False, default=0)
    pending_amount = Column(Numeric(10, 2), nullable=False, default=0)
    credit_balance = Column(Numeric(10, 2), nullable=False, default=0)
    joining_date = Column(Date, nullable=True, index=True)
    allotted_date = Column(Date, nullable=True)
    next_payment_date = Column(Date, nullable=True, index=True)
    payment_method = Column(String, nullable=True)
    remarks = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    payments = relationship("Payment", back_populates="student", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Student(id={self.id}, name={self.name}, seat_no={self.seat_no})>"
