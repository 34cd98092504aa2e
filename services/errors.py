from typing import Dict, List, Optional


class StudyHallError(Exception):
    """Base class for errors raised by the study hall services."""


class ValidationError(StudyHallError):
    """Required fields missing or values that don't parse.

    Raised before any store call is attempted.
    """

    def __init__(self, missing_fields: Optional[List[str]] = None, invalid_fields: Optional[Dict[str, str]] = None):
        self.missing_fields = list(missing_fields or [])
        self.invalid_fields = dict(invalid_fields or {})
        parts = []
        if self.missing_fields:
            parts.append("missing required fields: " + ", ".join(self.missing_fields))
        if self.invalid_fields:
            parts.append("invalid fields: " + ", ".join(f"{k} ({v})" for k, v in self.invalid_fields.items()))
        super().__init__("; ".join(parts) or "invalid input")

    def to_detail(self) -> dict:
        return {
            "message": str(self),
            "missing_fields": self.missing_fields,
            "invalid_fields": self.invalid_fields,
        }


class SeatUnavailableError(StudyHallError):
    def __init__(self, seat_no: str):
        self.seat_no = seat_no
        super().__init__(f"Seat {seat_no} is already booked")


class RecordNotFoundError(StudyHallError):
    def __init__(self, table: str, record_id):
        self.table = table
        self.record_id = record_id
        super().__init__(f"No record {record_id} in {table}")


class RemoteWriteError(StudyHallError):
    """The store rejected an insert, update or delete.

    ``conflict`` is set when the rejection came from an integrity constraint
    (e.g. a seat that is already taken).
    """

    def __init__(self, table: str, operation: str, message: str, conflict: bool = False):
        self.table = table
        self.operation = operation
        self.conflict = conflict
        super().__init__(f"{operation} on {table} failed: {message}")


class RemoteReadError(StudyHallError):
    def __init__(self, table: str, message: str):
        self.table = table
        super().__init__(f"Failed to load {table}: {message}")
