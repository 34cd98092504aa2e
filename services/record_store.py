import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models.payments.payment_models import Payment
from models.students.student_models import Student
from services.errors import RecordNotFoundError, RemoteReadError, RemoteWriteError

logger = logging.getLogger(__name__)

TABLES = {
    "students": Student,
    "payments": Payment,
}


def _model_for(table: str):
    try:
        return TABLES[table]
    except KeyError:
        raise ValueError(f"Unknown table {table!r}")


class RecordStore:
    """insert / update / delete / select_all over one SQLAlchemy session.

    Every failed write is rolled back before it is reported, so the caller
    never sees a half-applied change. Nothing is retried.
    """

    def __init__(self, db: Session):
        self.db = db

    def _fail_write(self, table: str, operation: str, exc: SQLAlchemyError):
        self.db.rollback()
        conflict = isinstance(exc, IntegrityError)
        message = str(getattr(exc, "orig", None) or exc)
        logger.warning("%s on %s rejected: %s", operation, table, message)
        raise RemoteWriteError(table, operation, message, conflict=conflict) from exc

    def get(self, table: str, record_id: Any, for_update: bool = False):
        model = _model_for(table)
        try:
            query = self.db.query(model).filter(model.id == record_id)
            if for_update:
                query = query.with_for_update()
            row = query.first()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise RemoteReadError(table, str(exc)) from exc
        if row is None:
            raise RecordNotFoundError(table, record_id)
        return row

    def insert(self, table: str, record: Dict[str, Any], commit: bool = True):
        model = _model_for(table)
        row = model(**record)
        try:
            self.db.add(row)
            if commit:
                self.db.commit()
                self.db.refresh(row)
            else:
                self.db.flush()
        except SQLAlchemyError as exc:
            self._fail_write(table, "insert", exc)
        logger.info("Inserted %s id=%s", table, row.id)
        return row

    def update(self, table: str, record_id: Any, patch: Dict[str, Any], row=None):
        """Apply ``patch`` to one row. Pass ``row`` when it is already loaded (and locked)."""
        if row is None:
            row = self.get(table, record_id, for_update=True)
        for key, value in patch.items():
            setattr(row, key, value)
        try:
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as exc:
            self._fail_write(table, "update", exc)
        logger.info("Updated %s id=%s fields=%s", table, record_id, sorted(patch))
        return row

    def delete(self, table: str, record_id: Any):
        row = self.get(table, record_id)
        try:
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail_write(table, "delete", exc)
        logger.info("Deleted %s id=%s", table, record_id)

    def select_all(self, table: str, order_by: Optional[str] = None, descending: bool = False, **filters) -> List[Any]:
        model = _model_for(table)
        try:
            query = self.db.query(model)
            if filters:
                query = query.filter_by(**filters)
            if order_by:
                column = getattr(model, order_by)
                query = query.order_by(column.desc() if descending else column.asc(), model.id)
            else:
                query = query.order_by(model.id)
            return query.all()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Failed to load %s: %s", table, exc)
            raise RemoteReadError(table, str(exc)) from exc
