from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Iterable, Iterator, List, Optional, Type

from sqlalchemy import Date, Numeric, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .codec import Row
from .db import Base, EmployeeRow, PayrollRecordRow, make_engine, make_session_factory, session_scope
from .errors import ConflictError, ConnectivityError
from .logging import get_logger

logger = get_logger(__name__)

CPF_TAKEN = "An employee with this CPF is already registered."

# operation -> (field, message) reported on a unique key violation
CONFLICTS = {
    "insert_employee": ("cpf", CPF_TAKEN),
    "update_employee": ("cpf", CPF_TAKEN),
    "insert_records": ("id", "A payroll record with the same id is already stored."),
}


def _to_date(value: Any) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        return None


def _to_number(value: Any) -> float:
    return float(value) if value not in (None, "") else 0.0


def _row_to_model(model: Type[Base], row: Row) -> Base:
    values: Dict[str, Any] = {}
    for column in model.__table__.columns:
        if column.name not in row:
            continue
        value = row[column.name]
        if isinstance(column.type, Date):
            value = _to_date(value)
        elif isinstance(column.type, Numeric):
            value = _to_number(value)
        values[column.name] = value
    return model(**values)


def _model_to_row(instance: Base) -> Row:
    row: Row = {}
    for column in instance.__table__.columns:
        if column.name == "created_at":
            continue
        value = getattr(instance, column.name)
        if isinstance(value, date):
            value = value.isoformat()
        row[column.name] = value
    return row


class RemoteStore:
    """Authoritative remote mirror backed by a SQL database.

    Speaks storage rows only. Duplicate keys surface as ConflictError and
    every other database failure as ConnectivityError.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = make_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str, **kwargs: Any) -> "RemoteStore":
        return cls(make_engine(database_url, **kwargs))

    @contextmanager
    def _session(self, operation: str) -> Iterator[Any]:
        try:
            with session_scope(self.session_factory) as db:
                yield db
        except IntegrityError as exc:
            logger.info("remote_conflict", operation=operation, error=str(exc.orig))
            field, message = CONFLICTS.get(operation, ("id", f"Remote {operation} rejected a duplicate key."))
            raise ConflictError(message, field=field) from exc
        except SQLAlchemyError as exc:
            raise ConnectivityError(f"Remote {operation} failed: {exc}") from exc

    def create_schema(self) -> None:
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            raise ConnectivityError(f"Remote schema creation failed: {exc}") from exc

    def ping(self) -> None:
        with self._session("ping") as db:
            db.execute(text("SELECT 1"))

    def fetch_employees(self) -> List[Row]:
        with self._session("fetch_employees") as db:
            rows = db.query(EmployeeRow).order_by(EmployeeRow.name.asc(), EmployeeRow.id.asc()).all()
            return [_model_to_row(r) for r in rows]

    def fetch_records(self) -> List[Row]:
        with self._session("fetch_records") as db:
            rows = db.query(PayrollRecordRow).order_by(PayrollRecordRow.created_at.desc()).all()
            return [_model_to_row(r) for r in rows]

    def insert_employee(self, row: Row) -> None:
        with self._session("insert_employee") as db:
            db.add(_row_to_model(EmployeeRow, row))

    def update_employee(self, row: Row) -> None:
        with self._session("update_employee") as db:
            db.merge(_row_to_model(EmployeeRow, row))

    def insert_records(self, rows: Iterable[Row]) -> None:
        with self._session("insert_records") as db:
            db.add_all([_row_to_model(PayrollRecordRow, row) for row in rows])
