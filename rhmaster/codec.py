"""Conversions between the canonical record shape and storage rows.

Canonical records use ``DD/MM/YYYY`` dates and typed fields. Storage rows
use the remote column names, ISO ``YYYY-MM-DD`` dates and stringified
numerics. Malformed dates never raise; they degrade to an empty value.
"""
from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Mapping, Optional

from .logging import get_logger
from .models import Adjustments, Company, Employee, PayrollRecord
from .validation import parse_number

logger = get_logger(__name__)

Row = Dict[str, Any]

# canonical field -> storage column
EMPLOYEE_COLUMNS = {
    "id": "id",
    "name": "name",
    "company": "company",
    "admission_date": "admission_date",
    "dismissal_date": "dismissal_date",
    "birth_date": "birth_date",
    "address": "address",
    "city": "city",
    "state": "state",
    "postal_code": "cep",
    "phone": "phone",
    "father_name": "father_name",
    "mother_name": "mother_name",
    "cpf": "cpf",
    "rg": "rg",
    "ctps": "ctps",
    "pis": "pis",
    "voter_id": "voter_id",
    "role": "role",
    "salary": "salary",
    "role_accumulation": "role_accumulation",
}

ADJUSTMENT_COLUMNS = {
    "other_income": "other_income",
    "bonuses": "bonuses",
    "transport_voucher": "vt",
    "basic_basket": "basic_basket",
    "overtime_100": "ot100",
    "overtime_70": "ot70",
    "overtime_50": "ot50",
    "meal_voucher": "vr",
    "advances": "advances",
    "absences": "absences",
    "loans": "loans",
    "other_discounts": "other_discounts",
    "pharmacy": "pharmacy",
    "supermarket": "supermarket",
    "dental": "dental",
    "medical": "medical",
    "other_convenios": "other_convenios",
    "observations": "observations",
}

RECORD_COLUMNS = {
    "id": "id",
    "employee_id": "employee_id",
    "closing_date": "closing_date",
    **ADJUSTMENT_COLUMNS,
}

EMPLOYEE_DATE_FIELDS = ("admission_date", "dismissal_date", "birth_date")
EMPLOYEE_NUMERIC_FIELDS = ("salary", "role_accumulation")
ADJUSTMENT_TEXT_FIELDS = ("observations",)
ADJUSTMENT_FLAG_FIELDS = ("transport_voucher",)


def to_iso_date(value: Optional[str]) -> Optional[str]:
    """``DD/MM/YYYY`` -> ``YYYY-MM-DD``; empty or malformed input gives None."""

    if not value:
        return None
    parts = value.strip().split("/")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None
    day, month, year = parts
    return f"{year.zfill(4)}-{month.zfill(2)}-{day.zfill(2)}"


def from_iso_date(value: Optional[str]) -> str:
    """``YYYY-MM-DD`` (optionally with a time part) -> ``DD/MM/YYYY``."""

    if not value:
        return ""
    parts = str(value).split("T")[0].strip().split("-")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return ""
    year, month, day = parts
    return f"{day.zfill(2)}/{month.zfill(2)}/{year.zfill(4)}"


def _number_to_storage(value: Any) -> str:
    return str(float(value if value is not None else 0))


def _number_from_storage(value: Any) -> float:
    return float(value if value not in (None, "") else 0)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def employee_to_storage(employee: Employee) -> Row:
    row: Row = {}
    for field_name, column in EMPLOYEE_COLUMNS.items():
        value = getattr(employee, field_name)
        if field_name in EMPLOYEE_DATE_FIELDS:
            value = to_iso_date(value)
        elif field_name in EMPLOYEE_NUMERIC_FIELDS:
            value = _number_to_storage(value)
        elif field_name == "company":
            value = value.value if value is not None else None
        row[column] = value
    return row


def _company_from_storage(value: Any, employee_id: Any) -> Optional[Company]:
    """Unknown companies in the remote mirror load as unset instead of failing."""

    try:
        return Company.parse(value)
    except ValueError:
        logger.warning("unknown_company", employee_id=employee_id, company=value)
        return None


def employee_from_storage(row: Mapping[str, Any]) -> Employee:
    values: Dict[str, Any] = {}
    for field_name, column in EMPLOYEE_COLUMNS.items():
        value = row.get(column)
        if field_name in EMPLOYEE_DATE_FIELDS:
            value = from_iso_date(value)
        elif field_name in EMPLOYEE_NUMERIC_FIELDS:
            value = _number_from_storage(value)
        elif field_name == "company":
            value = _company_from_storage(value, row.get("id"))
        else:
            value = _text(value)
        values[field_name] = value
    return Employee(**values)


def adjustments_to_storage(adjustments: Adjustments) -> Row:
    row: Row = {}
    for field_name, column in ADJUSTMENT_COLUMNS.items():
        value = getattr(adjustments, field_name)
        if field_name not in ADJUSTMENT_TEXT_FIELDS and field_name not in ADJUSTMENT_FLAG_FIELDS:
            value = _number_to_storage(value)
        row[column] = value
    return row


def adjustments_from_storage(row: Mapping[str, Any]) -> Adjustments:
    values: Dict[str, Any] = {}
    for field_name, column in ADJUSTMENT_COLUMNS.items():
        value = row.get(column)
        if field_name in ADJUSTMENT_TEXT_FIELDS:
            value = _text(value)
        elif field_name in ADJUSTMENT_FLAG_FIELDS:
            value = bool(value) if value is not None else False
        else:
            value = _number_from_storage(value)
        values[field_name] = value
    return Adjustments(**values)


def record_to_storage(record: PayrollRecord) -> Row:
    return {
        "id": record.id,
        "employee_id": record.employee_id,
        "closing_date": to_iso_date(record.closing_date),
        **adjustments_to_storage(record.adjustments),
    }


def record_from_storage(row: Mapping[str, Any]) -> PayrollRecord:
    return PayrollRecord(
        id=_text(row.get("id")),
        employee_id=_text(row.get("employee_id")),
        closing_date=from_iso_date(row.get("closing_date")),
        adjustments=adjustments_from_storage(row),
    )


# Local snapshot shape: the canonical record as plain JSON.

def employee_to_snapshot(employee: Employee) -> Row:
    payload = asdict(employee)
    payload["company"] = employee.company.value if employee.company else ""
    return payload


def employee_from_snapshot(data: Mapping[str, Any]) -> Employee:
    payload = dict(data)
    payload["company"] = Company.parse(payload.get("company"))
    return Employee(**payload)


def record_to_snapshot(record: PayrollRecord) -> Row:
    return asdict(record)


def record_from_snapshot(data: Mapping[str, Any]) -> PayrollRecord:
    payload = dict(data)
    payload["adjustments"] = Adjustments(**payload.get("adjustments", {}))
    return PayrollRecord(**payload)


# Raw form input from the presentation layer.

def employee_from_form(fields: Mapping[str, Any], employee_id: str = "") -> Employee:
    values: Dict[str, Any] = {"id": employee_id}
    for field_name in EMPLOYEE_COLUMNS:
        if field_name == "id" or field_name not in fields:
            continue
        value = fields[field_name]
        if field_name in EMPLOYEE_NUMERIC_FIELDS:
            value = parse_number(value)
        elif field_name == "company":
            value = Company.parse(value)
        else:
            value = _text(value).strip()
        values[field_name] = value
    values.setdefault("name", "")
    return Employee(**values)


def adjustments_from_form(fields: Mapping[str, Any]) -> Adjustments:
    adjustments = Adjustments()
    for field_name in ADJUSTMENT_COLUMNS:
        if field_name not in fields:
            continue
        value = fields[field_name]
        if field_name in ADJUSTMENT_TEXT_FIELDS:
            value = _text(value)
        elif field_name in ADJUSTMENT_FLAG_FIELDS:
            value = value if isinstance(value, bool) else str(value).strip().lower() in ("1", "true", "yes", "on")
        else:
            value = parse_number(value)
        setattr(adjustments, field_name, value)
    return adjustments
