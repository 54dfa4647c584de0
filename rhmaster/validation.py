from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Optional

from .errors import ValidationError
from .models import Employee

_NON_DIGITS = re.compile(r"\D")
_NUMERIC_NOISE = re.compile(r"[^\d,.\-+eE]")


def digits_only(value: str) -> str:
    return _NON_DIGITS.sub("", value or "")


def _check_digit(digits: str) -> int:
    weight = len(digits) + 1
    total = sum(int(d) * (weight - i) for i, d in enumerate(digits))
    remainder = 11 - (total % 11)
    return 0 if remainder in (10, 11) else remainder


def is_valid_cpf(value: str) -> bool:
    """Validate a national tax ID (CPF) by its two mod-11 check digits.

    Formatting characters are ignored, so ``529.982.247-25`` and
    ``52998224725`` are equivalent.
    """

    raw = digits_only(value)
    if len(raw) != 11 or len(set(raw)) == 1:
        return False
    if _check_digit(raw[:9]) != int(raw[9]):
        return False
    return _check_digit(raw[:10]) == int(raw[10])


def parse_number(value: Any) -> float:
    """Coerce user input to a float; anything unparsable becomes 0.

    Accepts both ``1.234,56`` and ``1234.56`` styles: when both separators
    appear the last one is the decimal separator.
    """

    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = _NUMERIC_NOISE.sub("", str(value))
        if "," in text and "." in text:
            if text.rfind(",") > text.rfind("."):
                text = text.replace(".", "").replace(",", ".")
            else:
                text = text.replace(",", "")
        else:
            text = text.replace(",", ".")
        try:
            number = float(text)
        except ValueError:
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse ``DD/MM/YYYY`` into a calendar date, or None when it is not one."""

    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), "%d/%m/%Y").date()
    except ValueError:
        return None


def today_str(today: Optional[date] = None) -> str:
    return (today or date.today()).strftime("%d/%m/%Y")


def is_complete_date(value: str) -> bool:
    return bool(value) and len(value.strip()) == 10 and parse_date(value) is not None


def validate_employee(employee: Employee) -> None:
    """Check registration rules, stopping at the first failure.

    Order: company, name, national ID, role, admission date, then the
    optional dismissal and birth dates.
    """

    if employee.company is None:
        raise ValidationError("company", "Select the employee's company.")
    name = (employee.name or "").strip()
    if not name or len(name) < 3:
        raise ValidationError("name", "Enter the employee's full name.")
    raw_cpf = digits_only(employee.cpf)
    if len(raw_cpf) != 11:
        raise ValidationError("cpf", "The CPF must have 11 digits.")
    if not is_valid_cpf(raw_cpf):
        raise ValidationError("cpf", "Invalid CPF. Please check the digits.")
    if not (employee.role or "").strip():
        raise ValidationError("role", "Enter the employee's role.")
    if not is_complete_date(employee.admission_date):
        raise ValidationError("admission_date", "Enter a valid admission date (DD/MM/YYYY).")
    for field_name in ("dismissal_date", "birth_date"):
        value = getattr(employee, field_name)
        if value and not is_complete_date(value):
            raise ValidationError(field_name, f"Enter a valid {field_name.replace('_', ' ')} (DD/MM/YYYY).")
    if employee.salary < 0:
        raise ValidationError("salary", "Salary cannot be negative.")
    if employee.role_accumulation < 0:
        raise ValidationError("role_accumulation", "Role accumulation cannot be negative.")


def validate_closing_date(value: str) -> None:
    if not is_complete_date(value):
        raise ValidationError("closing_date", "Enter a valid closing date (DD/MM/YYYY).")
