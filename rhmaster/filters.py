from __future__ import annotations

from typing import Iterable, List, Optional

from .models import Company, Employee


def filter_employees(
    employees: Iterable[Employee],
    search: Optional[str] = None,
    company: Optional[Company] = None,
) -> List[Employee]:
    """Filter the roster by a case-insensitive name fragment and company."""

    term = (search or "").strip().lower()

    def matches(employee: Employee) -> bool:
        if term and term not in employee.name.lower():
            return False
        if company is not None and employee.company is not company:
            return False
        return True

    return [employee for employee in employees if matches(employee)]
