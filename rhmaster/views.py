from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .models import Employee, PayrollRecord, company_label

MISSING_EMPLOYEE = "---"


@dataclass
class RosterSummary:
    headcount: int
    total_salaries: float
    average_salary: float
    top_salaries: List[Tuple[str, float]] = field(default_factory=list)


def roster_summary(employees: Iterable[Employee], top: int = 5) -> RosterSummary:
    employees = list(employees)
    total = round(sum(e.salary for e in employees), 2)
    average = round(total / len(employees), 2) if employees else 0.0
    ranked = sorted(employees, key=lambda e: e.salary, reverse=True)[:top]
    return RosterSummary(
        headcount=len(employees),
        total_salaries=total,
        average_salary=average,
        top_salaries=[((e.name.split() or [""])[0], e.salary) for e in ranked],
    )


def format_roster(employees: Iterable[Employee]) -> str:
    rows = []
    for employee in employees:
        rows.append(
            f"{employee.id} {employee.name} ({employee.role or '-'}) "
            f"company: {company_label(employee.company, '-')} salary: {employee.salary:.2f}"
        )
    return "\n".join(rows)


def format_history(entries: Iterable[Tuple[PayrollRecord, Optional[Employee]]], missing: str = "N/A") -> str:
    rows = ["Company      Employee                       Closing"]
    count = 0
    for record, employee in entries:
        company = company_label(employee.company, missing) if employee else missing
        name = employee.name if employee else MISSING_EMPLOYEE
        rows.append(f"{company:<12} {name:<30} {record.closing_date}")
        count += 1
    if count == 0:
        rows.append("No records found.")
    return "\n".join(rows)


def format_summary(summary: RosterSummary) -> str:
    rows = [
        f"Employees: {summary.headcount}",
        f"Total salaries: {summary.total_salaries:.2f}",
        f"Average salary: {summary.average_salary:.2f}",
    ]
    for name, salary in summary.top_salaries:
        rows.append(f"  {name:<20} {salary:>12.2f}")
    return "\n".join(rows)
