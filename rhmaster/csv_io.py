from __future__ import annotations

import csv
from datetime import date
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

from .advances import AdvanceSheet
from .batch import BatchSheet
from .models import Employee

ACTIVE = "Active"

ROSTER_HEADERS = [
    "Name",
    "Role",
    "Admission date",
    "Dismissal date",
    "Birth date",
    "CPF",
    "RG",
    "PIS",
    "CTPS",
    "Voter ID",
    "Phone",
    "Address",
    "City",
    "State",
    "Postal code",
    "Father name",
    "Mother name",
    "Base salary",
    "Role accumulation",
]

BATCH_HEADERS = [
    "Company",
    "Name",
    "Role",
    "Base salary",
    "Role accumulation",
    "Other income",
    "Bonuses",
    "Basic basket",
    "Meal voucher",
    "OT 100%",
    "OT 70%",
    "OT 50%",
    "Transport voucher",
    "Advances",
    "Absences",
    "Loans",
    "Pharmacy",
    "Supermarket",
    "Dental",
    "Medical",
    "Other convenios",
    "Other discounts",
    "Net pay",
]

ADVANCE_HEADERS = [
    "Name",
    "Role",
    "Base salary",
    "Role accumulation",
    "Advance (40%)",
    "Other advances",
    "Total",
    "Observations",
    "Period start",
    "Period end",
]


def format_cell(value: Any) -> str:
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (int, float)):
        return f"{value:.2f}".replace(".", ",")
    return "" if value is None else str(value)


def stamp(today: Optional[date] = None) -> str:
    return (today or date.today()).strftime("%d-%m-%Y")


def write_rows(path: Path, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> Path:
    """Write a ``;``-delimited CSV with a UTF-8 byte-order mark."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8-sig") as handle:
        writer = csv.writer(handle, delimiter=";", lineterminator="\n")
        writer.writerow(headers)
        for row in rows:
            writer.writerow([format_cell(value) for value in row])
    return path


def roster_rows(employees: Iterable[Employee], missing: str = "N/A") -> List[List[Any]]:
    rows = []
    for e in employees:
        optional = [
            e.birth_date,
            e.cpf,
            e.rg,
            e.pis,
            e.ctps,
            e.voter_id,
            e.phone,
            e.address,
            e.city,
            e.state,
            e.postal_code,
            e.father_name,
            e.mother_name,
        ]
        rows.append(
            [e.name, e.role, e.admission_date or missing, e.dismissal_date or ACTIVE]
            + [value or missing for value in optional]
            + [e.salary, e.role_accumulation]
        )
    return rows


def batch_rows(sheet: BatchSheet, missing: str = "N/A") -> List[List[Any]]:
    rows = []
    for e in sheet.visible_employees():
        d = sheet.adjustments_for(e.id)
        rows.append(
            [
                e.company.value if e.company else missing,
                e.name,
                e.role,
                e.salary,
                e.role_accumulation,
                d.other_income,
                d.bonuses,
                d.basic_basket,
                d.meal_voucher,
                d.overtime_100,
                d.overtime_70,
                d.overtime_50,
                d.transport_voucher,
                d.advances,
                d.absences,
                d.loans,
                d.pharmacy,
                d.supermarket,
                d.dental,
                d.medical,
                d.other_convenios,
                d.other_discounts,
                sheet.net_pay(e),
            ]
        )
    return rows


def advance_rows(sheet: AdvanceSheet, missing: str = "N/A") -> List[List[Any]]:
    return [
        [
            line.employee.name,
            line.employee.role,
            line.employee.salary,
            line.employee.role_accumulation,
            line.base_advance,
            line.other_advances,
            line.total,
            line.observations,
            sheet.period_start or missing,
            sheet.period_end or missing,
        ]
        for line in sheet.lines()
    ]


def export_roster(
    employees: Iterable[Employee], directory: Path, missing: str = "N/A", today: Optional[date] = None
) -> Path:
    path = Path(directory) / f"employees_{stamp(today)}.csv"
    return write_rows(path, ROSTER_HEADERS, roster_rows(employees, missing))


def export_batch(sheet: BatchSheet, directory: Path, missing: str = "N/A", today: Optional[date] = None) -> Path:
    company = sheet.company.value if sheet.company else "ALL"
    path = Path(directory) / f"payroll_{company}_{stamp(today)}.csv"
    return write_rows(path, BATCH_HEADERS, batch_rows(sheet, missing))


def export_advances(sheet: AdvanceSheet, directory: Path, missing: str = "N/A", today: Optional[date] = None) -> Path:
    path = Path(directory) / f"advances_{stamp(today)}.csv"
    return write_rows(path, ADVANCE_HEADERS, advance_rows(sheet, missing))
