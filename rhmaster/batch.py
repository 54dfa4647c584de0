"""Monthly closing across a company-filtered roster."""
from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from .calculator import PayrollCalculator
from .errors import ValidationError
from .logging import get_logger
from .models import Adjustments, Company, Employee, PayrollRecord
from .sync import SynchronizedStore
from .validation import parse_date, validate_closing_date

logger = get_logger(__name__)

Confirm = Callable[[str], bool]


def closing_sort_key(record: PayrollRecord) -> int:
    """Ordinal day of the closing date; unparsable dates sort first."""

    parsed = parse_date(record.closing_date)
    return parsed.toordinal() if parsed else 0


def latest_record(records: Iterable[PayrollRecord], employee_id: str) -> Optional[PayrollRecord]:
    candidates = [r for r in records if r.employee_id == employee_id]
    if not candidates:
        return None
    return max(candidates, key=closing_sort_key)


class BatchSheet:
    """Working set of adjustments for one closing period.

    Holds one Adjustments entry per employee; the company filter decides
    which employees the prefill, clear and finalize actions touch.
    """

    def __init__(
        self,
        employees: List[Employee],
        calculator: PayrollCalculator,
        closing_date: str,
        company: Optional[Company] = None,
    ) -> None:
        self.employees = list(employees)
        self.calculator = calculator
        self.closing_date = closing_date
        self.company = company
        self.working: Dict[str, Adjustments] = {e.id: Adjustments() for e in self.employees}

    @property
    def company_label(self) -> str:
        return self.company.value if self.company else "All companies"

    def visible_employees(self) -> List[Employee]:
        if self.company is None:
            return list(self.employees)
        return [e for e in self.employees if e.company is self.company]

    def adjustments_for(self, employee_id: str) -> Adjustments:
        return self.working.setdefault(employee_id, Adjustments())

    def set_value(self, employee_id: str, field_name: str, value) -> None:
        if field_name not in Adjustments.field_names():
            raise ValidationError(field_name, f"Unknown adjustment field {field_name!r}.")
        setattr(self.adjustments_for(employee_id), field_name, value)

    def prefill_from_prior_period(self, records: Iterable[PayrollRecord]) -> int:
        """Copy each visible employee's latest record into the working set."""

        records = list(records)
        found = 0
        for employee in self.visible_employees():
            last = latest_record(records, employee.id)
            if last is None:
                continue
            self.working[employee.id] = last.adjustments.copy()
            found += 1
        logger.info("batch_prefilled", company=self.company_label, found=found)
        return found

    def clear(self, confirm: Confirm) -> bool:
        if not confirm("This will reset the visible values in the grid. Continue?"):
            return False
        for employee in self.visible_employees():
            self.working[employee.id] = Adjustments()
        return True

    def net_pay(self, employee: Employee) -> float:
        return self.calculator.net_pay(employee, self.adjustments_for(employee.id))

    def total_net_pay(self) -> float:
        return round(sum(self.net_pay(e) for e in self.visible_employees()), 2)

    def build_records(self) -> List[PayrollRecord]:
        return [
            PayrollRecord(
                id="",
                employee_id=employee.id,
                closing_date=self.closing_date,
                adjustments=self.adjustments_for(employee.id).copy(),
            )
            for employee in self.visible_employees()
        ]

    def finalize(self, store: SynchronizedStore, confirm: Confirm) -> List[PayrollRecord]:
        """Submit one record per visible employee as a single batch."""

        visible = self.visible_employees()
        if not visible:
            return []
        validate_closing_date(self.closing_date)
        if not confirm(f"Save the payroll of {len(visible)} employees ({self.company_label})?"):
            return []
        created = store.create_records(self.build_records())
        logger.info(
            "payroll_batch_created",
            company=self.company_label,
            closing_date=self.closing_date,
            count=len(created),
        )
        return created
