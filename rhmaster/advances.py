from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from .calculator import advance_entitlement
from .models import AdvanceExtra, Employee


@dataclass
class AdvanceLine:
    employee: Employee
    base_advance: float
    other_advances: float
    total: float
    observations: str


class AdvanceSheet:
    """Period-scoped 40% advances with a manual extra per employee."""

    def __init__(self, employees: List[Employee], period_start: str = "", period_end: str = ""):
        self.employees = list(employees)
        self.period_start = period_start
        self.period_end = period_end
        self.extras: Dict[str, AdvanceExtra] = {e.id: AdvanceExtra() for e in self.employees}

    def set_extra(self, employee_id: str, other_advances: float = 0.0, observations: str = "") -> None:
        self.extras[employee_id] = AdvanceExtra(other_advances=other_advances, observations=observations)

    def line_for(self, employee: Employee) -> AdvanceLine:
        extra = self.extras.get(employee.id) or AdvanceExtra()
        base = advance_entitlement(employee.salary, employee.role_accumulation)
        return AdvanceLine(
            employee=employee,
            base_advance=base,
            other_advances=extra.other_advances,
            total=advance_entitlement(employee.salary, employee.role_accumulation, extra.other_advances),
            observations=extra.observations,
        )

    def lines(self) -> List[AdvanceLine]:
        return [self.line_for(e) for e in self.employees]

    def grand_total(self) -> float:
        return round(sum(line.total for line in self.lines()), 2)
