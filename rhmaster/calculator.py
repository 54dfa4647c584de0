from __future__ import annotations

from dataclasses import dataclass

from .models import AbsencePolicy, Adjustments, Employee

ADVANCE_RATE = 0.40
DAYS_PER_MONTH = 30


@dataclass
class NetPayBreakdown:
    employee_id: str
    earnings: float
    absence_deduction: float
    deductions: float
    net_pay: float


def absence_deduction(salary: float, absences: float, policy: AbsencePolicy) -> float:
    if policy is AbsencePolicy.AMOUNT:
        return absences
    if policy is AbsencePolicy.PRORATED_DAYS:
        return (salary / DAYS_PER_MONTH) * absences
    raise ValueError(f"Unsupported absence policy {policy!r}")


def advance_entitlement(salary: float, role_accumulation: float = 0.0, extra_advance: float = 0.0) -> float:
    """40% of base pay plus accumulation, plus any manually entered extra."""

    return round(ADVANCE_RATE * (salary + role_accumulation) + extra_advance, 2)


class PayrollCalculator:
    """Net pay for one employee and one set of period adjustments.

    Overtime hours and the transport voucher flag are carried on the
    adjustments for reporting only and never change the net amount.
    """

    def __init__(self, absence_policy: AbsencePolicy = AbsencePolicy.PRORATED_DAYS):
        self.absence_policy = AbsencePolicy(absence_policy)

    def breakdown(self, employee: Employee, adjustments: Adjustments) -> NetPayBreakdown:
        earnings = (
            employee.salary
            + employee.role_accumulation
            + adjustments.other_income
            + adjustments.bonuses
            + adjustments.basic_basket
            + adjustments.meal_voucher
        )
        absence_value = absence_deduction(employee.salary, adjustments.absences, self.absence_policy)
        deductions = (
            adjustments.advances
            + absence_value
            + adjustments.loans
            + adjustments.other_discounts
            + adjustments.pharmacy
            + adjustments.supermarket
            + adjustments.dental
            + adjustments.medical
            + adjustments.other_convenios
        )
        return NetPayBreakdown(
            employee_id=employee.id,
            earnings=round(earnings, 2),
            absence_deduction=round(absence_value, 2),
            deductions=round(deductions, 2),
            net_pay=round(earnings - deductions, 2),
        )

    def net_pay(self, employee: Employee, adjustments: Adjustments) -> float:
        return self.breakdown(employee, adjustments).net_pay

    def advance(self, employee: Employee, extra_advance: float = 0.0) -> float:
        return advance_entitlement(employee.salary, employee.role_accumulation, extra_advance)
