from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Optional


class Company(str, Enum):
    CAMPLUVAS = "CAMPLUVAS"
    LOCATEX = "LOCATEX"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Company"]:
        """Map stored text to a company; empty text means unset."""

        if value is None or value == "":
            return None
        if isinstance(value, Company):
            return value
        try:
            return cls(value.strip().upper())
        except ValueError:
            raise ValueError(f"Unknown company {value!r}") from None


def company_label(company: Optional[Company], default: str) -> str:
    if company is None:
        return default
    return company.value


class AbsencePolicy(str, Enum):
    AMOUNT = "amount"  # absences field is already a currency amount
    PRORATED_DAYS = "prorated_days"  # absences field is a day count, salary / 30 per day


class OrphanRecordPolicy(str, Enum):
    TOLERATE = "tolerate"
    REJECT = "reject"


class ConnectivityMode(str, Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


class EntityKind(str, Enum):
    EMPLOYEES = "employees"
    PAYROLL_RECORDS = "payroll_records"


@dataclass
class Employee:
    id: str
    name: str
    company: Optional[Company] = None
    admission_date: str = ""
    dismissal_date: str = ""
    birth_date: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    phone: str = ""
    father_name: str = ""
    mother_name: str = ""
    cpf: str = ""
    rg: str = ""
    ctps: str = ""
    pis: str = ""
    voter_id: str = ""
    role: str = ""
    salary: float = 0.0
    role_accumulation: float = 0.0

    @property
    def base_pay(self) -> float:
        return self.salary + self.role_accumulation


EARNING_FIELDS = (
    "other_income",
    "bonuses",
    "basic_basket",
    "meal_voucher",
    "overtime_100",
    "overtime_70",
    "overtime_50",
)

DEDUCTION_FIELDS = (
    "advances",
    "absences",
    "loans",
    "other_discounts",
    "pharmacy",
    "supermarket",
    "dental",
    "medical",
    "other_convenios",
)


@dataclass
class Adjustments:
    """Period-specific earnings and deductions for one employee."""

    # Earnings
    other_income: float = 0.0
    bonuses: float = 0.0
    transport_voucher: bool = False
    basic_basket: float = 0.0
    overtime_100: float = 0.0
    overtime_70: float = 0.0
    overtime_50: float = 0.0
    meal_voucher: float = 0.0
    # Deductions
    advances: float = 0.0
    absences: float = 0.0
    loans: float = 0.0
    other_discounts: float = 0.0
    pharmacy: float = 0.0
    supermarket: float = 0.0
    dental: float = 0.0
    medical: float = 0.0
    other_convenios: float = 0.0
    observations: str = ""

    def copy(self) -> "Adjustments":
        return replace(self)

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]


@dataclass
class PayrollRecord:
    id: str
    employee_id: str
    closing_date: str
    adjustments: Adjustments = field(default_factory=Adjustments)


@dataclass
class AdvanceExtra:
    other_advances: float = 0.0
    observations: str = ""
