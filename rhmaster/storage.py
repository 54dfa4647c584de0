from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from .codec import employee_from_snapshot, employee_to_snapshot, record_from_snapshot, record_to_snapshot
from .models import Company, Employee, PayrollRecord


SEED_EMPLOYEE_ID = "1"


def seed_employees() -> List[Employee]:
    return [
        Employee(
            id=SEED_EMPLOYEE_ID,
            name="Sample Employee (Local)",
            company=Company.CAMPLUVAS,
            admission_date="01/01/2023",
            birth_date="01/01/1990",
            city="São Paulo",
            state="SP",
            postal_code="00000-000",
            cpf="000.000.000-00",
            role="Manager",
            salary=5000.0,
        )
    ]


@dataclass
class Snapshot:
    employees: List[Employee] = field(default_factory=list)
    payroll_records: List[PayrollRecord] = field(default_factory=list)
    unsynced_updates: List[str] = field(default_factory=list)


class LocalStore:
    """JSON snapshot of the local mirror, written after every mutation."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Optional[Snapshot]:
        if not self.path.exists():
            return None
        content = json.loads(self.path.read_text(encoding="utf-8"))
        return Snapshot(
            employees=[employee_from_snapshot(e) for e in content.get("employees", [])],
            payroll_records=[record_from_snapshot(r) for r in content.get("payroll_records", [])],
            unsynced_updates=list(content.get("unsynced_updates", [])),
        )

    def load_or_seed(self) -> Snapshot:
        snapshot = self.load()
        if snapshot is None:
            return Snapshot(employees=seed_employees(), payroll_records=[])
        return snapshot

    def save(
        self,
        employees: List[Employee],
        payroll_records: List[PayrollRecord],
        unsynced_updates: Iterable[str] = (),
    ) -> None:
        payload = {
            "employees": [employee_to_snapshot(e) for e in employees],
            "payroll_records": [record_to_snapshot(r) for r in payroll_records],
            "unsynced_updates": sorted(unsynced_updates),
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
