from __future__ import annotations

import argparse
from typing import Dict, List

from .advances import AdvanceSheet
from .batch import BatchSheet
from .calculator import PayrollCalculator
from .codec import adjustments_from_form, employee_from_form
from .config import Settings, get_settings
from .csv_io import export_advances, export_batch, export_roster
from .errors import ConflictError, PayrollError, ValidationError
from .filters import filter_employees
from .logging import configure_logging
from .models import Company, EntityKind, PayrollRecord
from .sync import SynchronizedStore, open_store
from .validation import parse_number, today_str, validate_closing_date
from .views import format_history, format_roster, format_summary, roster_summary

EMPLOYEE_OPTIONS = {
    "company": "company",
    "cpf": "cpf",
    "role": "role",
    "admission": "admission_date",
    "dismissal": "dismissal_date",
    "birth": "birth_date",
    "address": "address",
    "city": "city",
    "state": "state",
    "postal_code": "postal_code",
    "phone": "phone",
    "father": "father_name",
    "mother": "mother_name",
    "rg": "rg",
    "ctps": "ctps",
    "pis": "pis",
    "voter_id": "voter_id",
    "salary": "salary",
    "accumulation": "role_accumulation",
}


def store_from_args(args: argparse.Namespace) -> SynchronizedStore:
    store = open_store(args.settings)
    store.load()
    return store


def calculator_from_args(args: argparse.Namespace) -> PayrollCalculator:
    return PayrollCalculator(args.settings.absence_policy)


def ask(args: argparse.Namespace, message: str) -> bool:
    if args.yes:
        return True
    answer = input(f"{message} [y/N] ")
    return answer.strip().lower() in ("y", "yes", "s", "sim")


def parse_assignments(values: List[str] | None) -> Dict[str, str]:
    fields: Dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"Expected FIELD=VALUE, got {item!r}")
        fields[key.strip()] = value
    return fields


def employee_fields(args: argparse.Namespace) -> Dict[str, str]:
    fields = {}
    for option, field_name in EMPLOYEE_OPTIONS.items():
        value = getattr(args, option, None)
        if value is not None:
            fields[field_name] = value
    return fields


def cmd_status(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    print(f"Mode: {store.mode.value}")
    print(f"Employees: {len(store.context.employees)}  Payroll records: {len(store.context.payroll_records)}")


def cmd_reconnect(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    print(f"Mode: {store.reconnect().value}")


def cmd_add_employee(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    fields = employee_fields(args)
    fields["name"] = args.name
    employee = store.create_employee(employee_from_form(fields))
    print(f"Added employee {employee.id} ({employee.name}) [{store.mode.value}]")


def cmd_edit_employee(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    current = store.find_employee(args.id)
    if current is None:
        raise ValidationError("id", f"Employee {args.id} not found.")
    fields = {name: getattr(current, name) for name in EMPLOYEE_OPTIONS.values()}
    fields["name"] = args.name if args.name is not None else current.name
    fields.update(employee_fields(args))
    employee = store.update_employee(employee_from_form(fields, employee_id=current.id))
    print(f"Updated employee {employee.id} ({employee.name})")


def cmd_list_employees(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    employees = store.read_all(EntityKind.EMPLOYEES)
    employees = filter_employees(employees, search=args.search, company=Company.parse(args.company))
    for employee in sorted(employees, key=lambda e: e.name.lower()):
        print(format_roster([employee]))


def cmd_add_payroll(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    employee = store.find_employee(args.employee)
    if employee is None:
        raise ValidationError("employee_id", "Select an employee.")
    closing = args.closing or today_str()
    validate_closing_date(closing)
    adjustments = adjustments_from_form(parse_assignments(args.set))
    record = store.create_record(
        PayrollRecord(id="", employee_id=employee.id, closing_date=closing, adjustments=adjustments)
    )
    net = calculator_from_args(args).net_pay(employee, record.adjustments)
    print(f"Saved payroll {record.id} for {employee.name} ({record.closing_date}) net: {net:.2f}")


def cmd_history(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    store.read_all(EntityKind.PAYROLL_RECORDS)
    print(format_history(store.history(), missing=args.settings.missing_value))


def cmd_close_month(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    sheet = BatchSheet(
        store.read_all(EntityKind.EMPLOYEES),
        calculator_from_args(args),
        closing_date=args.closing,
        company=Company.parse(args.company),
    )
    if args.prefill:
        found = sheet.prefill_from_prior_period(store.read_all(EntityKind.PAYROLL_RECORDS))
        print(f"{found} records from {sheet.company_label} were repeated.")
    for key, value in parse_assignments(args.set).items():
        employee_id, _, field_name = key.partition(":")
        parsed = adjustments_from_form({field_name: value})
        sheet.set_value(employee_id, field_name, getattr(parsed, field_name, value))
    if args.export:
        path = export_batch(sheet, args.settings.export_dir, missing=args.settings.missing_value)
        print(f"Exported batch to {path}")
    created = sheet.finalize(store, lambda message: ask(args, message))
    print(f"Saved {len(created)} payroll records for {args.closing} total net: {sheet.total_net_pay():.2f}")


def cmd_advances(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    employees = filter_employees(store.read_all(EntityKind.EMPLOYEES), company=Company.parse(args.company))
    sheet = AdvanceSheet(employees, period_start=args.start or "", period_end=args.end or "")
    for employee_id, value in parse_assignments(args.extra).items():
        sheet.set_extra(employee_id, other_advances=parse_number(value))
    for line in sheet.lines():
        print(f"{line.employee.name:<30} {line.base_advance:>10.2f} {line.other_advances:>10.2f} {line.total:>10.2f}")
    print(f"Total: {sheet.grand_total():.2f}")
    if args.export:
        path = export_advances(sheet, args.settings.export_dir, missing=args.settings.missing_value)
        print(f"Exported advances to {path}")


def cmd_export_roster(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    employees = store.read_all(EntityKind.EMPLOYEES)
    if not employees:
        print("No employees registered.")
        return
    path = export_roster(employees, args.settings.export_dir, missing=args.settings.missing_value)
    print(f"Exported {len(employees)} employees to {path}")


def cmd_summary(args: argparse.Namespace) -> None:
    store = store_from_args(args)
    print(format_summary(roster_summary(store.read_all(EntityKind.EMPLOYEES))))


def add_employee_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--company", choices=[c.value for c in Company])
    parser.add_argument("--cpf")
    parser.add_argument("--role")
    parser.add_argument("--admission", help="Admission date DD/MM/YYYY")
    parser.add_argument("--dismissal", help="Dismissal date DD/MM/YYYY")
    parser.add_argument("--birth", help="Birth date DD/MM/YYYY")
    parser.add_argument("--address")
    parser.add_argument("--city")
    parser.add_argument("--state")
    parser.add_argument("--postal-code", dest="postal_code")
    parser.add_argument("--phone")
    parser.add_argument("--father")
    parser.add_argument("--mother")
    parser.add_argument("--rg")
    parser.add_argument("--ctps")
    parser.add_argument("--pis")
    parser.add_argument("--voter-id", dest="voter_id")
    parser.add_argument("--salary")
    parser.add_argument("--accumulation", help="Role accumulation bonus")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Employee records and monthly payroll closing")
    parser.add_argument("--yes", action="store_true", help="Answer yes to confirmations")
    sub = parser.add_subparsers(dest="command", required=True)

    status = sub.add_parser("status", help="Show connectivity mode and collection sizes")
    status.set_defaults(func=cmd_status)

    reconnect = sub.add_parser("reconnect", help="Retry the remote mirror")
    reconnect.set_defaults(func=cmd_reconnect)

    employee = sub.add_parser("add-employee", help="Register an employee")
    employee.add_argument("name")
    add_employee_options(employee)
    employee.set_defaults(func=cmd_add_employee)

    edit = sub.add_parser("edit-employee", help="Edit a registered employee")
    edit.add_argument("id")
    edit.add_argument("--name")
    add_employee_options(edit)
    edit.set_defaults(func=cmd_edit_employee)

    listing = sub.add_parser("list-employees", help="List employees by name")
    listing.add_argument("--search")
    listing.add_argument("--company", choices=[c.value for c in Company])
    listing.set_defaults(func=cmd_list_employees)

    payroll = sub.add_parser("add-payroll", help="Enter one payroll record")
    payroll.add_argument("employee")
    payroll.add_argument("closing", nargs="?", help="Closing date DD/MM/YYYY (default: today)")
    payroll.add_argument("--set", action="append", metavar="FIELD=VALUE")
    payroll.set_defaults(func=cmd_add_payroll)

    history = sub.add_parser("history", help="Payroll history, newest first")
    history.set_defaults(func=cmd_history)

    close = sub.add_parser("close-month", help="Finalize the payroll of a company roster")
    close.add_argument("closing", help="Closing date DD/MM/YYYY")
    close.add_argument("--company", choices=[c.value for c in Company])
    close.add_argument("--prefill", action="store_true", help="Repeat each employee's latest record")
    close.add_argument("--set", action="append", metavar="EMPLOYEE:FIELD=VALUE")
    close.add_argument("--export", action="store_true")
    close.set_defaults(func=cmd_close_month)

    advances = sub.add_parser("advances", help="Compute the 40% advance sheet")
    advances.add_argument("--start")
    advances.add_argument("--end")
    advances.add_argument("--company", choices=[c.value for c in Company])
    advances.add_argument("--extra", action="append", metavar="EMPLOYEE=AMOUNT")
    advances.add_argument("--export", action="store_true")
    advances.set_defaults(func=cmd_advances)

    roster = sub.add_parser("export-roster", help="Export the employee roster to CSV")
    roster.set_defaults(func=cmd_export_roster)

    summary = sub.add_parser("summary", help="Roster salary summary")
    summary.set_defaults(func=cmd_summary)

    return parser


def main(argv: list[str] | None = None, settings: Settings | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.settings = settings or get_settings()
    configure_logging(args.settings.log_level)
    try:
        args.func(args)
    except (ValidationError, ConflictError) as exc:
        parser.exit(1, f"error: {exc.message}\n")
    except (PayrollError, argparse.ArgumentTypeError) as exc:
        parser.exit(1, f"error: {exc}\n")


if __name__ == "__main__":
    main()
