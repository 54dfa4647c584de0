from rhmaster.codec import (
    adjustments_from_form,
    employee_from_form,
    employee_from_snapshot,
    employee_from_storage,
    employee_to_snapshot,
    employee_to_storage,
    from_iso_date,
    record_from_storage,
    record_to_storage,
    to_iso_date,
)
from rhmaster.models import Company

from factories import make_employee, make_record


def test_date_conversion_round_trips():
    for value in ("05/03/2024", "31/12/1999", "01/01/2000"):
        assert from_iso_date(to_iso_date(value)) == value


def test_date_conversion_pads_segments():
    assert to_iso_date("5/3/2024") == "2024-03-05"


def test_malformed_dates_degrade_to_empty():
    assert to_iso_date("") is None
    assert to_iso_date(None) is None
    assert to_iso_date("05-03-2024") is None
    assert to_iso_date("05/03") is None
    assert from_iso_date(None) == ""
    assert from_iso_date("2024/03/05") == ""


def test_semantically_invalid_date_passes_through_without_error():
    assert to_iso_date("31/13/2024") == "2024-13-31"
    assert from_iso_date("2024-13-31") == "31/13/2024"


def test_from_iso_date_ignores_time_part():
    assert from_iso_date("2024-03-05T10:00:00+00:00") == "05/03/2024"


def test_employee_storage_row_uses_column_names_and_iso_dates():
    employee = make_employee(id="e1", postal_code="01000-000", role_accumulation=250.5)

    row = employee_to_storage(employee)

    assert row["cep"] == "01000-000"
    assert row["admission_date"] == "2022-02-10"
    assert row["dismissal_date"] is None
    assert row["salary"] == "3000.0"
    assert row["role_accumulation"] == "250.5"
    assert row["company"] == "CAMPLUVAS"
    assert employee_from_storage(row) == employee


def test_employee_from_storage_defaults_missing_values():
    employee = employee_from_storage({"id": "x", "name": "Ana Lima", "salary": None, "company": ""})

    assert employee.salary == 0.0
    assert employee.role_accumulation == 0.0
    assert employee.company is None
    assert employee.cpf == ""


def test_employee_from_storage_leaves_unknown_company_unset():
    employee = employee_from_storage({"id": "x", "name": "Joao", "company": "ACME"})

    assert employee.company is None
    assert employee.name == "Joao"


def test_record_storage_round_trip():
    record = make_record("e1", "15/12/2023", record_id="r1", bonuses=100.0, transport_voucher=True, overtime_50=4.0)

    row = record_to_storage(record)

    assert row["vt"] is True
    assert row["ot50"] == "4.0"
    assert row["closing_date"] == "2023-12-15"
    assert record_from_storage(row) == record


def test_record_from_storage_defaults_missing_numbers_and_flag():
    record = record_from_storage({"id": "r", "employee_id": "e", "closing_date": "2024-01-05"})

    assert record.adjustments.pharmacy == 0.0
    assert record.adjustments.transport_voucher is False
    assert record.adjustments.observations == ""


def test_snapshot_round_trip_keeps_company():
    employee = make_employee(id="e1", company=Company.LOCATEX)

    assert employee_from_snapshot(employee_to_snapshot(employee)) == employee


def test_form_input_is_coerced():
    employee = employee_from_form({"name": " Ana Lima ", "company": "LOCATEX", "salary": "2.500,75", "role_accumulation": "x"})
    adjustments = adjustments_from_form({"bonuses": "150,5", "transport_voucher": "on", "observations": "late"})

    assert employee.name == "Ana Lima"
    assert employee.company is Company.LOCATEX
    assert employee.salary == 2500.75
    assert employee.role_accumulation == 0.0
    assert adjustments.bonuses == 150.5
    assert adjustments.transport_voucher is True
    assert adjustments.observations == "late"
