import pytest

from rhmaster.codec import employee_from_storage, employee_to_storage, record_from_storage, record_to_storage
from rhmaster.errors import ConflictError, ConnectivityError

from factories import OTHER_CPF, make_employee, make_record


def test_ping_unreachable_database_raises_connectivity_error(unreachable_remote):
    with pytest.raises(ConnectivityError):
        unreachable_remote.ping()


def test_employee_round_trips_through_database(remote):
    employee = make_employee(id="e1", birth_date="01/07/1985", postal_code="01000-000", role_accumulation=320.5)

    remote.insert_employee(employee_to_storage(employee))

    [row] = remote.fetch_employees()
    assert row["admission_date"] == "2022-02-10"
    assert row["dismissal_date"] is None
    assert employee_from_storage(row) == employee


def test_record_round_trips_through_database(remote):
    record = make_record("e1", "05/01/2024", record_id="r1", meal_voucher=420.0, transport_voucher=True, absences=2.0)

    remote.insert_records([record_to_storage(record)])

    [row] = remote.fetch_records()
    assert record_from_storage(row) == record


def test_duplicate_cpf_raises_conflict(remote):
    remote.insert_employee(employee_to_storage(make_employee(id="e1")))

    with pytest.raises(ConflictError) as excinfo:
        remote.insert_employee(employee_to_storage(make_employee(id="e2", name="Other Person")))

    assert excinfo.value.field == "cpf"
    assert "CPF" in excinfo.value.message

    assert [row["id"] for row in remote.fetch_employees()] == ["e1"]


def test_batch_insert_is_atomic(remote):
    remote.insert_records([record_to_storage(make_record("e1", "05/01/2024", record_id="r1"))])
    rows = [
        record_to_storage(make_record("e2", "05/02/2024", record_id="r2")),
        record_to_storage(make_record("e1", "05/02/2024", record_id="r1")),
    ]

    with pytest.raises(ConflictError) as excinfo:
        remote.insert_records(rows)

    assert excinfo.value.field == "id"
    assert "CPF" not in excinfo.value.message

    assert [row["id"] for row in remote.fetch_records()] == ["r1"]


def test_update_merges_by_id(remote):
    remote.insert_employee(employee_to_storage(make_employee(id="e1")))
    updated = make_employee(id="e1", cpf=OTHER_CPF, name="Maria S. Souza")

    remote.update_employee(employee_to_storage(updated))

    assert employee_from_storage(remote.fetch_employees()[0]) == updated
