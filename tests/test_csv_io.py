from datetime import date

from rhmaster.advances import AdvanceSheet
from rhmaster.batch import BatchSheet
from rhmaster.calculator import PayrollCalculator
from rhmaster.csv_io import export_advances, export_batch, export_roster, format_cell
from rhmaster.models import Company

from factories import OTHER_CPF, make_employee

TODAY = date(2024, 3, 5)


def read_lines(path):
    raw = path.read_bytes()
    assert raw.startswith(b"\xef\xbb\xbf")
    return raw[3:].decode("utf-8").split("\n")


def test_format_cell_uses_comma_decimals():
    assert format_cell(1234.5) == "1234,50"
    assert format_cell(0) == "0,00"
    assert format_cell(True) == "Yes"
    assert format_cell("text") == "text"


def test_export_roster(tmp_path):
    employees = [make_employee(id="a", name="Ana Lima", salary=3000.0, role_accumulation=150.0)]

    path = export_roster(employees, tmp_path, today=TODAY)

    assert path.name == "employees_05-03-2024.csv"
    lines = read_lines(path)
    assert lines[0].startswith("Name;Role;Admission date;Dismissal date")
    cells = lines[1].split(";")
    assert cells[0] == "Ana Lima"
    assert cells[3] == "Active"
    assert cells[4] == "N/A"
    assert cells[5] == "529.982.247-25"
    assert cells[-2:] == ["3000,00", "150,00"]


def test_export_batch_includes_net_pay(tmp_path):
    employees = [
        make_employee(id="a", company=Company.CAMPLUVAS, salary=3000.0),
        make_employee(id="b", company=Company.LOCATEX, cpf=OTHER_CPF, salary=4000.0),
    ]
    sheet = BatchSheet(employees, PayrollCalculator(), "05/02/2024", company=Company.LOCATEX)
    sheet.set_value("b", "transport_voucher", True)
    sheet.set_value("b", "overtime_50", 3)
    sheet.set_value("b", "loans", 400.0)

    path = export_batch(sheet, tmp_path, today=TODAY)

    assert path.name == "payroll_LOCATEX_05-03-2024.csv"
    lines = read_lines(path)
    assert len([line for line in lines if line]) == 2
    cells = lines[1].split(";")
    assert cells[0] == "LOCATEX"
    assert cells[11] == "3,00"
    assert cells[12] == "Yes"
    assert cells[-1] == "3600,00"


def test_export_advances_uses_sentinel_for_missing_period(tmp_path):
    sheet = AdvanceSheet([make_employee(id="a", salary=5000.0)])
    sheet.set_extra("a", other_advances=100.0, observations="extra")

    path = export_advances(sheet, tmp_path, missing="N/A", today=TODAY)

    assert path.name == "advances_05-03-2024.csv"
    cells = read_lines(path)[1].split(";")
    assert cells[4:] == ["2000,00", "100,00", "2100,00", "extra", "N/A", "N/A"]
