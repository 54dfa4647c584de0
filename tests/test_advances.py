from rhmaster.advances import AdvanceSheet

from factories import OTHER_CPF, make_employee


def build_sheet():
    employees = [
        make_employee(id="a", salary=5000.0),
        make_employee(id="b", cpf=OTHER_CPF, salary=2000.0, role_accumulation=500.0),
    ]
    return AdvanceSheet(employees, period_start="01/03/2024", period_end="15/03/2024")


def test_lines_default_to_forty_percent():
    sheet = build_sheet()

    lines = {line.employee.id: line for line in sheet.lines()}

    assert lines["a"].base_advance == 2000.0
    assert lines["a"].total == 2000.0
    assert lines["b"].base_advance == 1000.0


def test_extra_advance_adds_to_total():
    sheet = build_sheet()
    sheet.set_extra("b", other_advances=150.0, observations="pharmacy")

    line = sheet.line_for(sheet.employees[1])

    assert line.other_advances == 150.0
    assert line.total == 1150.0
    assert line.observations == "pharmacy"
    assert sheet.grand_total() == 3150.0
