from rhmaster.filters import filter_employees
from rhmaster.models import Company
from rhmaster.views import format_history, roster_summary

from factories import make_employee, make_record


def build_roster():
    return [
        make_employee(id="a", name="Ana Lima", company=Company.CAMPLUVAS, salary=3000.0),
        make_employee(id="b", name="Bruno Reis", company=Company.LOCATEX, salary=4500.0),
        make_employee(id="c", name="Carla Anaya", company=Company.LOCATEX, salary=2000.0),
    ]


def test_filter_by_name_fragment_and_company():
    roster = build_roster()

    assert [e.id for e in filter_employees(roster, search="ana")] == ["a", "c"]
    assert [e.id for e in filter_employees(roster, company=Company.LOCATEX)] == ["b", "c"]
    assert [e.id for e in filter_employees(roster, search="ANA", company=Company.LOCATEX)] == ["c"]
    assert len(filter_employees(roster)) == 3


def test_roster_summary():
    summary = roster_summary(build_roster(), top=2)

    assert summary.headcount == 3
    assert summary.total_salaries == 9500.0
    assert summary.average_salary == 3166.67
    assert summary.top_salaries == [("Bruno", 4500.0), ("Ana", 3000.0)]


def test_roster_summary_empty():
    summary = roster_summary([])

    assert summary.headcount == 0
    assert summary.average_salary == 0.0


def test_history_shows_placeholder_for_unknown_employee():
    employee = build_roster()[0]
    entries = [
        (make_record("a", "05/01/2024"), employee),
        (make_record("ghost", "05/01/2024"), None),
    ]

    lines = format_history(entries).splitlines()

    assert lines[1].startswith("CAMPLUVAS")
    assert "Ana Lima" in lines[1]
    assert lines[2].startswith("N/A")
    assert "---" in lines[2]


def test_history_empty():
    assert "No records found." in format_history([])
