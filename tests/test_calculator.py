import pytest

from rhmaster.calculator import PayrollCalculator, absence_deduction, advance_entitlement
from rhmaster.models import AbsencePolicy, Adjustments

from factories import make_employee


def test_net_pay_without_adjustments_is_base_pay():
    employee = make_employee(salary=3000.0, role_accumulation=450.0)

    for policy in AbsencePolicy:
        assert PayrollCalculator(policy).net_pay(employee, Adjustments()) == 3450.0


def test_net_pay_adds_earnings_and_subtracts_deductions():
    employee = make_employee(salary=3000.0)
    adjustments = Adjustments(
        other_income=100,
        bonuses=200,
        basic_basket=150,
        meal_voucher=300,
        advances=1200,
        loans=100,
        other_discounts=10,
        pharmacy=20,
        supermarket=30,
        dental=40,
        medical=50,
        other_convenios=60,
    )

    result = PayrollCalculator(AbsencePolicy.AMOUNT).breakdown(employee, adjustments)

    assert result.earnings == 3750.0
    assert result.deductions == 1510.0
    assert result.net_pay == 2240.0


def test_overtime_and_transport_voucher_do_not_change_net_pay():
    employee = make_employee(salary=3000.0)
    adjustments = Adjustments(overtime_100=10, overtime_70=5, overtime_50=2, transport_voucher=True)

    assert PayrollCalculator().net_pay(employee, adjustments) == 3000.0


def test_absence_policies():
    assert absence_deduction(3000.0, 2, AbsencePolicy.PRORATED_DAYS) == 200.0
    assert absence_deduction(3000.0, 2, AbsencePolicy.AMOUNT) == 2


def test_calculator_applies_configured_absence_policy():
    employee = make_employee(salary=3000.0)
    adjustments = Adjustments(absences=3)

    assert PayrollCalculator(AbsencePolicy.PRORATED_DAYS).net_pay(employee, adjustments) == 2700.0
    assert PayrollCalculator(AbsencePolicy.AMOUNT).net_pay(employee, adjustments) == 2997.0
    assert PayrollCalculator("amount").absence_policy is AbsencePolicy.AMOUNT


def test_advance_entitlement():
    assert advance_entitlement(5000, 0, 0) == 2000.00
    assert advance_entitlement(5000, 500, 150) == 2350.0


def test_advance_entitlement_is_monotonic_in_salary():
    values = [advance_entitlement(salary) for salary in (0, 1000, 1500.5, 5000, 12000)]

    assert values == sorted(values)
    assert len(set(values)) == len(values)


def test_calculator_advance_uses_employee_base_pay():
    employee = make_employee(salary=2000.0, role_accumulation=500.0)

    assert PayrollCalculator().advance(employee, extra_advance=100) == pytest.approx(1100.0)
