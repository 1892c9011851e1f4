"""Unit tests for debt-free projection and payoff simulation"""

import pytest
from datetime import date
from decimal import Decimal
from debt_analytics.domain.models import ProjectionOutcome, TransactionType
from debt_analytics.domain.projection import (
    calculate_payoff_projection,
    calculate_payoff_scenarios,
    calculate_required_payment,
    current_trend_payment,
    project_debt_free_date,
    resolve_projection_payment,
)
from tests.factories import AS_OF, make_account, make_snapshot, make_txn


def test_projection_ceil_months():
    projection = project_debt_free_date(Decimal("500.00"), Decimal("4500.00"), date(2025, 6, 20))

    assert projection.outcome == ProjectionOutcome.PROJECTED
    assert projection.months_to_payoff == 9
    assert projection.projected_date == date(2026, 3, 20)


def test_projection_rounds_partial_month_up():
    projection = project_debt_free_date(Decimal("400.00"), Decimal("4500.00"), date(2025, 6, 20))
    assert projection.months_to_payoff == 12


@pytest.mark.parametrize("average", ["0", "0.00", "-10.00", "-5000.00"])
def test_projection_non_positive_trend(average):
    projection = project_debt_free_date(Decimal(average), Decimal("4500.00"), AS_OF)

    assert projection.outcome == ProjectionOutcome.NO_TREND
    assert projection.projected_date is None


def test_projection_too_far():
    projection = project_debt_free_date(Decimal("0.01"), Decimal("4500.00"), AS_OF)

    assert projection.outcome == ProjectionOutcome.TOO_FAR
    assert projection.projected_date is None


def test_projection_exactly_at_cap():
    projection = project_debt_free_date(Decimal("1.00"), Decimal("1200.00"), AS_OF)

    assert projection.outcome == ProjectionOutcome.PROJECTED
    assert projection.projected_date == date(2125, 6, 20)


def test_projection_zero_balance_is_due_now():
    projection = project_debt_free_date(Decimal("100.00"), Decimal("0.00"), AS_OF)
    assert projection.projected_date == AS_OF


def test_payoff_projection_zero_rate():
    projection = calculate_payoff_projection(Decimal("1000.00"), Decimal("0"), Decimal("300.00"))

    assert projection.status == "paid_off"
    assert projection.months == 4
    assert projection.total_interest == Decimal("0.00")
    assert projection.monthly_breakdown[-1].payment_amount == Decimal("100.00")
    assert projection.final_balance == Decimal("0.00")


def test_payoff_projection_with_interest():
    projection = calculate_payoff_projection(Decimal("1000.00"), Decimal("12"), Decimal("510.00"))

    # 10.00 interest on 1000.00, then 5.00 on the remaining 500.00
    assert projection.months == 2
    assert projection.total_interest == Decimal("15.00")
    assert projection.monthly_breakdown[1].payment_amount == Decimal("505.00")
    assert projection.monthly_breakdown[1].principal_paid == Decimal("500.00")


def test_payoff_projection_insufficient_payment():
    projection = calculate_payoff_projection(Decimal("5000.00"), Decimal("20"), Decimal("83.33"))

    assert projection.status == "insufficient_payment"
    assert projection.months is None
    assert projection.monthly_breakdown == []


def test_payoff_projection_capped():
    projection = calculate_payoff_projection(Decimal("100000.00"), Decimal("0"), Decimal("10.00"), max_months=24)

    assert projection.status == "capped"
    assert projection.months is None
    assert len(projection.monthly_breakdown) == 24
    assert projection.final_balance == Decimal("99760.00")


def test_payoff_projection_rejects_non_positive_payment():
    with pytest.raises(ValueError):
        calculate_payoff_projection(Decimal("1000.00"), Decimal("12"), Decimal("0"))


def test_current_trend_payment_uses_lookback():
    snapshot = make_snapshot(
        make_account(),
        [
            make_txn("900.00", TransactionType.PAYMENT, date(2025, 1, 5)),
            make_txn("200.00", TransactionType.PAYMENT, date(2025, 4, 10)),
            make_txn("300.00", TransactionType.PAYMENT, date(2025, 6, 10)),
            make_txn("75.00", TransactionType.CHARGE, date(2025, 6, 11)),
        ],
    )

    assert current_trend_payment(snapshot, AS_OF, lookback_months=3) == Decimal("250.00")


def test_resolve_projection_payment_falls_back_to_minimum():
    snapshot = make_snapshot(make_account(current_balance="5000.00", minimum_payment="150.00"))
    assert resolve_projection_payment(snapshot, AS_OF) == Decimal("150.00")


def test_resolve_projection_payment_without_basis():
    snapshot = make_snapshot(make_account(current_balance="5000.00", minimum_payment=None))
    assert resolve_projection_payment(snapshot, AS_OF) is None


def test_payoff_scenarios_order_and_extras():
    snapshot = make_snapshot(
        make_account(current_balance="4500.00"),
        [make_txn("500.00", TransactionType.PAYMENT, date(2025, 6, 10))],
    )

    scenarios = calculate_payoff_scenarios(snapshot, AS_OF)

    assert [s.name for s in scenarios] == [
        "Minimum Payment",
        "Current Trend",
        "Extra $50/month",
        "Extra $100/month",
        "Extra $200/month",
    ]
    assert [s.monthly_payment for s in scenarios[2:]] == [Decimal("550.00"), Decimal("600.00"), Decimal("700.00")]
    # Paying more never takes longer
    months = [s.months for s in scenarios[1:]]
    assert months == sorted(months, reverse=True)


def test_payoff_scenarios_without_payment_basis():
    snapshot = make_snapshot(make_account(current_balance="5000.00", minimum_payment=None))
    assert calculate_payoff_scenarios(snapshot, AS_OF) == []


def test_required_payment_zero_rate():
    assert calculate_required_payment(Decimal("1200.00"), Decimal("0"), 12) == Decimal("100.00")


def test_required_payment_annuity():
    # 1000 at 12% over 12 months: standard amortisation table value
    assert calculate_required_payment(Decimal("1000.00"), Decimal("12"), 12) == Decimal("88.85")


def test_required_payment_rejects_non_positive_target():
    with pytest.raises(ValueError):
        calculate_required_payment(Decimal("1000.00"), Decimal("12"), 0)
