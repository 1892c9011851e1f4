"""Unit tests for report assembly"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from debt_analytics.domain.aggregation import balance_at
from debt_analytics.domain.exceptions import NotFoundError
from debt_analytics.domain.ledger import LedgerReader
from debt_analytics.domain.models import (
    DebtFreeProjection,
    PortfolioProjectionPolicy,
    ProjectionOutcome,
    TransactionType,
)
from debt_analytics.domain.reports import (
    ReportOptions,
    build_account_summary,
    build_dashboard_overview,
    build_progress_summary,
    build_trend_analysis,
    compute_account_summary,
    compute_dashboard_overview,
    portfolio_debt_free_date,
)
from tests.factories import AS_OF, InMemoryLedgerSource, make_account, make_snapshot, make_txn


def _projected(day):
    return DebtFreeProjection(outcome=ProjectionOutcome.PROJECTED, projected_date=day)


NO_TREND = DebtFreeProjection(outcome=ProjectionOutcome.NO_TREND)


def test_new_account_without_history():
    """$5,000 at 20% APR, $150 minimum, nothing posted yet"""
    summary = build_account_summary(make_snapshot(make_account(current_balance="5000.00")), AS_OF)

    assert summary.analytics.total_reduction == Decimal("0.00")
    assert summary.analytics.progress_percentage == Decimal("0.0")
    assert summary.analytics.average_monthly_reduction == Decimal("0.00")
    assert summary.analytics.projected_debt_free_date is None
    assert summary.analytics.projection_outcome == ProjectionOutcome.NO_TREND
    assert summary.monthly_buckets == []


def test_first_payment_this_month():
    snapshot = make_snapshot(
        make_account(current_balance="4500.00"),
        [make_txn("500.00", TransactionType.PAYMENT, date(2025, 6, 10))],
    )

    analytics = build_account_summary(snapshot, AS_OF).analytics

    assert analytics.total_reduction == Decimal("500.00")
    assert analytics.progress_percentage == Decimal("10.0")
    assert analytics.average_monthly_reduction == Decimal("500.00")
    assert analytics.total_payments == Decimal("500.00")
    # ceil(4500 / 500) = 9 months out
    assert analytics.projected_debt_free_date == date(2026, 3, 20)


def test_charge_exceeding_payment_shows_as_debt_growth():
    snapshot = make_snapshot(
        make_account(opening_balance="1000.00", current_balance="1050.00"),
        [
            make_txn("150.00", TransactionType.PAYMENT, date(2025, 6, 5)),
            make_txn("200.00", TransactionType.CHARGE, date(2025, 6, 12)),
        ],
    )

    summary = build_account_summary(snapshot, AS_OF)
    overview = build_dashboard_overview([snapshot], AS_OF)

    assert summary.monthly_buckets[0].net_change == Decimal("-50.00")
    assert summary.analytics.total_reduction == Decimal("0.00")
    assert overview.trends.debt_change == Decimal("50.00")
    assert overview.trends.reduction_change == Decimal("-50.00")
    assert overview.trends.period == "30 days"


def test_zero_apr_account_saves_no_interest():
    snapshot = make_snapshot(
        make_account(current_balance="3000.00", annual_interest_rate="0.00", created_at=datetime(2024, 1, 1)),
        [make_txn("2000.00", TransactionType.PAYMENT, date(2024, 8, 1))],
    )

    assert build_account_summary(snapshot, AS_OF).analytics.interest_saved == Decimal("0.00")


def test_account_summary_is_deterministic():
    snapshot = make_snapshot(
        make_account(current_balance="4300.00", created_at=datetime(2025, 1, 1)),
        [
            make_txn("500.00", TransactionType.PAYMENT, date(2025, 2, 10)),
            make_txn("60.00", TransactionType.INTEREST, date(2025, 2, 28)),
            make_txn("240.00", TransactionType.PAYMENT, date(2025, 5, 10)),
        ],
    )

    first = build_account_summary(snapshot, AS_OF)
    second = build_account_summary(snapshot, AS_OF)

    assert first == second
    assert repr(first) == repr(second)


@pytest.mark.parametrize(
    "ledger",
    [
        [],
        [("CHARGE", "300.00")],
        [("PAYMENT", "100.00"), ("CHARGE", "900.00")],
        [("INTEREST", "80.00"), ("ADJUSTMENT", "-25.00")],
        [("PAYMENT", "4000.00")],
    ],
)
def test_adding_a_payment_never_lowers_reduction(ledger):
    opening = Decimal("5000.00")
    base = [make_txn(amount, TransactionType(kind), date(2025, 6, 5)) for kind, amount in ledger]
    extra = make_txn("250.00", TransactionType.PAYMENT, date(2025, 6, 15))

    def reduction(txns):
        current = balance_at(opening, txns, AS_OF)
        snapshot = make_snapshot(make_account(current_balance=str(current)), txns)
        return build_account_summary(snapshot, AS_OF).analytics.total_reduction

    assert reduction(base + [extra]) >= reduction(base)


@pytest.mark.parametrize(
    "opening,current",
    [("5000.00", "0.00"), ("5000.00", "7500.00"), ("0.00", "100.00"), ("0.00", "0.00"), ("0.03", "0.01")],
)
def test_progress_stays_within_bounds(opening, current):
    snapshot = make_snapshot(
        make_account(opening_balance=opening, current_balance=current),
        [make_txn("1.00", TransactionType.PAYMENT, date(2025, 6, 5))],
    )

    progress = build_progress_summary([snapshot], AS_OF)

    assert Decimal("0") <= progress.accounts[0].analytics.progress_percentage <= Decimal("100")
    assert Decimal("0") <= progress.overall_progress <= Decimal("100")


def test_portfolio_date_all_accounts_needs_every_projection():
    results = [
        (Decimal("100.00"), _projected(date(2026, 1, 1))),
        (Decimal("200.00"), _projected(date(2027, 1, 1))),
    ]
    assert portfolio_debt_free_date(results) == date(2027, 1, 1)
    assert portfolio_debt_free_date(results + [(Decimal("50.00"), NO_TREND)]) is None


def test_portfolio_date_ignores_paid_off_accounts():
    results = [
        (Decimal("100.00"), _projected(date(2026, 1, 1))),
        (Decimal("0.00"), NO_TREND),
    ]
    assert portfolio_debt_free_date(results) == date(2026, 1, 1)


def test_portfolio_date_soonest_account():
    results = [
        (Decimal("100.00"), _projected(date(2026, 1, 1))),
        (Decimal("200.00"), _projected(date(2025, 9, 1))),
        (Decimal("50.00"), NO_TREND),
    ]
    assert portfolio_debt_free_date(results, PortfolioProjectionPolicy.SOONEST_ACCOUNT) == date(2025, 9, 1)
    assert portfolio_debt_free_date(results, "soonest_account") == date(2025, 9, 1)


def test_dashboard_overview_totals():
    paying = make_snapshot(
        make_account(id="a1", current_balance="4500.00"),
        [make_txn("500.00", TransactionType.PAYMENT, date(2025, 6, 10), "a1")],
    )
    idle = make_snapshot(make_account(id="a2", opening_balance="1000.00", current_balance="1000.00"))
    closed = make_snapshot(
        make_account(id="a3", opening_balance="800.00", current_balance="0.00", is_active=False),
        [make_txn("800.00", TransactionType.PAYMENT, date(2025, 6, 1), "a3")],
    )

    overview = build_dashboard_overview([paying, idle, closed], AS_OF)

    assert overview.total_debt == Decimal("5500.00")
    assert overview.total_reduction == Decimal("500.00")
    # 500 / 6000
    assert overview.reduction_percentage == Decimal("8.3")
    assert overview.projected_debt_free_date is None
    assert overview.total_accounts == 3
    assert overview.active_accounts == 2
    assert len(overview.monthly_trend) == 12
    assert overview.monthly_trend[-1].total_balance == Decimal("5500.00")

    soonest = build_dashboard_overview(
        [paying, idle, closed],
        AS_OF,
        ReportOptions(portfolio_projection_policy=PortfolioProjectionPolicy.SOONEST_ACCOUNT),
    )
    assert soonest.projected_debt_free_date == date(2026, 3, 20)


def test_interest_failure_is_isolated_per_account():
    broken = make_snapshot(
        make_account(id="bad", annual_interest_rate="NaN", created_at=datetime(2025, 1, 1)),
    )
    healthy = make_snapshot(
        make_account(id="good", opening_balance="1000.00", current_balance="1000.00", created_at=datetime(2025, 1, 1)),
    )

    overview = build_dashboard_overview([broken, healthy], AS_OF)
    progress = build_progress_summary([broken, healthy], AS_OF)

    by_id = {a.account_id: a.analytics for a in progress.accounts}
    assert by_id["bad"].interest_saved is None
    assert by_id["good"].interest_saved is not None
    assert overview.interest_saved == by_id["good"].interest_saved
    assert overview.total_debt == Decimal("6000.00")


def test_trend_analysis():
    snapshot = make_snapshot(
        make_account(current_balance="4600.00", created_at=datetime(2025, 2, 1)),
        [
            make_txn("100.00", TransactionType.PAYMENT, date(2025, 3, 10)),
            make_txn("300.00", TransactionType.PAYMENT, date(2025, 5, 10)),
        ],
    )

    analysis = build_trend_analysis([snapshot], AS_OF)

    # mean 200, population stdev 100
    assert analysis.payment_consistency == Decimal("0.50")
    # 400 reduced over 4 months
    assert analysis.reduction_rate == Decimal("100.00")
    may = next(m for m in analysis.month_over_month if m.period == "May 2025")
    assert may.balance == Decimal("4600.00")
    assert may.change == Decimal("300.00")


def test_compute_account_summary_scoped_to_owner():
    source = InMemoryLedgerSource([make_account(id="a1", owner_id="alice")])
    reader = LedgerReader(source)

    assert compute_account_summary(reader, "a1", AS_OF, owner_id="alice").account.id == "a1"
    with pytest.raises(NotFoundError):
        compute_account_summary(reader, "a1", AS_OF, owner_id="mallory")


def test_compute_dashboard_overview_for_owner_without_accounts():
    reader = LedgerReader(InMemoryLedgerSource([]))

    overview = compute_dashboard_overview(reader, "nobody", AS_OF)

    assert overview.total_debt == Decimal("0.00")
    assert overview.reduction_percentage == Decimal("0.0")
    assert overview.projected_debt_free_date is None


def test_overview_for_a_past_date_describes_that_day():
    paying = make_snapshot(
        make_account(id="a1", current_balance="4500.00"),
        [make_txn("500.00", TransactionType.PAYMENT, date(2025, 6, 10), "a1")],
    )
    opened_later = make_snapshot(make_account(id="a2", created_at=datetime(2025, 6, 15)))

    overview = build_dashboard_overview([paying, opened_later], date(2025, 6, 5))

    assert overview.total_debt == Decimal("5000.00")
    assert overview.total_reduction == Decimal("0.00")
    assert overview.total_accounts == 1
    assert overview.monthly_trend[-1].total_balance == overview.total_debt
    assert overview.trends.debt_change == Decimal("0.00")


def test_account_summary_for_a_past_date_excludes_later_payments():
    snapshot = make_snapshot(
        make_account(current_balance="4500.00"),
        [make_txn("500.00", TransactionType.PAYMENT, date(2025, 6, 10))],
    )

    summary = build_account_summary(snapshot, date(2025, 6, 5))

    assert summary.account.current_balance == Decimal("5000.00")
    assert summary.analytics.total_payments == Decimal("0.00")
    assert summary.monthly_buckets == []


def test_overview_exposes_per_account_analytics():
    broken = make_snapshot(
        make_account(id="bad", annual_interest_rate="NaN", created_at=datetime(2025, 1, 1)),
    )
    healthy = make_snapshot(make_account(id="good", created_at=datetime(2025, 1, 1)))

    overview = build_dashboard_overview([broken, healthy], AS_OF)

    assert len(overview.account_analytics) == 2
    assert [a.interest_saved is None for a in overview.account_analytics] == [True, False]


def test_monthly_trend_measures_new_accounts_from_opening_balance():
    established = make_snapshot(
        make_account(id="a1", current_balance="900.00", opening_balance="1000.00", created_at=datetime(2024, 1, 1)),
        [make_txn("100.00", TransactionType.PAYMENT, date(2025, 5, 10), "a1")],
    )
    opened_in_may = make_snapshot(
        make_account(id="a2", current_balance="4800.00", created_at=datetime(2025, 5, 2)),
        [make_txn("200.00", TransactionType.PAYMENT, date(2025, 5, 20), "a2")],
    )

    overview = build_dashboard_overview([established, opened_in_may], AS_OF)
    may = next(p for p in overview.monthly_trend if p.month == "May 2025")

    assert may.total_balance == Decimal("5700.00")
    # 100 paid on a1 plus 200 paid on a2 since it opened at 5000
    assert may.reduction == Decimal("300.00")
    assert all(p.reduction >= 0 for p in overview.monthly_trend)

    analysis = build_trend_analysis([established, opened_in_may], AS_OF)
    may_change = next(m for m in analysis.month_over_month if m.period == "May 2025")
    assert may_change.change == Decimal("300.00")
