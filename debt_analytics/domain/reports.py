"""Report assembly - per-account summaries and portfolio dashboard metrics"""

import logging
import statistics
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from debt_analytics.domain.models import (
    AccountAnalytics,
    AccountProgress,
    AccountSummary,
    AdjustmentPolicy,
    DashboardOverview,
    DebtFreeProjection,
    LedgerSnapshot,
    MonthlyBucket,
    MonthlyTrendPoint,
    MonthOverMonth,
    PortfolioProjectionPolicy,
    ProgressSummary,
    TransactionType,
    TrendAnalysis,
    TrendSummary,
)
from debt_analytics.domain.ledger import LedgerReader, snapshot_as_of
from debt_analytics.domain.aggregation import (
    average_monthly_reduction,
    balance_at,
    monthly_buckets,
    months_elapsed,
    progress_percentage,
    summarize_transactions,
    total_reduction,
    window_reduction,
)
from debt_analytics.domain.interest import BASELINE_MAX_MONTHS, calculate_interest_saved
from debt_analytics.domain.projection import PROJECTION_MAX_MONTHS, project_debt_free_date
from debt_analytics.utils.date_utils import add_months, generate_month_range, month_end, month_label
from debt_analytics.utils.money import HUNDRED, ZERO, clamp, percentage, to_money, to_percent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportOptions:
    """Tunables for one report run, passed explicitly into every entry point"""

    trend_window_days: int = 30
    adjustment_policy: AdjustmentPolicy = AdjustmentPolicy.SIGNED
    portfolio_projection_policy: PortfolioProjectionPolicy = PortfolioProjectionPolicy.ALL_ACCOUNTS
    baseline_max_months: int = BASELINE_MAX_MONTHS
    projection_max_months: int = PROJECTION_MAX_MONTHS
    trend_lookback_months: int = 3
    monthly_trend_months: int = 12


@dataclass
class _AccountResult:
    snapshot: LedgerSnapshot
    analytics: AccountAnalytics
    projection: DebtFreeProjection
    reduction: Decimal
    average_reduction: Decimal


# Portfolio projection policies. Each receives (current balance, projection)
# pairs for the outstanding accounts only; zero-balance accounts are already
# debt-free and never hold the portfolio back.

def _latest_of_all_accounts(projections: Sequence[Tuple[Decimal, DebtFreeProjection]]) -> Optional[date]:
    dates = []
    for _, projection in projections:
        if projection.projected_date is None:
            return None
        dates.append(projection.projected_date)
    return max(dates) if dates else None


def _soonest_account(projections: Sequence[Tuple[Decimal, DebtFreeProjection]]) -> Optional[date]:
    dates = [p.projected_date for _, p in projections if p.projected_date is not None]
    return min(dates) if dates else None


PORTFOLIO_PROJECTION_POLICIES: Dict[
    PortfolioProjectionPolicy, Callable[[Sequence[Tuple[Decimal, DebtFreeProjection]]], Optional[date]]
] = {
    PortfolioProjectionPolicy.ALL_ACCOUNTS: _latest_of_all_accounts,
    PortfolioProjectionPolicy.SOONEST_ACCOUNT: _soonest_account,
}


def portfolio_debt_free_date(
    results: Sequence[Tuple[Decimal, DebtFreeProjection]],
    policy: PortfolioProjectionPolicy = PortfolioProjectionPolicy.ALL_ACCOUNTS,
) -> Optional[date]:
    outstanding = [(balance, projection) for balance, projection in results if balance > 0]
    return PORTFOLIO_PROJECTION_POLICIES[PortfolioProjectionPolicy(policy)](outstanding)


def _interest_saved_or_none(snapshot: LedgerSnapshot, as_of: date, options: ReportOptions) -> Optional[Decimal]:
    """Interest savings for one account; a failure marks it unavailable instead of failing the report"""
    try:
        return calculate_interest_saved(snapshot, as_of, options.baseline_max_months)
    except ArithmeticError as e:
        logger.warning(
            f"Interest model failed: {e}",
            extra={"account_id": snapshot.account.id, "step": "interest_saved"},
        )
        return None


def _analyze(snapshot: LedgerSnapshot, as_of: date, options: ReportOptions) -> _AccountResult:
    account = snapshot.account
    totals = summarize_transactions(snapshot.transactions, options.adjustment_policy)
    reduction = total_reduction(snapshot.opening_balance, account.current_balance)
    average = average_monthly_reduction(reduction, account.created_at, as_of) if totals.transaction_count else ZERO
    projection = project_debt_free_date(average, account.current_balance, as_of, options.projection_max_months)

    analytics = AccountAnalytics(
        total_reduction=to_money(reduction),
        progress_percentage=to_percent(progress_percentage(reduction, snapshot.opening_balance)),
        average_monthly_reduction=to_money(average),
        total_payments=to_money(totals.total_payments),
        total_charges=to_money(totals.total_charges),
        total_interest=to_money(totals.total_interest),
        interest_saved=_interest_saved_or_none(snapshot, as_of, options),
        projected_debt_free_date=projection.projected_date,
        projection_outcome=projection.outcome,
    )
    return _AccountResult(
        snapshot=snapshot,
        analytics=analytics,
        projection=projection,
        reduction=reduction,
        average_reduction=average,
    )


def build_account_summary(
    snapshot: LedgerSnapshot,
    as_of: date,
    options: ReportOptions = ReportOptions(),
) -> AccountSummary:
    """Analytics and monthly buckets for a single account snapshot"""
    snapshot = snapshot_as_of(snapshot, as_of, options.adjustment_policy)
    result = _analyze(snapshot, as_of, options)
    return AccountSummary(
        account=snapshot.account,
        opening_balance=to_money(snapshot.opening_balance),
        analytics=result.analytics,
        monthly_buckets=[
            _rounded_bucket(bucket)
            for bucket in monthly_buckets(
                snapshot.account.id,
                snapshot.transactions,
                snapshot.opening_balance,
                options.adjustment_policy,
            )
        ],
    )


def _rounded_bucket(bucket: MonthlyBucket) -> MonthlyBucket:
    return replace(
        bucket,
        total_payments=to_money(bucket.total_payments),
        total_charges=to_money(bucket.total_charges),
        total_adjustments=to_money(bucket.total_adjustments),
        total_interest=to_money(bucket.total_interest),
        net_change=to_money(bucket.net_change),
        ending_balance_estimate=to_money(bucket.ending_balance_estimate),
    )


def _trend_summary(snapshots: Sequence[LedgerSnapshot], as_of: date, options: ReportOptions) -> TrendSummary:
    """
    Compare the current reporting window with the one before it.

    debt_change is the estimated total balance at as_of minus the same total
    one window earlier (positive means debt grew). reduction_change is the
    net reduction inside the current window minus that of the previous one.
    """
    window = timedelta(days=options.trend_window_days)
    previous_end = as_of - window
    previous_start = previous_end - window

    debt_change = ZERO
    current_reduction = ZERO
    previous_reduction = ZERO
    for snapshot in snapshots:
        txns = snapshot.transactions
        policy = options.adjustment_policy
        debt_change += balance_at(snapshot.opening_balance, txns, as_of, policy) - balance_at(
            snapshot.opening_balance, txns, previous_end, policy
        )
        current_reduction += window_reduction(txns, previous_end, as_of, policy)
        previous_reduction += window_reduction(txns, previous_start, previous_end, policy)

    return TrendSummary(
        debt_change=to_money(debt_change),
        reduction_change=to_money(current_reduction - previous_reduction),
        period=f"{options.trend_window_days} days",
    )


def _created_on(snapshot: LedgerSnapshot) -> date:
    created = snapshot.account.created_at
    return created.date() if isinstance(created, datetime) else created


def _monthly_trend(
    snapshots: Sequence[LedgerSnapshot],
    as_of: date,
    months: int,
    adjustment_policy: AdjustmentPolicy,
) -> List[MonthlyTrendPoint]:
    """
    Estimated month-end portfolio balance over the last `months` months.

    reduction compares each account with its balance at the prior month end.
    An account opened during the month is compared with its opening balance,
    so opening it does not count as negative progress.
    """
    openings = {s.account.id: s.opening_balance for s in snapshots}
    points = []
    previous: Optional[Dict[str, Decimal]] = None
    for year, month in generate_month_range(add_months(as_of, -(months - 1)), as_of):
        closing_day = min(month_end(year, month), as_of)
        balances = {
            s.account.id: balance_at(s.opening_balance, s.transactions, closing_day, adjustment_policy)
            for s in snapshots
            if _created_on(s) <= closing_day
        }
        reduction = ZERO
        if previous is not None:
            reduction = sum(
                (previous.get(account_id, openings[account_id]) - balance for account_id, balance in balances.items()),
                ZERO,
            )
        points.append(
            MonthlyTrendPoint(
                month=month_label(year, month),
                total_balance=to_money(sum(balances.values(), ZERO)),
                reduction=to_money(reduction),
            )
        )
        previous = balances
    return points


def _portfolio_as_of(
    snapshots: Sequence[LedgerSnapshot],
    as_of: date,
    options: ReportOptions,
) -> List[LedgerSnapshot]:
    """Accounts that existed on as_of, each rewound to that day"""
    return [
        snapshot_as_of(s, as_of, options.adjustment_policy)
        for s in snapshots
        if _created_on(s) <= as_of
    ]


def build_dashboard_overview(
    snapshots: Sequence[LedgerSnapshot],
    as_of: date,
    options: ReportOptions = ReportOptions(),
) -> DashboardOverview:
    """Portfolio metrics across the owner's active accounts"""
    snapshots = _portfolio_as_of(snapshots, as_of, options)
    active = [s for s in snapshots if s.account.is_active]
    results = [_analyze(s, as_of, options) for s in active]

    opening_total = sum((s.opening_balance for s in active), ZERO)
    reduction_total = sum((r.reduction for r in results), ZERO)
    saved = [r.analytics.interest_saved for r in results if r.analytics.interest_saved is not None]
    if len(saved) < len(results):
        logger.warning(
            "Interest savings unavailable for some accounts",
            extra={"unavailable_accounts": len(results) - len(saved)},
        )

    return DashboardOverview(
        total_debt=to_money(sum((s.account.current_balance for s in active), ZERO)),
        total_reduction=to_money(reduction_total),
        interest_saved=to_money(sum(saved, ZERO)),
        reduction_percentage=to_percent(clamp(percentage(reduction_total, opening_total), ZERO, HUNDRED)),
        projected_debt_free_date=portfolio_debt_free_date(
            [(r.snapshot.account.current_balance, r.projection) for r in results],
            options.portfolio_projection_policy,
        ),
        trends=_trend_summary(active, as_of, options),
        average_monthly_reduction=to_money(sum((r.average_reduction for r in results), ZERO)),
        total_interest_paid=to_money(sum((r.analytics.total_interest for r in results), ZERO)),
        total_accounts=len(snapshots),
        active_accounts=len(active),
        monthly_trend=_monthly_trend(active, as_of, options.monthly_trend_months, options.adjustment_policy),
        account_analytics=[r.analytics for r in results],
    )


def build_progress_summary(
    snapshots: Sequence[LedgerSnapshot],
    as_of: date,
    options: ReportOptions = ReportOptions(),
) -> ProgressSummary:
    """Per-account analytics for every owned account plus overall progress"""
    snapshots = _portfolio_as_of(snapshots, as_of, options)
    accounts = []
    for snapshot in snapshots:
        result = _analyze(snapshot, as_of, options)
        accounts.append(
            AccountProgress(
                account_id=snapshot.account.id,
                name=snapshot.account.name,
                account_type=snapshot.account.account_type,
                is_active=snapshot.account.is_active,
                current_balance=to_money(snapshot.account.current_balance),
                opening_balance=to_money(snapshot.opening_balance),
                analytics=result.analytics,
            )
        )

    current_total = sum((s.account.current_balance for s in snapshots), ZERO)
    opening_total = sum((s.opening_balance for s in snapshots), ZERO)
    overall = clamp(percentage(opening_total - current_total, opening_total), ZERO, HUNDRED)
    return ProgressSummary(
        overall_progress=to_percent(overall),
        total_current_debt=to_money(current_total),
        total_opening_debt=to_money(opening_total),
        accounts=accounts,
    )


def build_trend_analysis(
    snapshots: Sequence[LedgerSnapshot],
    as_of: date,
    options: ReportOptions = ReportOptions(),
) -> TrendAnalysis:
    """Payment consistency, reduction rate and month-over-month balances"""
    snapshots = _portfolio_as_of(snapshots, as_of, options)
    payments = [t.amount for s in snapshots for t in s.transactions if t.type == TransactionType.PAYMENT]
    consistency = ZERO
    if len(payments) > 1:
        mean = statistics.mean(payments)
        variation = min(Decimal(1), statistics.pstdev(payments) / mean) if mean > 0 else Decimal(1)
        consistency = (1 - variation).quantize(Decimal("0.01"))

    reduction_rate = ZERO
    if snapshots:
        net_reduction = sum((s.opening_balance - s.account.current_balance for s in snapshots), ZERO)
        oldest = min(_created_on(s) for s in snapshots)
        reduction_rate = net_reduction / months_elapsed(oldest, as_of)

    comparison = []
    previous: Optional[MonthlyTrendPoint] = None
    for point in _monthly_trend(snapshots, as_of, options.monthly_trend_months + 1, options.adjustment_policy):
        if previous is None:
            change, change_pct = ZERO, ZERO
        else:
            change = point.reduction
            change_pct = percentage(change, previous.total_balance)
        comparison.append(
            MonthOverMonth(
                period=point.month,
                balance=point.total_balance,
                change=to_money(change),
                change_percentage=to_percent(change_pct),
            )
        )
        previous = point

    return TrendAnalysis(
        payment_consistency=consistency,
        reduction_rate=to_money(reduction_rate),
        month_over_month=comparison,
    )


def compute_account_summary(
    reader: LedgerReader,
    account_id: str,
    as_of: date,
    owner_id: Optional[str] = None,
    options: ReportOptions = ReportOptions(),
    read_at: Optional[datetime] = None,
) -> AccountSummary:
    """Read one account snapshot and summarise it"""
    snapshot = reader.read_account(account_id, owner_id, read_at)
    return build_account_summary(snapshot, as_of, options)


def compute_dashboard_overview(
    reader: LedgerReader,
    owner_id: str,
    as_of: date,
    options: ReportOptions = ReportOptions(),
    read_at: Optional[datetime] = None,
) -> DashboardOverview:
    return build_dashboard_overview(reader.read_portfolio(owner_id, read_at), as_of, options)


def compute_progress_summary(
    reader: LedgerReader,
    owner_id: str,
    as_of: date,
    options: ReportOptions = ReportOptions(),
    read_at: Optional[datetime] = None,
) -> ProgressSummary:
    return build_progress_summary(reader.read_portfolio(owner_id, read_at), as_of, options)


def compute_trend_analysis(
    reader: LedgerReader,
    owner_id: str,
    as_of: date,
    options: ReportOptions = ReportOptions(),
    read_at: Optional[datetime] = None,
) -> TrendAnalysis:
    return build_trend_analysis(reader.read_portfolio(owner_id, read_at), as_of, options)
