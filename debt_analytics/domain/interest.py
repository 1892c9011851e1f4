"""Interest model - actual vs. minimum-payment baseline interest, and forecasts"""

import logging
from datetime import date, datetime
from decimal import Decimal, Overflow
from typing import Iterable, List, Optional

from debt_analytics.domain.models import (
    AdjustmentPolicy,
    InterestForecast,
    InterestHistoryEntry,
    LedgerSnapshot,
    Transaction,
    TransactionType,
)
from debt_analytics.domain.aggregation import balance_at
from debt_analytics.utils.date_utils import (
    add_months,
    count_due_cycles,
    generate_month_range,
    month_end,
    month_key,
    month_label,
)
from debt_analytics.utils.money import ZERO, to_money

logger = logging.getLogger(__name__)

BASELINE_MAX_MONTHS = 600  # 50 years


def monthly_interest(balance: Decimal, annual_rate_percent: Decimal) -> Decimal:
    """One month of interest at APR/12 on the balance, rounded to cents"""
    if balance <= 0 or annual_rate_percent <= 0:
        return ZERO
    return to_money(balance * annual_rate_percent / 12 / 100)


def simulate_baseline_interest(
    opening_balance: Decimal,
    annual_rate_percent: Decimal,
    minimum_payment: Optional[Decimal],
    cycles: int,
    max_months: int = BASELINE_MAX_MONTHS,
) -> Decimal:
    """
    Interest that would have accrued paying only the minimum each cycle.

    Standard monthly amortisation: interest is charged on the outstanding
    balance, then the payment is applied. Only the part of the payment above
    that month's interest reduces principal, and the balance never grows, so
    an unset minimum payment accrues interest on a flat balance.

    The horizon is capped at max_months; an overflow part-way returns the
    interest accumulated so far.
    """
    payment = minimum_payment or ZERO
    balance = opening_balance
    total = ZERO

    for cycle in range(min(cycles, max_months)):
        if balance <= 0:
            break
        try:
            interest = monthly_interest(balance, annual_rate_percent)
            principal = max(payment - interest, ZERO)
            balance = max(balance - principal, ZERO)
            total += interest
        except Overflow:
            logger.warning("Baseline interest overflow, returning partial result", extra={"cycle": cycle})
            break

    return total


def actual_interest(transactions: Iterable[Transaction]) -> Decimal:
    """Sum of INTEREST entries observed in the ledger"""
    return sum((t.amount for t in transactions if t.type == TransactionType.INTEREST), ZERO)


def baseline_cycles(snapshot: LedgerSnapshot, as_of: date) -> int:
    account = snapshot.account
    created = account.created_at.date() if isinstance(account.created_at, datetime) else account.created_at
    return count_due_cycles(created, as_of, account.due_day)


def calculate_interest_saved(
    snapshot: LedgerSnapshot,
    as_of: date,
    max_months: int = BASELINE_MAX_MONTHS,
) -> Decimal:
    """
    Baseline (minimum-payment-only) interest minus interest actually charged.

    Floored at 0: paying more interest than the baseline is not reported as
    negative savings.
    """
    account = snapshot.account
    if account.annual_interest_rate <= 0:
        return to_money(ZERO)

    baseline = simulate_baseline_interest(
        snapshot.opening_balance,
        account.annual_interest_rate,
        account.minimum_payment,
        baseline_cycles(snapshot, as_of),
        max_months,
    )
    saved = baseline - actual_interest(snapshot.transactions)
    return to_money(max(saved, ZERO))


def interest_history(
    snapshot: LedgerSnapshot,
    start: date,
    end: date,
    adjustment_policy: AdjustmentPolicy = AdjustmentPolicy.SIGNED,
) -> List[InterestHistoryEntry]:
    """Per-month interest charged and estimated balance at month end (or `end` for the last month)"""
    interest_by_month = {}
    for txn in snapshot.transactions:
        if txn.type == TransactionType.INTEREST and start <= txn.transaction_date <= end:
            key = month_key(txn.transaction_date)
            interest_by_month[key] = interest_by_month.get(key, ZERO) + txn.amount

    history = []
    for year, month in generate_month_range(start, end):
        closing_day = min(month_end(year, month), end)
        history.append(
            InterestHistoryEntry(
                month=month_label(year, month),
                interest_amount=to_money(interest_by_month.get((year, month), ZERO)),
                balance=to_money(
                    balance_at(snapshot.opening_balance, snapshot.transactions, closing_day, adjustment_policy)
                ),
            )
        )
    return history


def average_monthly_interest(transactions: Iterable[Transaction], start: date, end: date) -> Decimal:
    """Mean interest across the months that actually had interest charged"""
    charged = [t for t in transactions if t.type == TransactionType.INTEREST and start <= t.transaction_date <= end]
    if not charged:
        return to_money(ZERO)
    months_covered = len({month_key(t.transaction_date) for t in charged})
    return to_money(sum((t.amount for t in charged), ZERO) / months_covered)


def build_interest_forecast(
    snapshot: LedgerSnapshot,
    as_of: date,
    months: int = 12,
    adjustment_policy: AdjustmentPolicy = AdjustmentPolicy.SIGNED,
) -> InterestForecast:
    """Interest history over the last `months`, next month's estimate, and the monthly average"""
    if months <= 0:
        raise ValueError("months must be greater than zero")

    start = add_months(as_of, -months)
    account = snapshot.account
    return InterestForecast(
        history=interest_history(snapshot, start, as_of, adjustment_policy),
        next_month_estimate=monthly_interest(account.current_balance, account.annual_interest_rate),
        average_monthly_interest=average_monthly_interest(snapshot.transactions, start, as_of),
    )
