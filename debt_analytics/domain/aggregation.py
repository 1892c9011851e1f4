"""Ledger aggregation - type totals, monthly buckets and reduction metrics"""

from collections import OrderedDict
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence

from debt_analytics.domain.models import (
    AdjustmentPolicy,
    LedgerTotals,
    MonthlyBucket,
    Transaction,
    TransactionType,
)
from debt_analytics.domain.exceptions import InvalidLedgerStateError
from debt_analytics.utils.date_utils import month_key, months_between
from debt_analytics.utils.money import HUNDRED, clamp, percentage

ZERO = Decimal(0)


def balance_delta(txn: Transaction, adjustment_policy: AdjustmentPolicy = AdjustmentPolicy.SIGNED) -> Decimal:
    """
    Signed effect of one transaction on the outstanding balance.

    PAYMENT lowers the balance; CHARGE and INTEREST raise it. ADJUSTMENT follows
    the configured policy: SIGNED takes the stored amount at face value
    (positive raises the balance), INCREASE/DECREASE force the direction.
    """
    if txn.type == TransactionType.PAYMENT:
        return -txn.amount
    elif txn.type == TransactionType.CHARGE:
        return txn.amount
    elif txn.type == TransactionType.INTEREST:
        return txn.amount
    elif txn.type == TransactionType.ADJUSTMENT:
        if adjustment_policy == AdjustmentPolicy.SIGNED:
            return txn.amount
        elif adjustment_policy == AdjustmentPolicy.INCREASE:
            return abs(txn.amount)
        elif adjustment_policy == AdjustmentPolicy.DECREASE:
            return -abs(txn.amount)
        raise InvalidLedgerStateError(f"Unknown adjustment policy: {adjustment_policy!r}")
    raise InvalidLedgerStateError(f"Unhandled transaction type {txn.type!r} on {txn.id}")


def summarize_transactions(
    transactions: Iterable[Transaction],
    adjustment_policy: AdjustmentPolicy = AdjustmentPolicy.SIGNED,
) -> LedgerTotals:
    """
    Sum amounts per transaction type.

    total_adjustments is the signed balance effect of adjustments, so it can
    be negative; the other totals are plain sums of stored amounts.
    """
    payments = charges = adjustments = interest = ZERO
    count = 0
    for txn in transactions:
        count += 1
        delta = balance_delta(txn, adjustment_policy)
        if txn.type == TransactionType.PAYMENT:
            payments += txn.amount
        elif txn.type == TransactionType.CHARGE:
            charges += txn.amount
        elif txn.type == TransactionType.INTEREST:
            interest += txn.amount
        else:
            adjustments += delta

    return LedgerTotals(
        total_payments=payments,
        total_charges=charges,
        total_adjustments=adjustments,
        total_interest=interest,
        transaction_count=count,
    )


def net_change(
    transactions: Iterable[Transaction],
    adjustment_policy: AdjustmentPolicy = AdjustmentPolicy.SIGNED,
) -> Decimal:
    """payments - charges - interest - adjustment effect; positive means debt went down"""
    return -sum((balance_delta(t, adjustment_policy) for t in transactions), ZERO)


def monthly_buckets(
    account_id: str,
    transactions: Sequence[Transaction],
    opening_balance: Decimal,
    adjustment_policy: AdjustmentPolicy = AdjustmentPolicy.SIGNED,
) -> List[MonthlyBucket]:
    """
    Group an ordered ledger by calendar month of transaction_date.

    ending_balance_estimate replays the ledger forward from the opening
    balance; it can drift from the stored current balance when the CRUD
    layer edits balances without a matching transaction.
    """
    grouped: Dict[tuple[int, int], List[Transaction]] = OrderedDict()
    for txn in sorted(transactions, key=lambda t: (t.transaction_date, t.created_at)):
        grouped.setdefault(month_key(txn.transaction_date), []).append(txn)

    buckets = []
    running_balance = opening_balance
    for (year, month), txns in grouped.items():
        totals = summarize_transactions(txns, adjustment_policy)
        change = net_change(txns, adjustment_policy)
        running_balance -= change
        buckets.append(
            MonthlyBucket(
                account_id=account_id,
                year=year,
                month=month,
                total_payments=totals.total_payments,
                total_charges=totals.total_charges,
                total_adjustments=totals.total_adjustments,
                total_interest=totals.total_interest,
                net_change=change,
                ending_balance_estimate=running_balance,
            )
        )
    return buckets


def balance_at(
    opening_balance: Decimal,
    transactions: Iterable[Transaction],
    day: date,
    adjustment_policy: AdjustmentPolicy = AdjustmentPolicy.SIGNED,
) -> Decimal:
    """Estimated balance at the end of `day`, replaying the ledger from the opening balance"""
    return opening_balance + sum(
        (balance_delta(t, adjustment_policy) for t in transactions if t.transaction_date <= day),
        ZERO,
    )


def window_reduction(
    transactions: Iterable[Transaction],
    start: date,
    end: date,
    adjustment_policy: AdjustmentPolicy = AdjustmentPolicy.SIGNED,
) -> Decimal:
    """Net reduction from transactions dated in (start, end]"""
    return net_change(
        (t for t in transactions if start < t.transaction_date <= end),
        adjustment_policy,
    )


def total_reduction(opening_balance: Decimal, current_balance: Decimal) -> Decimal:
    """opening - current, clamped at 0 (growth is reported through trends instead)"""
    return max(opening_balance - current_balance, ZERO)


def progress_percentage(reduction: Decimal, opening_balance: Decimal) -> Decimal:
    """Full-precision percent of the opening balance paid down, within [0, 100]"""
    if opening_balance <= 0:
        return ZERO
    return clamp(percentage(reduction, opening_balance), ZERO, HUNDRED)


def months_elapsed(created_at: datetime | date, as_of: date) -> int:
    """Calendar months since the account was created, at least 1"""
    start = created_at.date() if isinstance(created_at, datetime) else created_at
    return max(1, months_between(start, as_of))


def average_monthly_reduction(reduction: Decimal, created_at: datetime | date, as_of: date) -> Decimal:
    return reduction / months_elapsed(created_at, as_of)
