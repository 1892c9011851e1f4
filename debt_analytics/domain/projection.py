"""Payoff projection - debt-free date extrapolation and amortisation scenarios"""

import math
from datetime import date
from decimal import Decimal
from typing import List, Optional

from debt_analytics.domain.models import (
    DebtFreeProjection,
    LedgerSnapshot,
    MonthlyBreakdown,
    PayoffProjection,
    PayoffScenario,
    ProjectionOutcome,
    TransactionType,
)
from debt_analytics.domain.interest import monthly_interest
from debt_analytics.utils.date_utils import add_months
from debt_analytics.utils.money import ZERO, to_money

PROJECTION_MAX_MONTHS = 1200  # 100 years
SIMULATION_MAX_MONTHS = 600
SCENARIO_EXTRAS = (Decimal("50"), Decimal("100"), Decimal("200"))


def project_debt_free_date(
    average_monthly_reduction: Decimal,
    current_balance: Decimal,
    as_of: date,
    max_months: int = PROJECTION_MAX_MONTHS,
) -> DebtFreeProjection:
    """
    Extrapolate the current reduction velocity to a debt-free date.

    Outcomes:
    - NO_TREND: velocity is zero or negative, there is nothing to extrapolate
    - TOO_FAR: payoff is more than max_months away
    - PROJECTED: as_of + ceil(balance / velocity) months
    """
    if average_monthly_reduction <= 0:
        return DebtFreeProjection(outcome=ProjectionOutcome.NO_TREND)

    months = max(math.ceil(current_balance / average_monthly_reduction), 0)
    if months > max_months:
        return DebtFreeProjection(outcome=ProjectionOutcome.TOO_FAR, months_to_payoff=months)

    return DebtFreeProjection(
        outcome=ProjectionOutcome.PROJECTED,
        months_to_payoff=months,
        projected_date=add_months(as_of, months),
    )


def calculate_payoff_projection(
    current_balance: Decimal,
    annual_rate_percent: Decimal,
    monthly_payment: Decimal,
    max_months: int = SIMULATION_MAX_MONTHS,
) -> PayoffProjection:
    """
    Simulate paying a fixed amount every month until the balance reaches zero.

    Each month interest (rounded to cents) is added first, then the payment,
    capped at what is still owed. A payment that does not beat the first
    month's interest can never pay the debt off and is reported as
    "insufficient_payment" without simulating.
    """
    if monthly_payment <= 0:
        raise ValueError("Monthly payment must be greater than zero")

    payment = to_money(monthly_payment)
    if current_balance <= 0:
        return PayoffProjection(
            status="paid_off",
            months=0,
            total_interest=to_money(ZERO),
            final_balance=to_money(ZERO),
            monthly_payment=payment,
        )

    if payment <= monthly_interest(current_balance, annual_rate_percent):
        return PayoffProjection(
            status="insufficient_payment",
            months=None,
            total_interest=to_money(ZERO),
            final_balance=to_money(current_balance),
            monthly_payment=payment,
        )

    balance = to_money(current_balance)
    total_interest = ZERO
    breakdown = []

    while balance > 0 and len(breakdown) < max_months:
        interest = monthly_interest(balance, annual_rate_percent)
        balance += interest
        actual_payment = min(payment, balance)
        balance = to_money(balance - actual_payment)
        total_interest += interest

        breakdown.append(
            MonthlyBreakdown(
                month=len(breakdown) + 1,
                balance=balance,
                interest_charged=interest,
                payment_amount=actual_payment,
                principal_paid=to_money(actual_payment - interest),
            )
        )

    return PayoffProjection(
        status="paid_off" if balance <= 0 else "capped",
        months=len(breakdown) if balance <= 0 else None,
        total_interest=to_money(total_interest),
        final_balance=to_money(balance),
        monthly_payment=payment,
        monthly_breakdown=breakdown,
    )


def current_trend_payment(snapshot: LedgerSnapshot, as_of: date, lookback_months: int = 3) -> Decimal:
    """Mean PAYMENT amount over the lookback window; 0 without recent payments"""
    since = add_months(as_of, -lookback_months)
    amounts = [
        t.amount
        for t in snapshot.transactions
        if t.type == TransactionType.PAYMENT and since <= t.transaction_date <= as_of
    ]
    if not amounts:
        return ZERO
    return to_money(sum(amounts, ZERO) / len(amounts))


def _scenario(name: str, balance: Decimal, rate: Decimal, payment: Decimal) -> PayoffScenario:
    projection = calculate_payoff_projection(balance, rate, payment)
    return PayoffScenario(
        name=name,
        monthly_payment=projection.monthly_payment,
        months=projection.months,
        total_interest=projection.total_interest,
        total_paid=to_money(balance + projection.total_interest) if projection.months is not None else None,
        status=projection.status,
    )


def calculate_payoff_scenarios(
    snapshot: LedgerSnapshot,
    as_of: date,
    lookback_months: int = 3,
) -> List[PayoffScenario]:
    """Compare minimum payment, current trend, and current pace plus $50/$100/$200 a month"""
    account = snapshot.account
    balance = account.current_balance
    rate = account.annual_interest_rate
    minimum = account.minimum_payment or ZERO
    trend = current_trend_payment(snapshot, as_of, lookback_months)

    scenarios = []
    if minimum > 0:
        scenarios.append(_scenario("Minimum Payment", balance, rate, minimum))
    if trend > 0:
        scenarios.append(_scenario("Current Trend", balance, rate, trend))

    base = max(minimum, trend)
    if base > 0:
        for extra in SCENARIO_EXTRAS:
            scenarios.append(_scenario(f"Extra ${extra}/month", balance, rate, base + extra))

    return scenarios


def calculate_required_payment(
    current_balance: Decimal,
    annual_rate_percent: Decimal,
    target_months: int,
) -> Decimal:
    """Fixed monthly payment that clears the balance in target_months (annuity formula)"""
    if target_months <= 0:
        raise ValueError("Target months must be greater than zero")
    if current_balance <= 0:
        return to_money(ZERO)

    rate = annual_rate_percent / 12 / 100
    if rate == 0:
        return to_money(current_balance / target_months)

    payment = rate * current_balance / (1 - (1 + rate) ** -target_months)
    return to_money(payment)


def resolve_projection_payment(snapshot: LedgerSnapshot, as_of: date, lookback_months: int = 3) -> Optional[Decimal]:
    """Payment used for the default account projection: current trend, else the minimum payment"""
    trend = current_trend_payment(snapshot, as_of, lookback_months)
    if trend > 0:
        return trend
    minimum = snapshot.account.minimum_payment
    return minimum if minimum and minimum > 0 else None
