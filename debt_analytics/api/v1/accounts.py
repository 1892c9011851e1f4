"""GET /v1/accounts/{account_id}/... - per-account analytics endpoints"""

import time
from datetime import date
from decimal import Decimal
from fastapi import APIRouter, Depends, Query, Request

from debt_analytics.api.v1.schemas import (
    AccountSummaryResponse,
    InterestForecastResponse,
    PayoffProjectionResponse,
    PayoffScenariosResponse,
    PayoffScenarioSchema,
    RequiredPaymentResponse,
)
from debt_analytics.api.v1.errors import domain_errors
from debt_analytics.api.dependencies import (
    get_as_of,
    get_ledger_reader,
    get_owner_id,
    get_report_options,
    get_request_id,
)
from debt_analytics.domain.ledger import LedgerReader, snapshot_as_of
from debt_analytics.domain.models import LedgerSnapshot
from debt_analytics.domain.reports import ReportOptions, compute_account_summary
from debt_analytics.domain.interest import build_interest_forecast
from debt_analytics.domain.projection import (
    calculate_payoff_projection,
    calculate_payoff_scenarios,
    calculate_required_payment,
    resolve_projection_payment,
)
from debt_analytics.infrastructure.observability.logging import log_report
from debt_analytics.infrastructure.observability.metrics import record_report

router = APIRouter()


def _read_account_as_of(
    reader: LedgerReader, account_id: str, owner_id: str, as_of: date, options: ReportOptions
) -> LedgerSnapshot:
    """One account snapshot rewound to the reporting date"""
    return snapshot_as_of(reader.read_account(account_id, owner_id), as_of, options.adjustment_policy)


@router.get("/accounts/{account_id}/summary", response_model=AccountSummaryResponse)
def get_account_summary(
    account_id: str,
    request: Request,
    owner_id: str = Depends(get_owner_id),
    as_of: date = Depends(get_as_of),
    reader: LedgerReader = Depends(get_ledger_reader),
    options: ReportOptions = Depends(get_report_options),
):
    """
    Account record plus analytics computed from one ledger snapshot.

    Returns:
        Reduction, progress, velocity, type totals, interest saved,
        projected debt-free date and monthly buckets
    """
    start_time = time.time()
    request_id = get_request_id(request)

    with domain_errors(request_id):
        summary = compute_account_summary(reader, account_id, as_of, owner_id, options)

    record_report("account_summary", [summary.analytics])
    log_report(request_id, "account_summary", {"account_id": account_id}, (time.time() - start_time) * 1000)
    return AccountSummaryResponse.model_validate(summary)


@router.get("/accounts/{account_id}/projection", response_model=PayoffProjectionResponse)
def get_account_projection(
    account_id: str,
    request: Request,
    monthly_payment: Decimal | None = Query(None, gt=0, description="Custom monthly payment"),
    owner_id: str = Depends(get_owner_id),
    as_of: date = Depends(get_as_of),
    reader: LedgerReader = Depends(get_ledger_reader),
    options: ReportOptions = Depends(get_report_options),
):
    """
    Month-by-month payoff simulation.

    Uses the custom payment when given, else the recent payment trend, else
    the account's minimum payment.
    """
    request_id = get_request_id(request)

    with domain_errors(request_id):
        snapshot = _read_account_as_of(reader, account_id, owner_id, as_of, options)
        payment = monthly_payment or resolve_projection_payment(snapshot, as_of, options.trend_lookback_months)
        if payment is None:
            raise ValueError("No payment history or minimum payment to project from")
        projection = calculate_payoff_projection(snapshot.account.current_balance, snapshot.account.annual_interest_rate, payment)

    return PayoffProjectionResponse.model_validate(projection)


@router.get("/accounts/{account_id}/payoff-scenarios", response_model=PayoffScenariosResponse)
def get_payoff_scenarios(
    account_id: str,
    request: Request,
    owner_id: str = Depends(get_owner_id),
    as_of: date = Depends(get_as_of),
    reader: LedgerReader = Depends(get_ledger_reader),
    options: ReportOptions = Depends(get_report_options),
):
    """What-if comparison: minimum payment, current trend, and extra monthly amounts"""
    request_id = get_request_id(request)

    with domain_errors(request_id):
        snapshot = _read_account_as_of(reader, account_id, owner_id, as_of, options)
        scenarios = calculate_payoff_scenarios(snapshot, as_of, options.trend_lookback_months)

    return PayoffScenariosResponse(
        account_id=snapshot.account.id,
        scenarios=[PayoffScenarioSchema.model_validate(s) for s in scenarios],
    )


@router.get("/accounts/{account_id}/required-payment", response_model=RequiredPaymentResponse)
def get_required_payment(
    account_id: str,
    request: Request,
    target_months: int = Query(..., description="Months to be debt-free in"),
    owner_id: str = Depends(get_owner_id),
    as_of: date = Depends(get_as_of),
    reader: LedgerReader = Depends(get_ledger_reader),
    options: ReportOptions = Depends(get_report_options),
):
    """Monthly payment needed to clear the current balance in target_months"""
    request_id = get_request_id(request)

    with domain_errors(request_id):
        snapshot = _read_account_as_of(reader, account_id, owner_id, as_of, options)
        payment = calculate_required_payment(
            snapshot.account.current_balance,
            snapshot.account.annual_interest_rate,
            target_months,
        )

    return RequiredPaymentResponse(account_id=snapshot.account.id, target_months=target_months, monthly_payment=payment)


@router.get("/accounts/{account_id}/interest-forecast", response_model=InterestForecastResponse)
def get_interest_forecast(
    account_id: str,
    request: Request,
    months: int = Query(12, ge=1, le=120, description="Months of history"),
    owner_id: str = Depends(get_owner_id),
    as_of: date = Depends(get_as_of),
    reader: LedgerReader = Depends(get_ledger_reader),
    options: ReportOptions = Depends(get_report_options),
):
    """Interest history, next month's estimate, and average monthly interest"""
    request_id = get_request_id(request)

    with domain_errors(request_id):
        snapshot = _read_account_as_of(reader, account_id, owner_id, as_of, options)
        forecast = build_interest_forecast(snapshot, as_of, months, options.adjustment_policy)

    return InterestForecastResponse.model_validate(forecast)
