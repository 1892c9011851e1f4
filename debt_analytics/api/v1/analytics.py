"""GET /v1/analytics/... - portfolio-wide analytics for the calling owner"""

import time
from datetime import date
from fastapi import APIRouter, Depends, Request

from debt_analytics.api.v1.schemas import (
    DashboardOverviewResponse,
    ProgressSummaryResponse,
    TrendAnalysisResponse,
)
from debt_analytics.api.v1.errors import domain_errors
from debt_analytics.api.dependencies import (
    get_as_of,
    get_ledger_reader,
    get_owner_id,
    get_report_options,
    get_request_id,
)
from debt_analytics.domain.ledger import LedgerReader
from debt_analytics.domain.reports import (
    ReportOptions,
    build_dashboard_overview,
    build_progress_summary,
    compute_trend_analysis,
)
from debt_analytics.infrastructure.observability.logging import log_report
from debt_analytics.infrastructure.observability.metrics import record_report

router = APIRouter()


@router.get("/analytics/overview", response_model=DashboardOverviewResponse)
def get_dashboard_overview(
    request: Request,
    owner_id: str = Depends(get_owner_id),
    as_of: date = Depends(get_as_of),
    reader: LedgerReader = Depends(get_ledger_reader),
    options: ReportOptions = Depends(get_report_options),
):
    """
    Dashboard metrics across the owner's active accounts.

    Flow:
    1. Read every owned account and its ledger in one session
    2. Aggregate reduction, interest savings and debt totals
    3. Project the portfolio debt-free date under the configured policy
    4. Compare the current trend window with the previous one
    """
    start_time = time.time()
    request_id = get_request_id(request)

    with domain_errors(request_id):
        snapshots = reader.read_portfolio(owner_id)
        overview = build_dashboard_overview(snapshots, as_of, options)

    record_report("dashboard_overview", overview.account_analytics)
    log_report(request_id, "dashboard_overview", {"owner_id": owner_id}, (time.time() - start_time) * 1000, len(snapshots))
    return DashboardOverviewResponse.model_validate(overview)


@router.get("/analytics/progress", response_model=ProgressSummaryResponse)
def get_progress_summary(
    request: Request,
    owner_id: str = Depends(get_owner_id),
    as_of: date = Depends(get_as_of),
    reader: LedgerReader = Depends(get_ledger_reader),
    options: ReportOptions = Depends(get_report_options),
):
    """Per-account analytics for every owned account, with overall progress"""
    start_time = time.time()
    request_id = get_request_id(request)

    with domain_errors(request_id):
        snapshots = reader.read_portfolio(owner_id)
        summary = build_progress_summary(snapshots, as_of, options)

    record_report("progress_summary", [a.analytics for a in summary.accounts])
    log_report(request_id, "progress_summary", {"owner_id": owner_id}, (time.time() - start_time) * 1000, len(snapshots))
    return ProgressSummaryResponse.model_validate(summary)


@router.get("/analytics/trends", response_model=TrendAnalysisResponse)
def get_trend_analysis(
    request: Request,
    owner_id: str = Depends(get_owner_id),
    as_of: date = Depends(get_as_of),
    reader: LedgerReader = Depends(get_ledger_reader),
    options: ReportOptions = Depends(get_report_options),
):
    """Payment consistency, reduction rate and month-over-month balances"""
    request_id = get_request_id(request)

    with domain_errors(request_id):
        analysis = compute_trend_analysis(reader, owner_id, as_of, options)

    record_report("trend_analysis", [])
    return TrendAnalysisResponse.model_validate(analysis)
