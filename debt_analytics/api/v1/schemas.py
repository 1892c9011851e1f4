"""Pydantic schemas for API responses"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from debt_analytics.domain.models import ProjectionOutcome


class ResponseModel(BaseModel):
    """Built straight from domain dataclasses"""

    model_config = ConfigDict(from_attributes=True)


class AccountSchema(ResponseModel):
    """Account as read for the report"""

    id: str
    owner_id: str
    name: str
    account_type: str
    current_balance: Decimal
    opening_balance: Optional[Decimal] = None
    credit_limit: Optional[Decimal] = None
    annual_interest_rate: Decimal
    minimum_payment: Optional[Decimal] = None
    due_day: Optional[int] = None
    is_active: bool
    created_at: datetime


class AnalyticsSchema(ResponseModel):
    """Per-account analytics"""

    total_reduction: Decimal
    progress_percentage: Decimal
    average_monthly_reduction: Decimal
    total_payments: Decimal
    total_charges: Decimal
    total_interest: Decimal
    interest_saved: Optional[Decimal] = None
    projected_debt_free_date: Optional[date] = None
    projection_outcome: ProjectionOutcome


class MonthlyBucketSchema(ResponseModel):
    year: int
    month: int
    total_payments: Decimal
    total_charges: Decimal
    total_adjustments: Decimal
    total_interest: Decimal
    net_change: Decimal
    ending_balance_estimate: Decimal


class AccountSummaryResponse(ResponseModel):
    """Response for GET /v1/accounts/{account_id}/summary"""

    account: AccountSchema
    opening_balance: Decimal
    analytics: AnalyticsSchema
    monthly_buckets: List[MonthlyBucketSchema]


class TrendsSchema(ResponseModel):
    debt_change: Decimal
    reduction_change: Decimal
    period: str


class MonthlyTrendSchema(ResponseModel):
    month: str
    total_balance: Decimal
    reduction: Decimal


class DashboardOverviewResponse(ResponseModel):
    """Response for GET /v1/analytics/overview"""

    total_debt: Decimal
    total_reduction: Decimal
    interest_saved: Decimal
    reduction_percentage: Decimal
    projected_debt_free_date: Optional[date] = None
    trends: TrendsSchema
    average_monthly_reduction: Decimal
    total_interest_paid: Decimal
    total_accounts: int
    active_accounts: int
    monthly_trend: List[MonthlyTrendSchema]


class AccountProgressSchema(ResponseModel):
    account_id: str
    name: str
    account_type: str
    is_active: bool
    current_balance: Decimal
    opening_balance: Decimal
    analytics: AnalyticsSchema


class ProgressSummaryResponse(ResponseModel):
    """Response for GET /v1/analytics/progress"""

    overall_progress: Decimal
    total_current_debt: Decimal
    total_opening_debt: Decimal
    accounts: List[AccountProgressSchema]


class MonthOverMonthSchema(ResponseModel):
    period: str
    balance: Decimal
    change: Decimal
    change_percentage: Decimal


class TrendAnalysisResponse(ResponseModel):
    """Response for GET /v1/analytics/trends"""

    payment_consistency: Decimal
    reduction_rate: Decimal
    month_over_month: List[MonthOverMonthSchema]


class MonthlyBreakdownSchema(ResponseModel):
    month: int
    balance: Decimal
    interest_charged: Decimal
    payment_amount: Decimal
    principal_paid: Decimal


class PayoffProjectionResponse(ResponseModel):
    """Response for GET /v1/accounts/{account_id}/projection"""

    status: str
    months: Optional[int] = None
    total_interest: Decimal
    final_balance: Decimal
    monthly_payment: Decimal
    monthly_breakdown: List[MonthlyBreakdownSchema]


class PayoffScenarioSchema(ResponseModel):
    name: str
    monthly_payment: Decimal
    months: Optional[int] = None
    total_interest: Decimal
    total_paid: Optional[Decimal] = None
    status: str


class PayoffScenariosResponse(BaseModel):
    """Response for GET /v1/accounts/{account_id}/payoff-scenarios"""

    account_id: str
    scenarios: List[PayoffScenarioSchema]


class RequiredPaymentResponse(BaseModel):
    """Response for GET /v1/accounts/{account_id}/required-payment"""

    account_id: str
    target_months: int
    monthly_payment: Decimal


class InterestHistorySchema(ResponseModel):
    month: str
    interest_amount: Decimal
    balance: Decimal


class InterestForecastResponse(ResponseModel):
    """Response for GET /v1/accounts/{account_id}/interest-forecast"""

    history: List[InterestHistorySchema]
    next_month_estimate: Decimal
    average_monthly_interest: Decimal
