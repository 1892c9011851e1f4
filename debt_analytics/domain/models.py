"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple

from debt_analytics.domain.exceptions import InvalidLedgerStateError


class TransactionType(str, Enum):
    """Closed set of ledger entry kinds"""

    PAYMENT = "PAYMENT"
    CHARGE = "CHARGE"
    ADJUSTMENT = "ADJUSTMENT"
    INTEREST = "INTEREST"

    @classmethod
    def parse(cls, raw: str) -> "TransactionType":
        """Convert a stored type string, rejecting anything outside the closed set"""
        try:
            return cls(str(raw).upper())
        except ValueError as e:
            raise InvalidLedgerStateError(f"Unknown transaction type: {raw!r}") from e


class AdjustmentPolicy(str, Enum):
    """How an ADJUSTMENT amount moves the balance"""

    SIGNED = "signed"  # amount sign carries direction, positive increases debt
    INCREASE = "increase"
    DECREASE = "decrease"


class PortfolioProjectionPolicy(str, Enum):
    """Which per-account date stands for the whole portfolio"""

    ALL_ACCOUNTS = "all_accounts"
    SOONEST_ACCOUNT = "soonest_account"


class ProjectionOutcome(str, Enum):
    NO_TREND = "no_trend"
    TOO_FAR = "too_far"
    PROJECTED = "projected"


@dataclass(frozen=True)
class Account:
    """Debt/credit account as supplied by the CRUD layer"""

    id: str
    owner_id: str
    name: str
    current_balance: Decimal
    annual_interest_rate: Decimal  # percent, 0-100
    created_at: datetime
    opening_balance: Optional[Decimal] = None
    credit_limit: Optional[Decimal] = None
    minimum_payment: Optional[Decimal] = None
    due_day: Optional[int] = None
    is_active: bool = True
    account_type: str = "CREDIT_CARD"


@dataclass(frozen=True)
class Transaction:
    """Single ledger entry; never mutated by the engine"""

    id: str
    account_id: str
    amount: Decimal
    type: TransactionType
    transaction_date: date
    created_at: datetime
    description: Optional[str] = None


@dataclass(frozen=True)
class LedgerSnapshot:
    """Account plus its ordered ledger as read at one instant"""

    account: Account
    transactions: Tuple[Transaction, ...]
    opening_balance: Decimal
    read_at: Optional[datetime] = None


@dataclass
class LedgerTotals:
    """Sums over a transaction set, partitioned by type"""

    total_payments: Decimal
    total_charges: Decimal
    total_adjustments: Decimal
    total_interest: Decimal
    transaction_count: int


@dataclass
class MonthlyBucket:
    """Per-account totals for one calendar month"""

    account_id: str
    year: int
    month: int
    total_payments: Decimal
    total_charges: Decimal
    total_adjustments: Decimal
    total_interest: Decimal
    net_change: Decimal  # positive means the balance went down
    ending_balance_estimate: Decimal


@dataclass
class DebtFreeProjection:
    """Projector output: a date or the reason there is none"""

    outcome: ProjectionOutcome
    months_to_payoff: Optional[int] = None
    projected_date: Optional[date] = None


@dataclass
class AccountAnalytics:
    total_reduction: Decimal
    progress_percentage: Decimal
    average_monthly_reduction: Decimal
    total_payments: Decimal
    total_charges: Decimal
    total_interest: Decimal
    interest_saved: Optional[Decimal]
    projected_debt_free_date: Optional[date]
    projection_outcome: ProjectionOutcome = ProjectionOutcome.NO_TREND


@dataclass
class AccountSummary:
    account: Account
    opening_balance: Decimal
    analytics: AccountAnalytics
    monthly_buckets: List[MonthlyBucket] = field(default_factory=list)


@dataclass
class TrendSummary:
    debt_change: Decimal
    reduction_change: Decimal
    period: str


@dataclass
class MonthlyTrendPoint:
    month: str
    total_balance: Decimal
    reduction: Decimal


@dataclass
class DashboardOverview:
    total_debt: Decimal
    total_reduction: Decimal
    interest_saved: Decimal
    reduction_percentage: Decimal
    projected_debt_free_date: Optional[date]
    trends: TrendSummary
    average_monthly_reduction: Decimal
    total_interest_paid: Decimal
    total_accounts: int
    active_accounts: int
    monthly_trend: List[MonthlyTrendPoint] = field(default_factory=list)
    account_analytics: List[AccountAnalytics] = field(default_factory=list)


@dataclass
class AccountProgress:
    account_id: str
    name: str
    account_type: str
    is_active: bool
    current_balance: Decimal
    opening_balance: Decimal
    analytics: AccountAnalytics


@dataclass
class ProgressSummary:
    overall_progress: Decimal
    total_current_debt: Decimal
    total_opening_debt: Decimal
    accounts: List[AccountProgress]


@dataclass
class MonthlyBreakdown:
    """One simulated month of an amortisation schedule"""

    month: int
    balance: Decimal
    interest_charged: Decimal
    payment_amount: Decimal
    principal_paid: Decimal


@dataclass
class PayoffProjection:
    status: str  # "paid_off" | "insufficient_payment" | "capped"
    months: Optional[int]
    total_interest: Decimal
    final_balance: Decimal
    monthly_payment: Decimal
    monthly_breakdown: List[MonthlyBreakdown] = field(default_factory=list)


@dataclass
class PayoffScenario:
    name: str
    monthly_payment: Decimal
    months: Optional[int]
    total_interest: Decimal
    total_paid: Optional[Decimal]
    status: str


@dataclass
class InterestHistoryEntry:
    month: str
    interest_amount: Decimal
    balance: Decimal


@dataclass
class InterestForecast:
    history: List[InterestHistoryEntry]
    next_month_estimate: Decimal
    average_monthly_interest: Decimal


@dataclass
class MonthOverMonth:
    period: str
    balance: Decimal
    change: Decimal  # positive means reduction
    change_percentage: Decimal


@dataclass
class TrendAnalysis:
    payment_consistency: Decimal
    reduction_rate: Decimal
    month_over_month: List[MonthOverMonth]
