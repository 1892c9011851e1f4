"""Ledger reader - consistent per-account snapshots for the analytics engine"""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Protocol, Sequence

from debt_analytics.domain.models import Account, AdjustmentPolicy, LedgerSnapshot, Transaction
from debt_analytics.domain.exceptions import InvalidLedgerStateError
from debt_analytics.domain.aggregation import balance_delta


class LedgerSource(Protocol):
    """
    Data-layer collaborator supplying raw accounts and transactions.

    Ownership checks belong to the implementation: get_account raises
    NotFoundError for ids that do not exist or are not visible to the owner.
    """

    def get_account(self, account_id: str, owner_id: Optional[str] = None) -> Account: ...

    def list_accounts(self, owner_id: str) -> List[Account]: ...

    def list_transactions(self, account_id: str, as_of: Optional[datetime] = None) -> List[Transaction]: ...


def order_transactions(transactions: Sequence[Transaction]) -> tuple[Transaction, ...]:
    """Ascending by (transaction_date, created_at)"""
    return tuple(sorted(transactions, key=lambda t: (t.transaction_date, t.created_at)))


def resolve_opening_balance(account: Account, transactions: Sequence[Transaction]):
    """
    Establish the reduction baseline.

    An account without history is measured from its current balance. An
    account with history but no recorded opening balance has no trustworthy
    baseline and is rejected instead of being silently defaulted.
    """
    if not transactions:
        return account.current_balance
    if account.opening_balance is None:
        raise InvalidLedgerStateError(
            f"Account {account.id} has {len(transactions)} transactions but no opening balance"
        )
    return account.opening_balance


def build_snapshot(
    account: Account,
    transactions: Sequence[Transaction],
    read_at: Optional[datetime] = None,
) -> LedgerSnapshot:
    """Freeze an account and its ledger into an immutable snapshot"""
    ordered = order_transactions(transactions)
    return LedgerSnapshot(
        account=account,
        transactions=ordered,
        opening_balance=resolve_opening_balance(account, ordered),
        read_at=read_at,
    )


def snapshot_as_of(
    snapshot: LedgerSnapshot,
    as_of: date,
    adjustment_policy: AdjustmentPolicy = AdjustmentPolicy.SIGNED,
) -> LedgerSnapshot:
    """
    Rewind a snapshot to the close of the as_of day.

    Transactions dated after as_of are dropped and their effect is taken back
    out of the current balance, so balances, totals and trends computed from
    the result all describe the same day. A snapshot with nothing after as_of
    is returned unchanged.
    """
    later = [t for t in snapshot.transactions if t.transaction_date > as_of]
    if not later:
        return snapshot

    rewound = snapshot.account.current_balance - sum(
        (balance_delta(t, adjustment_policy) for t in later), Decimal(0)
    )
    return replace(
        snapshot,
        account=replace(snapshot.account, current_balance=rewound),
        transactions=tuple(t for t in snapshot.transactions if t.transaction_date <= as_of),
    )


class LedgerReader:
    """Reads snapshots from a LedgerSource; never writes"""

    def __init__(self, source: LedgerSource):
        self.source = source

    def read_account(
        self,
        account_id: str,
        owner_id: Optional[str] = None,
        as_of: Optional[datetime] = None,
    ) -> LedgerSnapshot:
        account = self.source.get_account(account_id, owner_id)
        transactions = self.source.list_transactions(account.id, as_of)
        return build_snapshot(account, transactions, as_of)

    def read_portfolio(self, owner_id: str, as_of: Optional[datetime] = None) -> List[LedgerSnapshot]:
        return [
            build_snapshot(account, self.source.list_transactions(account.id, as_of), as_of)
            for account in self.source.list_accounts(owner_id)
        ]
