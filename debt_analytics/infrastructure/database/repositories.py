"""Data access layer for accounts and ledger transactions"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session
from debt_analytics.infrastructure.database.models import DebtAccount, LedgerTransaction
from debt_analytics.domain.models import Account, Transaction, TransactionType
from debt_analytics.domain.exceptions import NotFoundError


def _decimal(value) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


def to_domain_account(row: DebtAccount) -> Account:
    """Map an ORM account row onto the domain dataclass"""
    return Account(
        id=str(row.id),
        owner_id=row.owner_id,
        name=row.name,
        account_type=row.account_type,
        opening_balance=_decimal(row.opening_balance),
        current_balance=_decimal(row.current_balance),
        credit_limit=_decimal(row.credit_limit),
        annual_interest_rate=_decimal(row.annual_interest_rate),
        minimum_payment=_decimal(row.minimum_payment),
        due_day=row.due_day,
        is_active=row.is_active,
        created_at=row.created_at,
    )


def to_domain_transaction(row: LedgerTransaction) -> Transaction:
    """Map an ORM ledger row, rejecting unknown transaction types"""
    return Transaction(
        id=str(row.id),
        account_id=str(row.account_id),
        amount=_decimal(row.amount),
        type=TransactionType.parse(row.transaction_type),
        transaction_date=row.transaction_date,
        description=row.description,
        created_at=row.created_at,
    )


class AccountRepository:
    """Repository for debt accounts"""

    def __init__(self, db: Session):
        self.db = db

    def get_account(self, account_id: str, owner_id: Optional[str] = None) -> DebtAccount:
        """Fetch an account, scoped to its owner when one is given"""
        try:
            account_uuid = uuid.UUID(str(account_id))
        except ValueError:
            raise NotFoundError(f"Account {account_id} not found")

        query = self.db.query(DebtAccount).filter(DebtAccount.id == account_uuid)
        if owner_id is not None:
            query = query.filter(DebtAccount.owner_id == owner_id)

        account = query.first()
        if account is None:
            raise NotFoundError(f"Account {account_id} not found")
        return account

    def list_accounts(self, owner_id: str) -> List[DebtAccount]:
        """All accounts for an owner, oldest first"""
        return (
            self.db.query(DebtAccount)
            .filter(DebtAccount.owner_id == owner_id)
            .order_by(DebtAccount.created_at.asc())
            .all()
        )


class TransactionRepository:
    """Repository for ledger transactions"""

    def __init__(self, db: Session):
        self.db = db

    def list_transactions(self, account_id: str, as_of: Optional[datetime] = None) -> List[LedgerTransaction]:
        """Ledger for an account ordered by (transaction_date, created_at)"""
        query = self.db.query(LedgerTransaction).filter(LedgerTransaction.account_id == uuid.UUID(str(account_id)))
        if as_of is not None:
            query = query.filter(LedgerTransaction.created_at <= as_of)
        return query.order_by(LedgerTransaction.transaction_date.asc(), LedgerTransaction.created_at.asc()).all()


class SqlLedgerSource:
    """
    LedgerSource backed by one database session.

    All reads for a report go through the same session, so the snapshot is
    as consistent as the database's transaction isolation makes it.
    """

    def __init__(self, db: Session):
        self.accounts = AccountRepository(db)
        self.transactions = TransactionRepository(db)

    def get_account(self, account_id: str, owner_id: Optional[str] = None) -> Account:
        return to_domain_account(self.accounts.get_account(account_id, owner_id))

    def list_accounts(self, owner_id: str) -> List[Account]:
        return [to_domain_account(row) for row in self.accounts.list_accounts(owner_id)]

    def list_transactions(self, account_id: str, as_of: Optional[datetime] = None) -> List[Transaction]:
        return [to_domain_transaction(row) for row in self.transactions.list_transactions(account_id, as_of)]
