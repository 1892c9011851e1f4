"""SQLAlchemy ORM models for accounts and their transaction ledger"""

import uuid
from sqlalchemy import Column, Boolean, DateTime, Date, Integer, ForeignKey, Numeric, Text, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class DebtAccount(Base):
    """Debt/credit account owned by a user"""

    __tablename__ = "debt_account"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    account_type = Column(Text, nullable=False, default="CREDIT_CARD")
    opening_balance = Column(Numeric(12, 2), nullable=True)
    current_balance = Column(Numeric(12, 2), nullable=False)
    credit_limit = Column(Numeric(12, 2), nullable=True)
    annual_interest_rate = Column(Numeric(5, 2), nullable=False, default=0)
    minimum_payment = Column(Numeric(12, 2), nullable=True)
    due_day = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transactions = relationship("LedgerTransaction", back_populates="account", cascade="all, delete-orphan")


class LedgerTransaction(Base):
    """Single ledger entry against an account"""

    __tablename__ = "ledger_transaction"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    account_id = Column(Uuid(as_uuid=True), ForeignKey("debt_account.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    transaction_type = Column(Text, nullable=False)
    transaction_date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    account = relationship("DebtAccount", back_populates="transactions")
