"""Pytest fixtures for testing"""

import uuid
import pytest
from datetime import date, datetime
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from debt_analytics.api.main import create_app
from debt_analytics.infrastructure.database.models import Base, DebtAccount, LedgerTransaction
from debt_analytics.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def seed_account(db: Session):
    """
    Insert an account and its ledger.

    transactions: iterable of (amount, type, transaction_date) tuples.
    Returns the account id as a string.
    """

    def _seed(
        owner_id: str = "owner-1",
        name: str = "Visa",
        opening_balance: str | None = "5000.00",
        current_balance: str = "4500.00",
        annual_interest_rate: str = "20.00",
        minimum_payment: str | None = "150.00",
        created_at: datetime = datetime(2025, 6, 1, 9, 0),
        is_active: bool = True,
        transactions=(),
    ) -> str:
        account = DebtAccount(
            id=uuid.uuid4(),
            owner_id=owner_id,
            name=name,
            opening_balance=Decimal(opening_balance) if opening_balance is not None else None,
            current_balance=Decimal(current_balance),
            annual_interest_rate=Decimal(annual_interest_rate),
            minimum_payment=Decimal(minimum_payment) if minimum_payment is not None else None,
            is_active=is_active,
            created_at=created_at,
        )
        db.add(account)
        for i, (amount, transaction_type, transaction_date) in enumerate(transactions):
            db.add(
                LedgerTransaction(
                    account_id=account.id,
                    amount=Decimal(amount),
                    transaction_type=transaction_type,
                    transaction_date=transaction_date,
                    created_at=datetime.combine(transaction_date, datetime.min.time()).replace(second=i),
                )
            )
        db.commit()
        return str(account.id)

    return _seed


@pytest.fixture
def visa_account(seed_account) -> str:
    """Opened at $5,000 this month with one $500 payment"""
    return seed_account(transactions=[("500.00", "PAYMENT", date(2025, 6, 10))])
