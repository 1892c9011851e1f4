"""Ledger service HTTP client for fetching accounts and transaction history"""

import httpx
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from debt_analytics.domain.models import Account, Transaction, TransactionType
from debt_analytics.domain.exceptions import LedgerServiceError, NotFoundError
from debt_analytics.config import settings
from debt_analytics.infrastructure.observability.metrics import ledger_fetch_latency_histogram


def _optional_decimal(value: Any) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


def parse_account(data: Dict[str, Any]) -> Account:
    return Account(
        id=str(data["id"]),
        owner_id=str(data["owner_id"]),
        name=data["name"],
        account_type=data.get("account_type", "CREDIT_CARD"),
        opening_balance=_optional_decimal(data.get("opening_balance")),
        current_balance=Decimal(str(data["current_balance"])),
        credit_limit=_optional_decimal(data.get("credit_limit")),
        annual_interest_rate=Decimal(str(data.get("annual_interest_rate", 0))),
        minimum_payment=_optional_decimal(data.get("minimum_payment")),
        due_day=data.get("due_day"),
        is_active=data.get("is_active", True),
        created_at=datetime.fromisoformat(data["created_at"]),
    )


def parse_transaction(data: Dict[str, Any]) -> Transaction:
    return Transaction(
        id=str(data["id"]),
        account_id=str(data["account_id"]),
        amount=Decimal(str(data["amount"])),
        type=TransactionType.parse(data["transaction_type"]),
        transaction_date=date.fromisoformat(data["transaction_date"]),
        description=data.get("description"),
        created_at=datetime.fromisoformat(data["created_at"]),
    )


class LedgerClient:
    """
    LedgerSource backed by the account/transaction CRUD service.

    The service owns visibility: an account the owner cannot see answers 404,
    which surfaces as NotFoundError just like a missing row in the database.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url or settings.ledger_service_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.client = httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=transport)

    def __enter__(self) -> "LedgerClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    def _get(self, path: str, params: Dict[str, Any] | None = None) -> Any:
        """
        GET a JSON document from the ledger service.

        Raises:
            NotFoundError: On HTTP 404
            LedgerServiceError: On timeout, other HTTP errors, or network failure
        """
        try:
            with ledger_fetch_latency_histogram.time():
                response = self.client.get(path, params=params)
                response.raise_for_status()
            return response.json()

        except httpx.TimeoutException as e:
            raise LedgerServiceError(f"Ledger service timeout after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise NotFoundError(f"Not found: {path}") from e
            raise LedgerServiceError(f"Ledger service error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise LedgerServiceError(f"Ledger service unreachable: {e}") from e

    @staticmethod
    def _parse(parser, data):
        try:
            return parser(data)
        except (KeyError, ValueError, TypeError, ArithmeticError) as e:
            raise LedgerServiceError(f"Invalid ledger data: {e}") from e

    def get_account(self, account_id: str, owner_id: Optional[str] = None) -> Account:
        params = {"owner_id": owner_id} if owner_id else None
        return self._parse(parse_account, self._get(f"/accounts/{account_id}", params))

    def list_accounts(self, owner_id: str) -> List[Account]:
        data = self._get("/accounts", {"owner_id": owner_id})
        return [self._parse(parse_account, item) for item in data.get("accounts", [])]

    def list_transactions(self, account_id: str, as_of: Optional[datetime] = None) -> List[Transaction]:
        params = {"as_of": as_of.isoformat()} if as_of else None
        data = self._get(f"/accounts/{account_id}/transactions", params)
        return [self._parse(parse_transaction, txn) for txn in data.get("transactions", [])]
