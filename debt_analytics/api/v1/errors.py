"""Translate domain failures into HTTP responses"""

import logging
from contextlib import contextmanager
from fastapi import HTTPException

from debt_analytics.domain.exceptions import InvalidLedgerStateError, LedgerServiceError, NotFoundError
from debt_analytics.infrastructure.observability.metrics import report_failures_counter


@contextmanager
def domain_errors(request_id: str):
    """Map domain exceptions raised while building a report onto HTTP errors"""
    try:
        yield

    except NotFoundError as e:
        report_failures_counter.labels(reason="not_found").inc()
        logging.warning(f"Not found: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail="Account not found")

    except InvalidLedgerStateError as e:
        report_failures_counter.labels(reason="invalid_ledger").inc()
        logging.warning(f"Invalid ledger state: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except LedgerServiceError as e:
        report_failures_counter.labels(reason="ledger_unavailable").inc()
        logging.error(f"Ledger service error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Ledger service unavailable")

    # decimal.InvalidOperation and friends: stored rates or balances the models cannot compute with
    except ArithmeticError as e:
        report_failures_counter.labels(reason="invalid_ledger").inc()
        logging.warning(f"Uncomputable ledger values: {e!r}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail="Account values cannot be computed")

    except ValueError as e:
        logging.warning(f"Invalid request: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    except Exception as e:
        report_failures_counter.labels(reason="unexpected").inc()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
