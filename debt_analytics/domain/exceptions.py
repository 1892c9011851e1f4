"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class NotFoundError(DomainException):
    """Account does not exist or is not visible to the caller"""

    pass


class InvalidLedgerStateError(DomainException):
    """Ledger cannot be analysed: unknown transaction type or no reduction baseline"""

    pass


class LedgerServiceError(DomainException):
    """Remote ledger service returned an error or is unavailable"""

    pass
