"""Domain-specific exceptions for the credit ledger."""

from ..exceptions import AppError


class LedgerError(AppError):
    """Base class for ledger failures."""


class LedgerUnavailableError(LedgerError):
    """Raised when the ledger storage cannot complete an operation."""
