"""Data structures for the credit ledger."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class AccountBalance:
    """Read-only snapshot of an account's credit state."""

    account_id: str
    balance: int
    trial_expires_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class DeductResult:
    """Outcome of a guarded deduction.

    ``new_balance`` is ``None`` when the balance could not cover ``amount``;
    that is an expected outcome rather than an error.
    """

    account_id: str
    amount: int
    new_balance: int | None

    @property
    def succeeded(self) -> bool:
        return self.new_balance is not None

    @property
    def insufficient(self) -> bool:
        return self.new_balance is None
