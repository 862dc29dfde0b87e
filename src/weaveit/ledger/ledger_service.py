"""Atomic prepaid-credit ledger backed by the ``account`` table."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import TrialPolicy
from ..db.db_models import AccountModel
from ..utils.clock import utcnow
from .ledger_errors import LedgerUnavailableError
from .ledger_models import AccountBalance, DeductResult

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Ledger:
    """Own per-account balances and trial metadata.

    Every mutation is a single guarded statement so that concurrent callers
    can never overdraw an account or apply a trial settlement twice.
    """

    session_factory: Callable[[], Session]
    trial_policy: TrialPolicy = field(default_factory=TrialPolicy)
    trial_tracking: bool = True
    clock: Callable[[], datetime] = utcnow
    log: logging.Logger = field(default_factory=lambda: logger)

    def ensure(self, account_id: str) -> bool:
        """Provision ``account_id`` with the trial grant; return True if created."""
        with self._guard("ensure", account_id):
            with self.session_factory() as session:
                existing = session.execute(
                    select(AccountModel.account_id).where(
                        AccountModel.account_id == account_id
                    )
                ).first()
                if existing is not None:
                    return False

                now = self.clock()
                values: dict[str, object] = {
                    "account_id": account_id,
                    "balance": self.trial_policy.credits,
                    "created_at": now,
                    "updated_at": now,
                }
                if self.trial_tracking:
                    values["trial_expires_at"] = now + timedelta(days=self.trial_policy.days)
                try:
                    session.execute(insert(AccountModel).values(**values))
                    session.commit()
                except IntegrityError:
                    # another request provisioned the same account first
                    session.rollback()
                    self.log.debug("ledger.ensure.race", extra={"account_id": account_id})
                    return False

        self.log.info(
            "ledger.account.provisioned",
            extra={
                "account_id": account_id,
                "trial_credits": self.trial_policy.credits,
                "trial_expires_at": values.get("trial_expires_at"),
            },
        )
        return True

    def deduct(self, account_id: str, amount: int) -> DeductResult:
        """Compare-and-decrement ``amount`` credits in one statement."""
        if amount <= 0:
            raise ValueError("Deduction amount must be positive")

        stmt = (
            update(AccountModel)
            .where(
                AccountModel.account_id == account_id,
                AccountModel.balance >= amount,
            )
            .values(balance=AccountModel.balance - amount, updated_at=self.clock())
            .returning(AccountModel.balance)
            .execution_options(synchronize_session=False)
        )
        with self._guard("deduct", account_id):
            with self.session_factory() as session:
                row = session.execute(stmt).first()
                session.commit()

        if row is None:
            self.log.info(
                "ledger.deduct.insufficient",
                extra={"account_id": account_id, "amount": amount},
            )
            return DeductResult(account_id=account_id, amount=amount, new_balance=None)

        self.log.info(
            "ledger.deduct.applied",
            extra={"account_id": account_id, "amount": amount, "balance": row[0]},
        )
        return DeductResult(account_id=account_id, amount=amount, new_balance=int(row[0]))

    def grant(self, account_id: str, amount: int) -> int:
        """Credit ``amount`` to the account, provisioning it first."""
        if amount <= 0:
            raise ValueError("Grant amount must be positive")

        self.ensure(account_id)
        stmt = (
            update(AccountModel)
            .where(AccountModel.account_id == account_id)
            .values(balance=AccountModel.balance + amount, updated_at=self.clock())
            .returning(AccountModel.balance)
            .execution_options(synchronize_session=False)
        )
        with self._guard("grant", account_id):
            with self.session_factory() as session:
                row = session.execute(stmt).first()
                session.commit()

        if row is None:
            raise LedgerUnavailableError(f"Account '{account_id}' vanished during grant")
        self.log.info(
            "ledger.grant.applied",
            extra={"account_id": account_id, "amount": amount, "balance": row[0]},
        )
        return int(row[0])

    def query(self, account_id: str) -> AccountBalance | None:
        """Return the current balance snapshot, or None for unknown accounts."""
        columns = [AccountModel.balance]
        if self.trial_tracking:
            columns.append(AccountModel.trial_expires_at)
        with self._guard("query", account_id):
            with self.session_factory() as session:
                row = session.execute(
                    select(*columns).where(AccountModel.account_id == account_id)
                ).first()

        if row is None:
            return None
        return AccountBalance(
            account_id=account_id,
            balance=int(row[0] or 0),
            trial_expires_at=row[1] if self.trial_tracking else None,
        )

    def close_expired_trial(
        self,
        account_id: str,
        *,
        now: datetime,
        trial_credits: int,
    ) -> int | None:
        """Settle a lapsed trial once; return the balance or None if nothing changed.

        Balances at or below ``trial_credits`` are zeroed, larger balances are
        kept. Both updates require ``trial_expires_at`` to still be set, which
        makes repeated or concurrent settlement a no-op.
        """
        if not self.trial_tracking:
            return None

        lapsed = (
            AccountModel.account_id == account_id,
            AccountModel.trial_expires_at.is_not(None),
            AccountModel.trial_expires_at <= now,
        )
        zero_stmt = (
            update(AccountModel)
            .where(*lapsed, AccountModel.balance <= trial_credits)
            .values(balance=0, trial_expires_at=None, updated_at=now)
            .returning(AccountModel.balance)
            .execution_options(synchronize_session=False)
        )
        keep_stmt = (
            update(AccountModel)
            .where(*lapsed)
            .values(trial_expires_at=None, updated_at=now)
            .returning(AccountModel.balance)
            .execution_options(synchronize_session=False)
        )
        with self._guard("close_trial", account_id):
            with self.session_factory() as session:
                row = session.execute(zero_stmt).first()
                zeroed = row is not None
                if row is None:
                    row = session.execute(keep_stmt).first()
                session.commit()

        if row is None:
            return None
        self.log.info(
            "ledger.trial.closed",
            extra={
                "account_id": account_id,
                "zeroed": zeroed,
                "balance": row[0],
            },
        )
        return int(row[0])

    def ping(self) -> None:
        """Run a trivial query to prove the storage is reachable."""
        with self._guard("ping", "-"):
            with self.session_factory() as session:
                session.execute(select(1))

    @contextmanager
    def _guard(self, operation: str, account_id: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.log.error(
                "ledger.storage.failed",
                extra={"operation": operation, "account_id": account_id, "error": str(exc)},
            )
            raise LedgerUnavailableError(f"Ledger {operation} failed") from exc
