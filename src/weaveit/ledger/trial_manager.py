"""Reconciliation of lapsed trial grants."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from ..config import TrialPolicy
from ..utils.clock import utcnow
from .ledger_service import Ledger

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TrialManager:
    """Expire time-boxed trial grants exactly once per account.

    Trial and paid credit share one balance, so a lapsed trial is settled
    heuristically: a balance that never grew past the original grant is
    treated as trial-only and zeroed, anything larger is assumed to contain
    paid credit and kept. The trial marker is cleared either way.
    """

    ledger: Ledger
    trial_policy: TrialPolicy = field(default_factory=TrialPolicy)
    clock: Callable[[], datetime] = utcnow
    log: logging.Logger = field(default_factory=lambda: logger)

    def settle(self, account_id: str) -> int | None:
        """Reconcile the trial for ``account_id`` and return the balance."""
        snapshot = self.ledger.query(account_id)
        if snapshot is None:
            return None
        if snapshot.trial_expires_at is None:
            return snapshot.balance

        now = self.clock()
        if snapshot.trial_expires_at > now:
            return snapshot.balance

        balance = self.ledger.close_expired_trial(
            account_id,
            now=now,
            trial_credits=self.trial_policy.credits,
        )
        if balance is None:
            # settled concurrently; report what is stored now
            current = self.ledger.query(account_id)
            return current.balance if current else None

        self.log.info(
            "trial.settled",
            extra={
                "account_id": account_id,
                "previous_balance": snapshot.balance,
                "balance": balance,
                "expired_at": snapshot.trial_expires_at.isoformat(),
            },
        )
        return balance
