"""HTTP routes for balance queries and payment confirmations."""

from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from ..config import AppConfig
from ..db.db_models import ACCOUNT_ID_MAX_LENGTH
from .ledger_errors import LedgerUnavailableError
from .ledger_schemas import AwardRequest, AwardResponse, BalanceResponse
from .ledger_service import Ledger
from .trial_manager import TrialManager

router = APIRouter(prefix="/api", tags=["ledger"])
logger = logging.getLogger(__name__)


def get_ledger(request: Request) -> Ledger:
    try:
        return request.app.state.ledger  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("Ledger is not configured") from exc


def get_trial_manager(request: Request) -> TrialManager:
    try:
        return request.app.state.trial_manager  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("TrialManager is not configured") from exc


def get_config(request: Request) -> AppConfig:
    try:
        return request.app.state.config  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("AppConfig is not configured") from exc


@router.get("/users/{account_id}/points", response_model=BalanceResponse)
def read_balance(
    account_id: str,
    ledger: Ledger = Depends(get_ledger),
    trial_manager: TrialManager = Depends(get_trial_manager),
) -> BalanceResponse:
    """Return the balance after settling any lapsed trial."""
    account_id = account_id.strip()
    if not account_id:
        raise _invalid("walletAddress is required")
    try:
        trial_manager.settle(account_id)
    except Exception:
        logger.exception("ledger.balance.trial_settle_failed", extra={"account_id": account_id})

    try:
        snapshot = ledger.query(account_id)
    except LedgerUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"status": "error", "failure_reason": "internal"},
        ) from exc
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"status": "error", "failure_reason": "account_not_found"},
        )
    return BalanceResponse(
        wallet_address=account_id,
        points=snapshot.balance,
        trial_expires_at=snapshot.trial_expires_at,
    )


@router.post("/payments/award", response_model=AwardResponse)
def award_points(
    payload: AwardRequest,
    ledger: Ledger = Depends(get_ledger),
    config: AppConfig = Depends(get_config),
    payment_token: str | None = Header(default=None, alias="X-Payment-Token"),
) -> AwardResponse:
    """Credit a confirmed payment to the account."""
    expected = config.payment_confirmation_token
    if expected and not hmac.compare_digest(payment_token or "", expected):
        logger.warning("ledger.award.invalid_token", extra={"wallet": payload.wallet_address})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"status": "error", "failure_reason": "invalid_payment_token"},
        )

    account_id = (payload.wallet_address or "").strip()
    if not account_id:
        raise _invalid("walletAddress is required")
    if len(account_id) > ACCOUNT_ID_MAX_LENGTH:
        raise _invalid(f"walletAddress exceeds {ACCOUNT_ID_MAX_LENGTH} characters")

    if payload.points is not None:
        awarded = payload.points
    elif payload.tier is not None:
        awarded = config.pricing.credits_for_tier(str(payload.tier))
    elif payload.amount is not None:
        awarded = config.pricing.credits_for_tier(str(payload.amount))
    else:
        awarded = None
    if awarded is None or awarded <= 0:
        raise _invalid("Provide valid `tier`, `amount`, or `points`")

    try:
        new_total = ledger.grant(account_id, awarded)
    except LedgerUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"status": "error", "failure_reason": "internal"},
        ) from exc

    content_credits = None
    cost = config.pricing.job_costs.get(payload.content_type or "")
    if cost:
        content_credits = round(awarded / cost, 2)

    logger.info(
        "ledger.award.granted",
        extra={"account_id": account_id, "points": awarded, "balance": new_total},
    )
    return AwardResponse(
        wallet_address=account_id,
        awarded_points=awarded,
        new_total_points=new_total,
        content_type=payload.content_type,
        content_credits=content_credits,
    )


def _invalid(details: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"status": "error", "failure_reason": "invalid_input", "details": details},
    )
