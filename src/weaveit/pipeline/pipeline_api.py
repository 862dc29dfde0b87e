"""HTTP routes for script-to-media generation."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..jobs.jobs_models import JobKind
from ..ledger.ledger_errors import LedgerUnavailableError
from .orchestrator import PipelineOrchestrator
from .pipeline_errors import (
    InsufficientCreditError,
    InvalidInputError,
    PipelineError,
    PipelineStageError,
)
from .pipeline_models import SubmissionRequest
from .pipeline_schemas import GenerateRequest, GenerateResponse

router = APIRouter(prefix="/api", tags=["generate"])
logger = logging.getLogger(__name__)


def get_orchestrator(request: Request) -> PipelineOrchestrator:
    """Fetch the pipeline orchestrator from application state."""
    try:
        return request.app.state.orchestrator  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("PipelineOrchestrator is not configured") from exc


@router.post("/generate", response_model=GenerateResponse)
async def generate_video(
    payload: GenerateRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> GenerateResponse:
    """Generate a narrated video from the submitted script."""
    return await _submit(orchestrator, payload, JobKind.VIDEO)


@router.post("/generate/audio", response_model=GenerateResponse)
async def generate_audio(
    payload: GenerateRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> GenerateResponse:
    """Generate narration audio only."""
    return await _submit(orchestrator, payload, JobKind.AUDIO)


async def _submit(
    orchestrator: PipelineOrchestrator,
    payload: GenerateRequest,
    kind: JobKind,
) -> GenerateResponse:
    submission = SubmissionRequest(
        account_id=payload.wallet_address or "",
        script=payload.script or "",
        kind=kind,
        title=payload.title,
    )
    try:
        result = await orchestrator.submit(submission)
    except InvalidInputError as exc:
        logger.warning("generate.invalid_input", extra={"kind": kind.value, "error": str(exc)})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "status": "error",
                "failure_reason": "invalid_input",
                "details": str(exc),
            },
        ) from exc
    except InsufficientCreditError as exc:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={
                "status": "error",
                "failure_reason": "insufficient_credit",
                "required": exc.required,
                "details": "Please purchase credits or wait for trial replenishment",
            },
        ) from exc
    except PipelineStageError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "status": "error",
                "failure_reason": "internal",
                "job_id": exc.job_id,
            },
        ) from exc
    except (PipelineError, LedgerUnavailableError) as exc:
        logger.error("generate.internal_error", extra={"kind": kind.value, "error": str(exc)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"status": "error", "failure_reason": "internal"},
        ) from exc

    return GenerateResponse(
        job_id=result.job_id,
        artifact_id=result.artifact_id,
        status=result.status.value,
        credits_deducted=result.credits_deducted,
        remaining_credits=result.remaining_credits,
    )
