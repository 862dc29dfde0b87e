"""Credit-gated orchestration of script-to-media generation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import TypeVar

import structlog

from ..artifacts.artifact_models import ArtifactMeta
from ..artifacts.artifact_store import ArtifactStore
from ..config import CreditPricing
from ..db.db_models import ACCOUNT_ID_MAX_LENGTH, TITLE_MAX_LENGTH
from ..jobs.job_registry import JobRegistry
from ..jobs.jobs_models import JobKind, JobStatus, JobStatusView
from ..ledger.ledger_service import Ledger
from ..ledger.trial_manager import TrialManager
from ..providers.providers_base import ScriptEnhancer, SpeechSynthesizer, VideoRenderer
from .pipeline_errors import (
    InsufficientCreditError,
    InvalidInputError,
    PipelineError,
    PipelineStageError,
    ProviderExecutionError,
)
from .pipeline_models import PipelineStage, SubmissionRequest, SubmissionResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class PipelineOrchestrator:
    """Drive a submission from admission to a terminal job state.

    Credit is reserved before any job exists. Once the job is created every
    failure is captured into the job record and surfaced as
    :class:`PipelineStageError`; the reserved credit is not refunded. A
    cancelled submission marks its job failed before the cancellation
    propagates.
    """

    ledger: Ledger
    trial_manager: TrialManager
    job_registry: JobRegistry
    artifact_store: ArtifactStore
    enhancer: ScriptEnhancer
    synthesizer: SpeechSynthesizer
    renderer: VideoRenderer
    pricing: CreditPricing = field(default_factory=CreditPricing)
    stage_timeout_seconds: float | None = None
    log: logging.Logger = field(default_factory=lambda: logger)

    async def submit(self, request: SubmissionRequest) -> SubmissionResult:
        account_id, script, kind, title = self._validate(request)
        with structlog.contextvars.bound_contextvars(
            account_id=account_id, kind=kind.value
        ):
            return await self._run(account_id, script, kind, title)

    async def _run(
        self, account_id: str, script: str, kind: JobKind, title: str | None
    ) -> SubmissionResult:
        self.log.info(
            "pipeline.submit.start",
            extra={"account_id": account_id, "kind": kind.value, "title": title},
        )

        self.ledger.ensure(account_id)
        self._settle_trial(account_id)

        cost = self.pricing.cost_of(kind.value)
        reservation = self.ledger.deduct(account_id, cost)
        if reservation.new_balance is None:
            self.log.warning(
                "pipeline.submit.insufficient_credit",
                extra={"account_id": account_id, "required": cost},
            )
            raise InsufficientCreditError(account_id, cost)

        job_id: str | None = None
        stage = PipelineStage.CREATE_JOB
        try:
            job = self.job_registry.create_pending(
                account_id=account_id,
                kind=kind,
                script_text=script,
                title=title,
            )
            job_id = job.job_id

            stage = PipelineStage.START
            self.job_registry.mark_generating(job_id)

            stage = PipelineStage.ENHANCE
            narration = await self._run_stage(stage, self.enhancer.enhance(script))

            stage = PipelineStage.SYNTHESIZE
            speech = await self._run_stage(stage, self.synthesizer.synthesize(narration))
            self.log.info(
                "pipeline.audio.generated",
                extra={"job_id": job_id, "size_bytes": len(speech.payload)},
            )

            if kind is JobKind.VIDEO:
                stage = PipelineStage.RENDER
                video = await self._run_stage(
                    stage, self.renderer.render(script, speech.payload)
                )
                payload = video.payload
                meta = ArtifactMeta(
                    content_kind=JobKind.VIDEO.value,
                    format=video.format,
                    duration_sec=video.duration_sec or speech.duration_sec,
                )
            else:
                payload = speech.payload
                meta = ArtifactMeta(
                    content_kind=JobKind.AUDIO.value,
                    format=speech.format,
                    duration_sec=speech.duration_sec,
                )

            stage = PipelineStage.STORE
            artifact_id = self.artifact_store.put(job_id, account_id, payload, meta)

            # status flips only after the artifact is durable
            stage = PipelineStage.COMPLETE
            self.job_registry.mark_completed(job_id)
        except asyncio.CancelledError:
            if job_id is not None:
                self._record_failure(job_id, stage, "cancelled")
            raise
        except Exception as exc:
            message = _describe(exc)
            if job_id is None:
                self.log.exception(
                    "pipeline.job.create_failed",
                    extra={"account_id": account_id, "kind": kind.value},
                )
                raise PipelineError(f"Could not create job: {message}") from exc
            self._record_failure(job_id, stage, message)
            raise PipelineStageError(job_id, stage, message) from exc

        self.log.info(
            "pipeline.job.completed",
            extra={
                "job_id": job_id,
                "artifact_id": artifact_id,
                "account_id": account_id,
                "credits_deducted": cost,
            },
        )
        return SubmissionResult(
            job_id=job_id,
            artifact_id=artifact_id,
            status=JobStatus.COMPLETED,
            credits_deducted=cost,
            remaining_credits=reservation.new_balance,
        )

    def job_status(self, job_id: str) -> JobStatusView:
        """Return status fields plus whether the artifact can be fetched."""
        job = self.job_registry.get_job(job_id)
        return JobStatusView(
            job_id=job.job_id,
            status=job.status,
            error_message=job.error_message,
            created_at=job.created_at,
            updated_at=job.updated_at,
            artifact_available=self.artifact_store.exists_for_job(job_id),
        )

    def _validate(self, request: SubmissionRequest) -> tuple[str, str, JobKind, str | None]:
        account_id = request.account_id.strip() if isinstance(request.account_id, str) else ""
        if not account_id:
            raise InvalidInputError("Missing account identifier")
        if len(account_id) > ACCOUNT_ID_MAX_LENGTH:
            raise InvalidInputError(
                f"Account identifier exceeds {ACCOUNT_ID_MAX_LENGTH} characters"
            )
        script = request.script if isinstance(request.script, str) else ""
        if not script.strip():
            raise InvalidInputError("Missing script")
        try:
            kind = JobKind(request.kind)
        except ValueError:
            raise InvalidInputError(f"Unsupported job kind '{request.kind}'") from None
        title = request.title.strip() if isinstance(request.title, str) else None
        if title and len(title) > TITLE_MAX_LENGTH:
            raise InvalidInputError(f"Title exceeds {TITLE_MAX_LENGTH} characters")
        return account_id, script, kind, title or None

    def _settle_trial(self, account_id: str) -> None:
        try:
            self.trial_manager.settle(account_id)
        except Exception:
            # bookkeeping faults must not block admission
            self.log.exception(
                "pipeline.trial.settle_failed", extra={"account_id": account_id}
            )

    async def _run_stage(self, stage: str, call: Awaitable[T]) -> T:
        if self.stage_timeout_seconds is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=self.stage_timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise ProviderExecutionError(
                f"{stage} did not finish within {self.stage_timeout_seconds} seconds"
            ) from exc

    def _record_failure(self, job_id: str, stage: str, message: str) -> None:
        self.log.error(
            "pipeline.job.failed",
            extra={"job_id": job_id, "stage": stage, "error": message},
        )
        try:
            self.job_registry.mark_failed(job_id, message)
        except Exception:
            self.log.exception(
                "pipeline.job.mark_failed_error", extra={"job_id": job_id, "stage": stage}
            )


def _describe(exc: BaseException) -> str:
    text = str(exc).strip()
    return text or exc.__class__.__name__
