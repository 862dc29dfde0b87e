"""Persistence layer for generation jobs."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..db.db_models import GenerationJobModel
from ..exceptions import NotFoundError, ensure_found, handle_sqlalchemy_errors
from ..utils.clock import utcnow
from .jobs_errors import InvalidTransitionError
from .jobs_models import ALLOWED_TRANSITIONS, JobKind, JobRecord, JobStatus

logger = logging.getLogger(__name__)


class JobRegistry:
    """Manage generation_job records and their state machine.

    Status and error text are the only fields mutable after creation; the
    script text is dropped as part of reaching ``completed``.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    def create_pending(
        self,
        *,
        account_id: str,
        kind: JobKind | str,
        script_text: str,
        title: str | None = None,
        job_id: str | None = None,
    ) -> JobRecord:
        job_id = job_id or uuid.uuid4().hex
        now = self._clock()
        model = GenerationJobModel(
            job_id=job_id,
            account_id=account_id,
            kind=JobKind(kind).value,
            script_text=script_text,
            title=title or None,
            status=JobStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        with handle_sqlalchemy_errors(entity="generation_job"):
            with self._session_factory() as session:
                session.add(model)
                session.commit()
                record = self._to_record(model)
        logger.info(
            "jobs.created",
            extra={"job_id": job_id, "account_id": account_id, "kind": record.kind.value},
        )
        return record

    def mark_generating(self, job_id: str) -> None:
        self._transition(job_id, JobStatus.GENERATING)

    def mark_completed(self, job_id: str) -> None:
        self._transition(job_id, JobStatus.COMPLETED, script_text=None)

    def mark_failed(self, job_id: str, error_message: str) -> None:
        message = (error_message or "").strip()
        if not message:
            raise ValueError("A failed job needs a non-empty error message")
        self._transition(job_id, JobStatus.FAILED, error_message=message)

    def get_job(self, job_id: str) -> JobRecord:
        with handle_sqlalchemy_errors(entity="generation_job"):
            with self._session_factory() as session:
                model = ensure_found(
                    session.get(GenerationJobModel, job_id),
                    entity="Job",
                    identifier=job_id,
                )
                return self._to_record(model)

    def list_jobs(self, account_id: str, *, limit: int = 100) -> list[JobRecord]:
        """Return the account's jobs, newest first."""
        with handle_sqlalchemy_errors(entity="generation_job"):
            with self._session_factory() as session:
                rows = session.scalars(
                    select(GenerationJobModel)
                    .where(GenerationJobModel.account_id == account_id)
                    .order_by(GenerationJobModel.created_at.desc())
                    .limit(limit)
                ).all()
                return [self._to_record(row) for row in rows]

    def _transition(self, job_id: str, target: JobStatus, **changes: Any) -> None:
        allowed = [status.value for status in ALLOWED_TRANSITIONS[target]]
        stmt = (
            update(GenerationJobModel)
            .where(
                GenerationJobModel.job_id == job_id,
                GenerationJobModel.status.in_(allowed),
            )
            .values(status=target.value, updated_at=self._clock(), **changes)
            .execution_options(synchronize_session=False)
        )
        with handle_sqlalchemy_errors(entity="generation_job"):
            with self._session_factory() as session:
                result = session.execute(stmt)
                if result.rowcount == 0:
                    session.rollback()
                    current = session.scalar(
                        select(GenerationJobModel.status).where(
                            GenerationJobModel.job_id == job_id
                        )
                    )
                    if current is None:
                        raise NotFoundError(f"Job '{job_id}' not found")
                    terminal = JobStatus(current).is_terminal
                    logger.warning(
                        "jobs.transition.rejected",
                        extra={
                            "job_id": job_id,
                            "current": current,
                            "target": target.value,
                            "terminal": terminal,
                        },
                    )
                    raise InvalidTransitionError(
                        job_id, current, target.value, terminal=terminal
                    )
                session.commit()
        logger.info("jobs.transition", extra={"job_id": job_id, "status": target.value})

    @staticmethod
    def _to_record(model: GenerationJobModel) -> JobRecord:
        return JobRecord(
            job_id=model.job_id,
            account_id=model.account_id,
            kind=JobKind(model.kind),
            status=JobStatus(model.status),
            title=model.title,
            script_text=model.script_text,
            error_message=model.error_message,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
