"""Write-once storage for generated audio and video payloads."""

from __future__ import annotations

import hashlib
import logging
import re
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import MediaPaths
from ..db.db_models import ArtifactModel, GenerationJobModel
from ..exceptions import (
    IntegrityConstraintViolation,
    NotFoundError,
    RepositoryError,
    handle_sqlalchemy_errors,
)
from ..utils.clock import utcnow
from .artifact_models import Artifact, ArtifactMeta, StoredArtifact

logger = logging.getLogger(__name__)

_UNSAFE_SEGMENT = re.compile(r"[^A-Za-z0-9_.-]")


@dataclass(slots=True)
class PayloadFiles:
    """Manage artifact payload files on disk."""

    paths: MediaPaths

    def artifact_dir(self, account_id: str, job_id: str) -> Path:
        return self.paths.artifacts / _safe_segment(account_id) / _safe_segment(job_id)

    def save_payload(
        self, account_id: str, job_id: str, artifact_id: str, data: bytes, suffix: str
    ) -> Path:
        directory = self.artifact_dir(account_id, job_id)
        directory.mkdir(parents=True, exist_ok=True)
        sanitized = _safe_segment(suffix.lstrip(".")) if suffix.strip(".") else "bin"
        path = directory / f"{artifact_id}.{sanitized}"
        path.write_bytes(data)
        return path

    def remove_payload(self, path: Path) -> None:
        path.unlink(missing_ok=True)
        if path.parent.is_dir() and not any(path.parent.iterdir()):
            path.parent.rmdir()


class ArtifactStore:
    """Persist job output as a payload file plus an ``artifact`` row.

    Only ``put`` and the read methods are exposed; stored artifacts are never
    updated or removed through this class.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        files: PayloadFiles,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._files = files
        self._clock = clock

    def put(
        self,
        job_id: str,
        account_id: str,
        payload: bytes,
        meta: ArtifactMeta,
    ) -> str:
        """Store ``payload`` for an existing job and return the artifact id."""
        if not payload:
            raise ValueError("Refusing to store an empty payload")

        with handle_sqlalchemy_errors(entity="artifact"):
            with self._session_factory() as session:
                if session.get(GenerationJobModel, job_id) is None:
                    raise NotFoundError(f"Job '{job_id}' not found")
                already = session.scalar(
                    select(ArtifactModel.artifact_id).where(ArtifactModel.job_id == job_id)
                )
                if already is not None:
                    raise IntegrityConstraintViolation(
                        f"artifact: job '{job_id}' already has artifact '{already}'"
                    )

        artifact_id = uuid.uuid4().hex
        path = self._files.save_payload(account_id, job_id, artifact_id, payload, meta.format)
        try:
            with handle_sqlalchemy_errors(entity="artifact"):
                with self._session_factory() as session:
                    session.add(
                        ArtifactModel(
                            artifact_id=artifact_id,
                            job_id=job_id,
                            account_id=account_id,
                            content_kind=meta.content_kind,
                            format=meta.format,
                            content_type=meta.content_type,
                            size_bytes=len(payload),
                            duration_sec=meta.duration_sec,
                            path=str(path),
                            checksum=hashlib.sha256(payload).hexdigest(),
                            created_at=self._clock(),
                        )
                    )
                    session.commit()
        except RepositoryError:
            self._files.remove_payload(path)
            raise

        logger.info(
            "artifacts.stored",
            extra={
                "artifact_id": artifact_id,
                "job_id": job_id,
                "account_id": account_id,
                "size_bytes": len(payload),
                "content_kind": meta.content_kind,
            },
        )
        return artifact_id

    def get_by_job(self, job_id: str) -> StoredArtifact:
        return self._load(ArtifactModel.job_id == job_id, f"job '{job_id}'")

    def get_by_id(self, artifact_id: str) -> StoredArtifact:
        return self._load(ArtifactModel.artifact_id == artifact_id, f"'{artifact_id}'")

    def exists_for_job(self, job_id: str) -> bool:
        with handle_sqlalchemy_errors(entity="artifact"):
            with self._session_factory() as session:
                found = session.scalar(
                    select(ArtifactModel.artifact_id).where(ArtifactModel.job_id == job_id)
                )
        return found is not None

    def list_for_account(self, account_id: str) -> list[Artifact]:
        """Return the account's artifacts with job titles, newest first."""
        with handle_sqlalchemy_errors(entity="artifact"):
            with self._session_factory() as session:
                rows = session.execute(
                    select(ArtifactModel, GenerationJobModel.title)
                    .outerjoin(
                        GenerationJobModel,
                        GenerationJobModel.job_id == ArtifactModel.job_id,
                    )
                    .where(ArtifactModel.account_id == account_id)
                    .order_by(ArtifactModel.created_at.desc())
                ).all()
                return [self._to_domain(model, title) for model, title in rows]

    def _load(self, criterion, label: str) -> StoredArtifact:
        with handle_sqlalchemy_errors(entity="artifact"):
            with self._session_factory() as session:
                model = session.scalar(select(ArtifactModel).where(criterion))
                if model is None:
                    raise NotFoundError(f"Artifact for {label} not found")
                artifact = self._to_domain(model)

        try:
            payload = artifact.path.read_bytes()
        except FileNotFoundError:
            logger.warning(
                "artifacts.missing_file",
                extra={"artifact_id": artifact.artifact_id, "path": str(artifact.path)},
            )
            raise NotFoundError(f"Artifact payload for {label} is missing") from None
        return StoredArtifact(artifact=artifact, payload=payload)

    @staticmethod
    def _to_domain(model: ArtifactModel, title: str | None = None) -> Artifact:
        return Artifact(
            artifact_id=model.artifact_id,
            job_id=model.job_id,
            account_id=model.account_id,
            content_kind=model.content_kind,
            format=model.format,
            content_type=model.content_type,
            size_bytes=model.size_bytes,
            duration_sec=model.duration_sec,
            path=Path(model.path),
            created_at=model.created_at,
            title=title,
        )


def _safe_segment(value: str) -> str:
    cleaned = _UNSAFE_SEGMENT.sub("_", value)
    if cleaned in {"", ".", ".."}:
        return "_"
    return cleaned
