"""Endpoints serving stored artifacts."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse, Response

from ..exceptions import NotFoundError
from .artifact_models import StoredArtifact
from .artifact_store import ArtifactStore

logger = logging.getLogger(__name__)


def build_artifacts_router(store: ArtifactStore) -> APIRouter:
    router = APIRouter(prefix="/api", tags=["artifacts"])

    @router.get("/videos/job/{job_id}")
    def get_artifact_by_job(job_id: str):
        try:
            stored = store.get_by_job(job_id)
        except NotFoundError:
            logger.debug("artifacts.not_found", extra={"job_id": job_id})
            return _not_found()
        return _payload_response(stored)

    @router.get("/videos/{artifact_id}")
    def get_artifact(artifact_id: str):
        try:
            stored = store.get_by_id(artifact_id)
        except NotFoundError:
            logger.debug("artifacts.not_found", extra={"artifact_id": artifact_id})
            return _not_found()
        return _payload_response(stored)

    @router.get("/wallet/{account_id}/videos")
    def list_account_content(account_id: str):
        artifacts = store.list_for_account(account_id)
        return {
            "wallet_address": account_id,
            "count": len(artifacts),
            "videos": [
                {
                    "video_id": artifact.artifact_id,
                    "job_id": artifact.job_id,
                    "title": artifact.title,
                    "content_type": artifact.content_kind,
                    "format": artifact.format,
                    "duration_sec": artifact.duration_sec,
                    "created_at": artifact.created_at.isoformat(),
                    "video_url": f"/api/videos/{artifact.artifact_id}",
                }
                for artifact in artifacts
            ],
        }

    return router


def _payload_response(stored: StoredArtifact) -> Response:
    artifact = stored.artifact
    filename = f"{artifact.job_id}.{artifact.format}"
    return Response(
        content=stored.payload,
        media_type=artifact.content_type,
        headers={
            "Content-Disposition": f'inline; filename="{filename}"',
        },
    )


def _not_found() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"status": "error", "failure_reason": "artifact_not_found"},
    )
