"""HTTP routes for job status queries."""

from fastapi import APIRouter, Depends, HTTPException, status

from ..exceptions import NotFoundError
from ..pipeline.orchestrator import PipelineOrchestrator
from ..pipeline.pipeline_api import get_orchestrator
from .jobs_schemas import JobStatusResponse

router = APIRouter(prefix="/api/videos", tags=["jobs"])


@router.get("/status/{job_id}", response_model=JobStatusResponse)
def read_job_status(
    job_id: str,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> JobStatusResponse:
    try:
        view = orchestrator.job_status(job_id)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"status": "error", "failure_reason": "job_not_found"},
        ) from None

    return JobStatusResponse(
        job_id=view.job_id,
        status=view.status.value,
        ready=view.ready,
        error=view.error_message,
        created_at=view.created_at,
        updated_at=view.updated_at,
        artifact_available=view.artifact_available,
    )
