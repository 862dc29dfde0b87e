"""Dependency wiring helpers."""

from fastapi import FastAPI

from .artifacts.artifact_store import ArtifactStore, PayloadFiles
from .artifacts.artifacts_api import build_artifacts_router
from .config import AppConfig
from .health_api import build_health_router
from .jobs.job_registry import JobRegistry
from .jobs.jobs_api import router as jobs_router
from .ledger.ledger_api import router as ledger_router
from .ledger.ledger_service import Ledger
from .ledger.trial_manager import TrialManager
from .pipeline.orchestrator import PipelineOrchestrator
from .pipeline.pipeline_api import router as pipeline_router
from .providers.providers_factory import Collaborators, create_collaborators


def include_routers(
    app: FastAPI,
    config: AppConfig,
    collaborators: Collaborators | None = None,
) -> None:
    """Mount module routers and attach services."""
    ledger = Ledger(
        config.session_factory,
        trial_policy=config.trial_policy,
        trial_tracking=config.schema_features.trial_expiry,
    )
    trial_manager = TrialManager(ledger=ledger, trial_policy=config.trial_policy)
    job_registry = JobRegistry(config.session_factory)
    artifact_store = ArtifactStore(config.session_factory, PayloadFiles(config.media_paths))
    collaborators = collaborators or create_collaborators(config.providers)

    orchestrator = PipelineOrchestrator(
        ledger=ledger,
        trial_manager=trial_manager,
        job_registry=job_registry,
        artifact_store=artifact_store,
        enhancer=collaborators.enhancer,
        synthesizer=collaborators.synthesizer,
        renderer=collaborators.renderer,
        pricing=config.pricing,
        stage_timeout_seconds=config.stage_timeout_seconds,
    )

    app.state.config = config
    app.state.ledger = ledger
    app.state.trial_manager = trial_manager
    app.state.job_registry = job_registry
    app.state.artifact_store = artifact_store
    app.state.orchestrator = orchestrator

    app.include_router(pipeline_router)
    app.include_router(jobs_router)
    app.include_router(ledger_router)
    app.include_router(build_artifacts_router(artifact_store))
    app.include_router(build_health_router(ledger))
