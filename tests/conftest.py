from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.weaveit.artifacts.artifact_store import ArtifactStore, PayloadFiles
from src.weaveit.config import (
    AppConfig,
    CreditPricing,
    MediaPaths,
    ProviderSettings,
    TrialPolicy,
)
from src.weaveit.db.db_init import SchemaFeatures, init_db
from src.weaveit.jobs.job_registry import JobRegistry
from src.weaveit.ledger.ledger_service import Ledger
from src.weaveit.ledger.trial_manager import TrialManager


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 3, 1, 12, 0, 0))


@pytest.fixture
def engine():
    # one shared connection so TestClient worker threads see the same database
    engine = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def media_paths(tmp_path: Path) -> MediaPaths:
    root = tmp_path / "media"
    paths = MediaPaths(root=root, artifacts=root / "artifacts")
    paths.artifacts.mkdir(parents=True)
    return paths


@pytest.fixture
def trial_policy() -> TrialPolicy:
    return TrialPolicy(credits=28, days=7)


@pytest.fixture
def ledger(session_factory, trial_policy, clock) -> Ledger:
    return Ledger(session_factory, trial_policy=trial_policy, clock=clock)


@pytest.fixture
def trial_manager(ledger, trial_policy, clock) -> TrialManager:
    return TrialManager(ledger=ledger, trial_policy=trial_policy, clock=clock)


@pytest.fixture
def job_registry(session_factory, clock) -> JobRegistry:
    return JobRegistry(session_factory, clock=clock)


@pytest.fixture
def artifact_store(session_factory, media_paths, clock) -> ArtifactStore:
    return ArtifactStore(session_factory, PayloadFiles(media_paths), clock=clock)


@pytest.fixture
def app_config(engine, session_factory, media_paths, trial_policy) -> AppConfig:
    return AppConfig(
        media_paths=media_paths,
        database_url="sqlite://",
        engine=engine,
        session_factory=session_factory,
        schema_features=SchemaFeatures(trial_expiry=True),
        trial_policy=trial_policy,
        pricing=CreditPricing(),
        providers=ProviderSettings(),
    )
