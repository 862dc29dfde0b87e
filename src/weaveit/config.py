"""Application configuration builder."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .db.db_init import SchemaFeatures, init_db

DEFAULT_PAYMENT_TIERS = "5:30,10:80,20:150"


@dataclass(slots=True)
class MediaPaths:
    root: Path
    artifacts: Path


@dataclass(frozen=True, slots=True)
class TrialPolicy:
    """Size and duration of the grant given to newly provisioned accounts."""

    credits: int = 28
    days: int = 7


@dataclass(frozen=True, slots=True)
class CreditPricing:
    """Per-kind job costs and the payment tier to credit mapping."""

    job_costs: Mapping[str, int] = field(
        default_factory=lambda: {"video": 2, "audio": 1}
    )
    payment_tiers: Mapping[str, int] = field(
        default_factory=lambda: parse_payment_tiers(DEFAULT_PAYMENT_TIERS)
    )

    def cost_of(self, kind: str) -> int:
        try:
            return self.job_costs[kind]
        except KeyError:
            raise ValueError(f"No price configured for job kind '{kind}'") from None

    def credits_for_tier(self, tier: str) -> int | None:
        return self.payment_tiers.get(str(tier).strip())


@dataclass(slots=True)
class ProviderSettings:
    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    enhancer_model: str = "gpt-4o-mini"
    tts_model: str = "tts-1"
    tts_voice: str = "alloy"
    render_service_url: str | None = None
    timeout_seconds: float = 120.0


@dataclass(slots=True)
class AppConfig:
    media_paths: MediaPaths
    database_url: str
    engine: Engine
    session_factory: sessionmaker[Session]
    schema_features: SchemaFeatures
    trial_policy: TrialPolicy
    pricing: CreditPricing
    providers: ProviderSettings
    payment_confirmation_token: str | None = None
    stage_timeout_seconds: float | None = None


def parse_payment_tiers(raw: str) -> dict[str, int]:
    """Parse ``"5:30,10:80"`` into a validated tier mapping."""
    tiers: dict[str, int] = {}
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        tier, sep, credits = chunk.partition(":")
        tier = tier.strip()
        if not sep or not tier:
            raise ValueError(f"Malformed payment tier entry '{chunk}'")
        try:
            value = int(credits)
        except ValueError:
            raise ValueError(f"Payment tier '{tier}' has non-integer credits") from None
        if value <= 0:
            raise ValueError(f"Payment tier '{tier}' must grant a positive amount")
        if tier in tiers:
            raise ValueError(f"Payment tier '{tier}' is declared twice")
        tiers[tier] = value
    if not tiers:
        raise ValueError("At least one payment tier must be configured")
    return tiers


def _positive_int(name: str, default: int) -> int:
    value = int(os.getenv(name, default))
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return float(raw)


def _ensure_media_paths(paths: MediaPaths) -> None:
    paths.root.mkdir(parents=True, exist_ok=True)
    paths.artifacts.mkdir(parents=True, exist_ok=True)


def load_config() -> AppConfig:
    """Load configuration from environment (SQLite by default)."""
    root = Path(os.getenv("MEDIA_ROOT", "media"))
    media_paths = MediaPaths(root=root, artifacts=root / "artifacts")
    _ensure_media_paths(media_paths)

    trial_policy = TrialPolicy(
        credits=_positive_int("TRIAL_CREDITS", 28),
        days=_positive_int("TRIAL_DAYS", 7),
    )
    pricing = CreditPricing(
        job_costs={
            "video": _positive_int("VIDEO_COST", 2),
            "audio": _positive_int("AUDIO_COST", 1),
        },
        payment_tiers=parse_payment_tiers(
            os.getenv("PAYMENT_TIERS", DEFAULT_PAYMENT_TIERS)
        ),
    )
    providers = ProviderSettings(
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
        enhancer_model=os.getenv("ENHANCER_MODEL", "gpt-4o-mini"),
        tts_model=os.getenv("TTS_MODEL", "tts-1"),
        tts_voice=os.getenv("TTS_VOICE", "alloy"),
        render_service_url=os.getenv("RENDER_SERVICE_URL"),
        timeout_seconds=float(os.getenv("PROVIDER_TIMEOUT_SECONDS", 120)),
    )

    database_url = os.getenv("DATABASE_URL", "sqlite:///weaveit.db")
    engine = create_engine(database_url, future=True, pool_pre_ping=True)
    session_factory: sessionmaker[Session] = sessionmaker(bind=engine, expire_on_commit=False)
    schema_features = init_db(engine)

    return AppConfig(
        media_paths=media_paths,
        database_url=database_url,
        engine=engine,
        session_factory=session_factory,
        schema_features=schema_features,
        trial_policy=trial_policy,
        pricing=pricing,
        providers=providers,
        payment_confirmation_token=os.getenv("PAYMENT_CONFIRMATION_TOKEN") or None,
        stage_timeout_seconds=_optional_float("STAGE_TIMEOUT_SECONDS"),
    )
