"""Database initialization helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from .db_models import Base

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SchemaFeatures:
    """Optional schema capabilities resolved once at startup."""

    trial_expiry: bool = True


def init_db(engine: Engine) -> SchemaFeatures:
    """Create missing tables and report which optional columns exist."""
    Base.metadata.create_all(engine)
    return resolve_schema_features(engine)


def resolve_schema_features(engine: Engine) -> SchemaFeatures:
    """Inspect the live schema for columns older deployments may lack."""
    inspector = inspect(engine)
    if not inspector.has_table("account"):
        return SchemaFeatures(trial_expiry=False)
    columns = {column["name"] for column in inspector.get_columns("account")}
    features = SchemaFeatures(trial_expiry="trial_expires_at" in columns)
    if not features.trial_expiry:
        logger.warning("db.schema.trial_expiry_missing")
    return features
