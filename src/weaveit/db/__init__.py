"""Database models and schema helpers."""

from .db_init import SchemaFeatures, init_db, resolve_schema_features
from .db_models import AccountModel, ArtifactModel, Base, GenerationJobModel

__all__ = [
    "Base",
    "AccountModel",
    "GenerationJobModel",
    "ArtifactModel",
    "SchemaFeatures",
    "init_db",
    "resolve_schema_features",
]
