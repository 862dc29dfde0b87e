"""Artifact data models."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

CONTENT_TYPES = {
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
}


@dataclass(slots=True)
class ArtifactMeta:
    """Descriptive fields supplied by the pipeline when storing a payload."""

    content_kind: str
    format: str
    duration_sec: float | None = None

    @property
    def content_type(self) -> str:
        return CONTENT_TYPES.get(self.format.lower(), "application/octet-stream")


@dataclass(slots=True)
class Artifact:
    artifact_id: str
    job_id: str
    account_id: str
    content_kind: str
    format: str
    content_type: str
    size_bytes: int
    duration_sec: float | None
    path: Path
    created_at: datetime
    title: str | None = None


@dataclass(slots=True)
class StoredArtifact:
    artifact: Artifact
    payload: bytes
