"""Abstract collaborator definitions used by the pipeline."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(slots=True)
class SpeechResult:
    """Audio produced by a speech synthesizer."""

    payload: bytes
    format: str = "mp3"
    duration_sec: float | None = None


@dataclass(slots=True)
class RenderResult:
    """Video produced by a renderer."""

    payload: bytes
    format: str = "mp4"
    duration_sec: float | None = None


class ScriptEnhancer(ABC):
    """Turn a raw script into narration text."""

    @abstractmethod
    async def enhance(self, script: str) -> str:
        """Return narration text for ``script``."""


class SpeechSynthesizer(ABC):
    """Turn narration text into audio bytes."""

    @abstractmethod
    async def synthesize(self, text: str) -> SpeechResult:
        """Return synthesized audio for ``text``."""


class VideoRenderer(ABC):
    """Combine the original script and narration audio into a video."""

    @abstractmethod
    async def render(self, script: str, audio: bytes) -> RenderResult:
        """Return rendered video bytes."""
