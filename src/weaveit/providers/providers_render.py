"""HTTP client for the external video rendering service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from ..pipeline.pipeline_errors import ProviderExecutionError
from .providers_base import RenderResult, VideoRenderer

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class HttpVideoRenderer(VideoRenderer):
    """Post the script and narration audio, receive an encoded video."""

    service_url: str | None
    timeout_seconds: float = 300.0
    output_format: str = "mp4"
    log: logging.Logger = field(default_factory=lambda: logger)

    async def render(self, script: str, audio: bytes) -> RenderResult:
        if not self.service_url:
            raise ProviderExecutionError("RENDER_SERVICE_URL is not configured")

        files = {"audio": ("narration.mp3", audio, "audio/mpeg")}
        data = {"script": script, "format": self.output_format}
        self.log.info(
            "render.request.start",
            extra={"script_len": len(script), "audio_bytes": len(audio)},
        )
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(self.service_url, data=data, files=files)
        except httpx.HTTPError as exc:
            raise ProviderExecutionError(f"Render service HTTP error: {exc}") from exc

        if response.status_code != 200:
            raise ProviderExecutionError(
                f"Render service failed (status={response.status_code}): {response.text[:200]}"
            )
        video = response.content
        if not video:
            raise ProviderExecutionError("Render service returned an empty video")

        duration = response.headers.get("X-Duration-Seconds")
        try:
            duration_sec = float(duration) if duration else None
        except ValueError:
            duration_sec = None
        self.log.info(
            "render.request.success",
            extra={"size_bytes": len(video), "duration_sec": duration_sec},
        )
        return RenderResult(payload=video, format=self.output_format, duration_sec=duration_sec)
