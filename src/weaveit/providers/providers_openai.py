"""OpenAI-compatible script enhancer and speech synthesizer."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..pipeline.pipeline_errors import ProviderExecutionError
from .providers_base import ScriptEnhancer, SpeechResult, SpeechSynthesizer

logger = logging.getLogger(__name__)

NARRATION_PROMPT = (
    "You turn technical scripts into narration for an educational video. "
    "Explain the script step by step in plain spoken English, without markdown, "
    "code fences or bullet points. Keep it concise enough to be read aloud."
)

RETRYABLE_STATUSES = {429, 500, 502, 503}


@dataclass(slots=True)
class OpenAIClient:
    api_key: str | None
    base_url: str = "https://api.openai.com/v1"
    timeout_seconds: float = 120.0
    max_attempts: int = 2
    backoff_seconds: float = 2.0

    def headers(self) -> dict[str, str]:
        if not self.api_key:
            raise ProviderExecutionError("OPENAI_API_KEY is not configured")
        return {"Authorization": f"Bearer {self.api_key}"}

    async def post_json(self, path: str, payload: dict[str, Any], *, label: str) -> httpx.Response:
        headers = self.headers()
        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        for attempt in range(1, self.max_attempts + 1):
            try:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.post(url, headers=headers, json=payload)
            except httpx.HTTPError as exc:
                if attempt >= self.max_attempts:
                    raise ProviderExecutionError(f"{label} HTTP error: {exc}") from exc
                await asyncio.sleep(self.backoff_seconds)
                continue

            if response.status_code == 200:
                return response

            if response.status_code not in RETRYABLE_STATUSES or attempt >= self.max_attempts:
                detail = _extract_error(response)
                logger.error(
                    "%s.response.error status=%s detail=%s",
                    label,
                    response.status_code,
                    detail,
                    extra={"http_status": response.status_code},
                )
                raise ProviderExecutionError(
                    f"{label} request failed (status={response.status_code}): {detail}"
                )
            await asyncio.sleep(self.backoff_seconds)

        raise ProviderExecutionError(f"{label} request failed after retries")


@dataclass(slots=True)
class OpenAIScriptEnhancer(ScriptEnhancer):
    """Rewrite scripts into narration with a chat completion."""

    client: OpenAIClient
    model: str = "gpt-4o-mini"
    system_prompt: str = NARRATION_PROMPT
    log: logging.Logger = field(default_factory=lambda: logger)

    async def enhance(self, script: str) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": script},
            ],
        }
        self.log.info(
            "enhancer.request.start",
            extra={"model": self.model, "script_len": len(script)},
        )
        response = await self.client.post_json("chat/completions", payload, label="enhancer")
        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ProviderExecutionError("Enhancer response is malformed") from exc
        narration = (content or "").strip()
        if not narration:
            raise ProviderExecutionError("Enhancer returned empty narration")
        return narration


@dataclass(slots=True)
class OpenAISpeechSynthesizer(SpeechSynthesizer):
    """Generate narration audio via the ``audio/speech`` endpoint."""

    client: OpenAIClient
    model: str = "tts-1"
    voice: str = "alloy"
    response_format: str = "mp3"
    log: logging.Logger = field(default_factory=lambda: logger)

    async def synthesize(self, text: str) -> SpeechResult:
        payload = {
            "model": self.model,
            "voice": self.voice,
            "input": text,
            "response_format": self.response_format,
        }
        response = await self.client.post_json("audio/speech", payload, label="tts")
        audio = response.content
        if not audio:
            raise ProviderExecutionError("Speech synthesis returned no audio")
        self.log.info(
            "tts.request.success",
            extra={"model": self.model, "voice": self.voice, "size_bytes": len(audio)},
        )
        return SpeechResult(payload=audio, format=self.response_format)


def _extract_error(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        message = (error.get("message") or "").strip()
        err_type = (error.get("type") or "").strip()
        return " ".join(part for part in (err_type, message) if part)
    return str(data)
