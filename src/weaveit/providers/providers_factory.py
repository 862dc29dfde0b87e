"""Factory for pipeline collaborators."""

from dataclasses import dataclass

from ..config import ProviderSettings
from .providers_base import ScriptEnhancer, SpeechSynthesizer, VideoRenderer
from .providers_openai import OpenAIClient, OpenAIScriptEnhancer, OpenAISpeechSynthesizer
from .providers_render import HttpVideoRenderer


@dataclass(slots=True)
class Collaborators:
    enhancer: ScriptEnhancer
    synthesizer: SpeechSynthesizer
    renderer: VideoRenderer


def create_collaborators(settings: ProviderSettings) -> Collaborators:
    """Instantiate the HTTP-backed collaborators from configuration."""
    client = OpenAIClient(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        timeout_seconds=settings.timeout_seconds,
    )
    return Collaborators(
        enhancer=OpenAIScriptEnhancer(client=client, model=settings.enhancer_model),
        synthesizer=OpenAISpeechSynthesizer(
            client=client,
            model=settings.tts_model,
            voice=settings.tts_voice,
        ),
        renderer=HttpVideoRenderer(
            service_url=settings.render_service_url,
            timeout_seconds=settings.timeout_seconds,
        ),
    )
