"""FastAPI application entry point."""

from fastapi import FastAPI

from .config import AppConfig, load_config
from .dependencies import include_routers
from .logging import configure_logging
from .providers.providers_factory import Collaborators


def create_app(
    config: AppConfig | None = None,
    collaborators: Collaborators | None = None,
) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    configure_logging()
    cfg = config or load_config()
    app = FastAPI(title="WeaveIt")
    include_routers(app, cfg, collaborators)
    return app
