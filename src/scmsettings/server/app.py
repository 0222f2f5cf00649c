"""FastAPI application exposing hosting settings for diagnostics."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from .. import __version__
from ..config import ProviderConfig
from ..provider import HostingConfigurations
from ..services import QueuedEventSink
from .routes import router

# Global provider instance (set during lifespan)
_provider: Optional[HostingConfigurations] = None

logger = logging.getLogger("scmsettings.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global _provider

    config: ProviderConfig = app.state.config

    errors = config.validate()
    if errors:
        raise ValueError(f"Configuration errors: {errors}")

    logger.info(f"Starting scm settings service (site: {config.site_name})")
    _provider = HostingConfigurations.from_config(config)
    logger.info(
        f"Provider initialized (file: {config.configs_file}, ttl: {config.ttl_seconds}s)"
    )

    yield

    logger.info("Shutting down scm settings service")
    if isinstance(_provider.events, QueuedEventSink):
        _provider.events.close()
    _provider = None


def create_app(config: Optional[ProviderConfig] = None) -> FastAPI:
    """Create FastAPI application.

    Args:
        config: Provider configuration. If None, loads from environment.

    Returns:
        Configured FastAPI application.
    """
    if config is None:
        config = ProviderConfig.from_env()

    app = FastAPI(
        title="SCM Hosting Settings",
        description="Read-only view of hosting configuration settings",
        version=__version__,
        lifespan=lifespan,
    )

    # Store config for lifespan access
    app.state.config = config

    app.include_router(router)

    @app.get("/")
    async def root():
        return {
            "service": "scm-hosting-settings",
            "version": __version__,
            "docs": "/docs",
        }

    return app


def run_server(
    config: Optional[ProviderConfig] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    log_level: str = "info",
):
    """Run the HTTP server.

    Args:
        config: Provider configuration. If None, loads from environment.
        host: Override host from config.
        port: Override port from config.
        log_level: Logging level.
    """
    if config is None:
        config = ProviderConfig.from_env()

    app = create_app(config)

    uvicorn.run(
        app,
        host=host or config.server.host,
        port=port or config.server.port,
        log_level=log_level,
    )
