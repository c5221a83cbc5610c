"""FastAPI application factory."""

from typing import Any, Optional

from fastapi import FastAPI

from .web import web_router
from .middleware.logging import LoggingMiddleware


def create_app(
    config,
    service_instance=None,
    gateway_instance=None,
    lifespan: Optional[Any] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Everything a request needs lives on ``app.state``: the config, the
    short-link service and the backend gateway. Tests pass fakes for the
    latter two; ``app.py`` fills them in from its lifespan instead.

    Args:
        config: Configuration instance
        service_instance: Short-link service (ShortLinkProvider)
        gateway_instance: Backend gateway (BackendProxy)
        lifespan: Optional lifespan context manager

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Transfer Shortener",
        description="Short links and pass-through proxy for a file-transfer backend",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.service = service_instance
    app.state.gateway = gateway_instance

    app.add_middleware(LoggingMiddleware)

    app.include_router(web_router)

    return app
