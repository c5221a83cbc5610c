"""Request routing for the transfer shortener."""

from .routes import router as web_router

__all__ = ["web_router"]
