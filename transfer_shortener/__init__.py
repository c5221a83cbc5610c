"""Core logic for the transfer shortener."""

from .tokens import TokenMinter
from .service import ShortLinkService
from .gateway import BackendGateway

__all__ = ["TokenMinter", "ShortLinkService", "BackendGateway"]
