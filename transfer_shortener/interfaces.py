"""Capabilities the request router depends on."""

from abc import ABC, abstractmethod
from typing import AsyncIterable, Iterable, Tuple, Union

from starlette.responses import Response

from .common.headers import HeaderValue
from .database.models import ShortLink


class ShortLinkProvider(ABC):
    """Creates and resolves short links."""

    @abstractmethod
    async def create_short_link(self, full_url: str) -> ShortLink:
        """Create a short link for an absolute URL."""
        pass

    @abstractmethod
    async def resolve_token(self, token: str) -> str:
        """Return the URL stored under ``token``."""
        pass


class BackendProxy(ABC):
    """Forwards uploads and retrievals to the transfer backend."""

    @abstractmethod
    async def forward_upload(
        self,
        method: str,
        path: str,
        headers: Iterable[Tuple[HeaderValue, HeaderValue]],
        body: Union[bytes, AsyncIterable[bytes]],
        query: str = "",
    ) -> str:
        """Forward an upload and return the public URL of the stored file."""
        pass

    @abstractmethod
    async def forward_retrieval(
        self,
        path: str,
        headers: Iterable[Tuple[HeaderValue, HeaderValue]],
        query: str = "",
    ) -> Response:
        """Forward a GET and return the backend's response for streaming."""
        pass
