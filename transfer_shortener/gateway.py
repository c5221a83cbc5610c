"""Reverse proxy to the internal transfer backend."""

import logging
from typing import AsyncIterable, AsyncIterator, Iterable, Optional, Tuple, Union

import httpx
from starlette.responses import Response, StreamingResponse

from .interfaces import BackendProxy
from .common.headers import HeaderValue, filter_forward_headers, filter_response_headers
from .common.url_builder import public_host, rewrite_to_public
from .errors import BackendRejectedError, BackendUnavailableError


class BackendGateway(BackendProxy):
    """Forwards uploads and retrievals to the backend.

    The backend only knows its internal address. Upload responses are
    rewritten from the internal host to the public one; retrievals are sent
    with the public ``Host`` header so any links the backend renders point at
    the public host.
    """

    DEFAULT_TIMEOUT_SECONDS = 600.0

    def __init__(
        self,
        backend_url: str,
        public_url: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize backend gateway.

        Args:
            backend_url: Internal backend base URL (e.g., http://transfer:5327)
            public_url: Public base URL (e.g., https://t.example.com)
            timeout_seconds: Timeout for a whole backend round trip
            client: Optional preconfigured HTTP client
            logger: Optional logger instance
        """
        self.backend_url = backend_url.rstrip("/")
        self.public_url = public_url.rstrip("/")
        self.public_host = public_host(self.public_url)
        self.logger = logger or logging.getLogger(__name__)
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            follow_redirects=False,
        )

    def _target_url(self, path: str, query: str = "") -> str:
        if not path.startswith("/"):
            path = "/" + path
        url = f"{self.backend_url}{path}"
        if query:
            url = f"{url}?{query}"
        return url

    async def forward_upload(
        self,
        method: str,
        path: str,
        headers: Iterable[Tuple[HeaderValue, HeaderValue]],
        body: Union[bytes, AsyncIterable[bytes]],
        query: str = "",
    ) -> str:
        """Forward an upload to the backend and return the public file URL.

        Args:
            method: PUT or POST
            path: Request path, passed through unchanged
            headers: Inbound request headers
            body: Request body, streamed to the backend
            query: Raw query string

        Returns:
            The backend's file URL with scheme and host swapped for the public ones

        Raises:
            BackendUnavailableError: If the backend cannot be reached
            BackendRejectedError: If the backend does not answer 200
        """
        target_url = self._target_url(path, query)
        request = self.client.build_request(
            method,
            target_url,
            headers=filter_forward_headers(headers),
            content=body,
        )

        self.logger.debug(f"Forwarding {method} upload to {target_url}")

        try:
            response = await self.client.send(request)
        except httpx.TransportError as e:
            self.logger.error(f"Backend unavailable for upload {path}: {e}")
            raise BackendUnavailableError(f"Backend unavailable: {e}", cause=e) from e

        if response.status_code != httpx.codes.OK:
            self.logger.warning(f"Backend rejected upload {path}: {response.status_code}")
            raise BackendRejectedError(response.status_code, response.text)

        full_url = rewrite_to_public(response.text, self.public_url)
        self.logger.debug(f"Backend stored upload at {response.text.strip()} -> {full_url}")
        return full_url

    async def forward_retrieval(
        self,
        path: str,
        headers: Iterable[Tuple[HeaderValue, HeaderValue]],
        query: str = "",
    ) -> Response:
        """Forward a GET to the backend and stream its response back.

        Args:
            path: Request path, passed through unchanged
            headers: Inbound request headers
            query: Raw query string

        Returns:
            Streaming response with the backend's status, headers and body

        Raises:
            BackendUnavailableError: If the backend cannot be reached
        """
        target_url = self._target_url(path, query)
        request = self.client.build_request(
            "GET",
            target_url,
            headers=filter_forward_headers(headers, host=self.public_host),
        )

        try:
            response = await self.client.send(request, stream=True)
        except httpx.TransportError as e:
            self.logger.error(f"Backend unavailable for {path}: {e}")
            raise BackendUnavailableError(f"Backend unavailable: {e}", cause=e) from e

        async def body() -> AsyncIterator[bytes]:
            # Closing on exit also aborts the backend read if the client goes away
            try:
                async for chunk in response.aiter_raw():
                    yield chunk
            finally:
                await response.aclose()

        try:
            # Raw byte pairs keep repeated headers such as Set-Cookie and any
            # non-ASCII values exactly as the backend sent them
            raw_headers = filter_response_headers(response.headers.raw)
            streaming = StreamingResponse(body(), status_code=response.status_code)
            streaming.raw_headers = raw_headers
        except Exception:
            await response.aclose()
            raise
        return streaming

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
