"""Tests for the backend gateway."""

import httpx
import pytest

from transfer_shortener.gateway import BackendGateway
from transfer_shortener.errors import BackendRejectedError, BackendUnavailableError


def make_gateway(handler, public_url="https://public"):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return BackendGateway(
        backend_url="http://internal:5327",
        public_url=public_url,
        client=client,
    )


async def read_body(response) -> bytes:
    content = b""
    async for chunk in response.body_iterator:
        content += chunk
    return content


async def stream(*chunks):
    for chunk in chunks:
        yield chunk


class TrackingStream(httpx.AsyncByteStream):
    """Backend body that records what was read and whether it was closed."""

    def __init__(self, chunks):
        self.chunks = chunks
        self.sent = []
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            self.sent.append(chunk)
            yield chunk

    async def aclose(self):
        self.closed = True


@pytest.mark.asyncio
class TestForwardUpload:
    """Test the upload path."""

    async def test_rewrites_backend_url_to_public(self):
        """Backend URL gets the public scheme and host, path untouched."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["body"] = request.content
            seen["headers"] = request.headers
            return httpx.Response(200, text="http://internal:5327/abc12/file.txt\n")

        gateway = make_gateway(handler)

        full_url = await gateway.forward_upload(
            method="PUT",
            path="/file.txt",
            headers=[
                ("Host", "public"),
                ("Content-Type", "text/plain"),
                ("Max-Days", "3"),
                ("Proxy-Authorization", "Basic abc"),
            ],
            body=stream(b"file ", b"content"),
        )

        assert full_url == "https://public/abc12/file.txt"
        assert seen["method"] == "PUT"
        assert seen["url"] == "http://internal:5327/file.txt"
        assert seen["body"] == b"file content"
        assert seen["headers"]["host"] == "internal:5327"
        assert seen["headers"]["max-days"] == "3"
        assert "proxy-authorization" not in seen["headers"]

        await gateway.close()

    async def test_forwards_query_string(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            return httpx.Response(200, text="http://internal:5327/abc12/file.txt")

        gateway = make_gateway(handler)

        await gateway.forward_upload("POST", "/", [], b"data", query="max-downloads=2")

        assert seen["url"] == "http://internal:5327/?max-downloads=2"

    async def test_keeps_public_port(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="http://internal:5327/abc12/file.txt")

        gateway = make_gateway(handler, public_url="http://localhost:8080")

        full_url = await gateway.forward_upload("PUT", "/file.txt", [], b"data")

        assert full_url == "http://localhost:8080/abc12/file.txt"

    async def test_non_200_is_rejected(self):
        """Backend non-200 raises with status and body."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500, text="could not save file")

        gateway = make_gateway(handler)

        with pytest.raises(BackendRejectedError) as exc_info:
            await gateway.forward_upload("PUT", "/file.txt", [], b"data")

        assert exc_info.value.status_code == 500
        assert exc_info.value.body == "could not save file"
        # No retry
        assert len(calls) == 1

    async def test_non_ascii_request_header(self):
        """Raw UTF-8 header bytes reach the backend unchanged."""
        filename = "파일.txt".encode("utf-8")
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["headers"] = request.headers.raw
            return httpx.Response(200, text="http://internal:5327/abc12/file.txt")

        gateway = make_gateway(handler)

        # Starlette hands over raw header bytes decoded as latin-1
        await gateway.forward_upload(
            "PUT", "/file.txt", [("X-Filename", filename.decode("latin-1"))], b"data"
        )

        assert (b"x-filename", filename) in seen["headers"]

    async def test_connection_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        gateway = make_gateway(handler)

        with pytest.raises(BackendUnavailableError):
            await gateway.forward_upload("PUT", "/file.txt", [], b"data")


@pytest.mark.asyncio
class TestForwardRetrieval:
    """Test the retrieval path."""

    async def test_sends_public_host(self):
        """Backend sees the public Host header."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["host"] = request.headers["host"]
            seen["accept"] = request.headers.get("accept")
            return httpx.Response(200, text="<html>index</html>")

        gateway = make_gateway(handler, public_url="https://t.example.com")

        await gateway.forward_retrieval(
            path="/abc12/file.txt",
            headers=[("Host", "t.example.com:443"), ("Accept", "text/html")],
        )

        assert seen["url"] == "http://internal:5327/abc12/file.txt"
        assert seen["host"] == "t.example.com"
        assert seen["accept"] == "text/html"

    async def test_streams_status_headers_and_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                404,
                headers=[
                    ("Content-Type", "text/plain"),
                    ("X-Backend", "transfer"),
                    ("Set-Cookie", "a=1"),
                    ("Set-Cookie", "b=2"),
                ],
                content=stream(b"File ", b"not found"),
            )

        gateway = make_gateway(handler)

        response = await gateway.forward_retrieval("/abc12/missing.txt", [])

        assert response.status_code == 404
        assert response.headers["content-type"] == "text/plain"
        assert response.headers["x-backend"] == "transfer"
        assert response.headers.getlist("set-cookie") == ["a=1", "b=2"]
        assert await read_body(response) == b"File not found"

    async def test_connection_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        gateway = make_gateway(handler)

        with pytest.raises(BackendUnavailableError):
            await gateway.forward_retrieval("/abc12/file.txt", [])

    async def test_non_ascii_response_header(self):
        """A UTF-8 Content-Disposition is passed through byte for byte."""
        disposition = 'attachment; filename="파일.txt"'.encode("utf-8")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                headers=[(b"Content-Disposition", disposition)],
                content=stream(b"data"),
            )

        gateway = make_gateway(handler)

        response = await gateway.forward_retrieval("/abc12/파일.txt", [])

        assert response.status_code == 200
        assert (b"content-disposition", disposition) in response.raw_headers
        assert await read_body(response) == b"data"

    async def test_early_stop_closes_backend_stream(self):
        """Abandoning the download closes the backend response."""
        backend_stream = TrackingStream([b"first", b"second", b"third"])

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, stream=backend_stream)

        gateway = make_gateway(handler)

        response = await gateway.forward_retrieval("/abc12/big.bin", [])
        body = response.body_iterator
        assert await body.__anext__() == b"first"
        await body.aclose()

        assert backend_stream.closed
        assert backend_stream.sent == [b"first"]

    async def test_full_read_closes_backend_stream(self):
        backend_stream = TrackingStream([b"a", b"b"])

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, stream=backend_stream)

        gateway = make_gateway(handler)

        response = await gateway.forward_retrieval("/abc12/small.bin", [])

        assert await read_body(response) == b"ab"
        assert backend_stream.closed
