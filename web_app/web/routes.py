"""Request router: classifies every request and dispatches it."""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import PlainTextResponse, RedirectResponse, Response

from transfer_shortener.common.headers import accepts_html
from transfer_shortener.common.url_builder import build_short_url
from transfer_shortener.errors import (
    BackendError,
    EmptyTokenError,
    PersistenceError,
    ShortenerError,
    TokenNotFoundError,
)

router = APIRouter()

logger = logging.getLogger("transfer_shortener.web")

UPLOAD_METHODS = {"PUT", "POST"}

# Every method is routed here so unsupported ones get a 405 from the router
ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]


def _backend_path(request: Request) -> str:
    """Path as received, still percent-encoded, for forwarding."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1")
    return request.url.path


def usage_text(public_url: str) -> str:
    """Plain-text usage message for command-line clients."""
    return (
        "Transfer Shortener\n\n"
        f"Upload: curl --upload-file ./file.txt {public_url}/file.txt\n"
        f"Or:     curl -F filedata=@./file.txt {public_url}/\n"
    )


async def _proxy_get(request: Request) -> Response:
    gateway = request.app.state.gateway
    try:
        return await gateway.forward_retrieval(
            path=_backend_path(request),
            headers=request.headers.raw,
            query=request.url.query,
        )
    except BackendError as e:
        logger.error(f"Proxy error: {e}")
        return PlainTextResponse("Backend error", status_code=status.HTTP_502_BAD_GATEWAY)


async def handle_health(request: Request) -> Response:
    return PlainTextResponse("ok")


async def handle_upload(request: Request) -> Response:
    """Forward the upload, then mint a short link for the stored file."""
    gateway = request.app.state.gateway
    service = request.app.state.service
    config = request.app.state.config

    try:
        full_url = await gateway.forward_upload(
            method=request.method,
            path=_backend_path(request),
            headers=request.headers.raw,
            body=request.stream(),
            query=request.url.query,
        )
    except BackendError as e:
        logger.error(f"Proxy error: {e}")
        return PlainTextResponse("Backend error", status_code=status.HTTP_502_BAD_GATEWAY)

    try:
        link = await service.create_short_link(full_url)
    except ShortenerError as e:
        # The file is already stored at the backend; only the short link is lost
        logger.error(f"Failed to create short link for {full_url}: {e}")
        return PlainTextResponse(
            "Failed to create short URL",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return PlainTextResponse(build_short_url(link.token, config.public_url) + "\n")


async def handle_index(request: Request) -> Response:
    """Browsers get the backend's index page, everything else the usage text."""
    config = request.app.state.config

    if accepts_html(request.headers.get("accept")):
        response = await _proxy_get(request)
    else:
        response = PlainTextResponse(usage_text(config.public_url))

    vary = response.headers.get("vary")
    if vary and "accept" not in vary.lower():
        response.headers["Vary"] = f"{vary}, Accept"
    elif not vary:
        response.headers["Vary"] = "Accept"
    return response


async def handle_get(request: Request) -> Response:
    """Redirect a known token; pass anything else through to the backend."""
    service = request.app.state.service
    path = request.url.path[1:]

    # "abc1/file.txt" is a backend path, never a token
    if "/" in path:
        return await _proxy_get(request)

    try:
        full_url = await service.resolve_token(path)
    except (TokenNotFoundError, EmptyTokenError):
        return await _proxy_get(request)
    except PersistenceError as e:
        logger.error(f"Failed to resolve token {path}: {e}")
        return PlainTextResponse(
            "Internal server error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return RedirectResponse(url=full_url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.api_route("/{path:path}", methods=ROUTED_METHODS, include_in_schema=False)
async def dispatch(request: Request, path: str) -> Response:
    """Classify the request. First matching rule wins."""
    if request.url.path == "/health":
        return await handle_health(request)

    if request.method in UPLOAD_METHODS:
        return await handle_upload(request)

    if request.method == "GET" and request.url.path == "/":
        return await handle_index(request)

    if request.method == "GET":
        return await handle_get(request)

    return PlainTextResponse("Method not allowed", status_code=status.HTTP_405_METHOD_NOT_ALLOWED)
