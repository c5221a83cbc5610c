"""Pytest configuration and fixtures."""

from datetime import datetime, timezone
from typing import AsyncGenerator, Dict, List, Optional

import httpx
import pytest
from fastapi.responses import PlainTextResponse

from config import Config
from transfer_shortener.database.models import ShortLink
from transfer_shortener.database.sqlite import SQLiteTokenStore
from transfer_shortener.errors import TokenNotFoundError
from transfer_shortener.interfaces import BackendProxy, ShortLinkProvider
from transfer_shortener.service import ShortLinkService
from transfer_shortener.common.headers import header_bytes
from transfer_shortener.tokens import TokenMinter
from transfer_shortener.common.logging_config import setup_logging
from web_app import create_app


class FakeShortLinkService(ShortLinkProvider):
    """In-memory short-link service that records its calls."""

    def __init__(self, links: Optional[Dict[str, str]] = None, next_token: str = "xyz1"):
        self.links = dict(links or {})
        self.next_token = next_token
        self.create_error: Optional[Exception] = None
        self.resolve_error: Optional[Exception] = None
        self.created: List[str] = []
        self.resolved: List[str] = []

    async def create_short_link(self, full_url: str) -> ShortLink:
        self.created.append(full_url)
        if self.create_error:
            raise self.create_error
        self.links[self.next_token] = full_url
        return ShortLink(self.next_token, full_url, datetime.now(timezone.utc))

    async def resolve_token(self, token: str) -> str:
        self.resolved.append(token)
        if self.resolve_error:
            raise self.resolve_error
        if token not in self.links:
            raise TokenNotFoundError(token)
        return self.links[token]


def header_dict(headers) -> Dict[str, str]:
    """Lowercased str view of forwarded (name, value) pairs."""
    return {
        header_bytes(name).decode("latin-1").lower(): header_bytes(value).decode("latin-1")
        for name, value in headers
    }


class FakeBackendGateway(BackendProxy):
    """Backend stand-in that records forwarded requests."""

    def __init__(self, upload_result: str = "https://public/abc12/file.txt"):
        self.upload_result = upload_result
        self.upload_error: Optional[Exception] = None
        self.retrieval_error: Optional[Exception] = None
        self.uploads: List[dict] = []
        self.retrievals: List[dict] = []
        self.retrieval_headers: Dict[str, str] = {"X-Proxied": "1"}

    async def forward_upload(self, method, path, headers, body, query=""):
        content = b""
        async for chunk in body:
            content += chunk
        self.uploads.append({
            "method": method,
            "path": path,
            "headers": header_dict(headers),
            "body": content,
            "query": query,
        })
        if self.upload_error:
            raise self.upload_error
        return self.upload_result

    async def forward_retrieval(self, path, headers, query=""):
        self.retrievals.append({
            "path": path,
            "headers": header_dict(headers),
            "query": query,
        })
        if self.retrieval_error:
            raise self.retrieval_error
        return PlainTextResponse(f"proxied {path}", headers=self.retrieval_headers)


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def config():
    """Config isolated from the environment's .env file."""
    return Config(
        _env_file=None,
        backend_url="http://internal",
        public_url="https://public",
    )


@pytest.fixture
async def sqlite_store(tmp_path, logger) -> AsyncGenerator[SQLiteTokenStore, None]:
    """Initialized SQLite store in a temporary directory."""
    store = SQLiteTokenStore(f"sqlite:///{tmp_path}/shortener.db", logger=logger)
    await store.initialize()

    yield store

    await store.close()


@pytest.fixture
def token_minter():
    return TokenMinter(default_length=4)


@pytest.fixture
def service(sqlite_store, token_minter, logger) -> ShortLinkService:
    """Service backed by a real SQLite store."""
    return ShortLinkService(
        store=sqlite_store,
        cache=None,
        token_minter=token_minter,
        logger=logger,
    )


@pytest.fixture
def fake_service():
    return FakeShortLinkService(links={"abc1": "https://public/abc12/file.txt"})


@pytest.fixture
def fake_gateway():
    return FakeBackendGateway()


@pytest.fixture
def app(config, fake_service, fake_gateway):
    """App wired to the fakes."""
    return create_app(
        config=config,
        service_instance=fake_service,
        gateway_instance=fake_gateway,
    )


@pytest.fixture
async def client(app):
    """Create test client."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample target URLs."""
    return [
        "https://public/abc12/file.txt",
        "http://transfer.example.com:8080/Zx9/archive.tar.gz",
        "https://public/q1/report%20final.pdf?download=1",
    ]
