"""Request logging middleware."""

import time
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable, Optional


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its outcome and duration."""

    def __init__(self, app, logger: Optional[logging.Logger] = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("transfer_shortener.web")

    async def dispatch(self, request: Request, call_next: Callable):
        start_time = time.monotonic()
        client_ip = request.client.host if request.client else "unknown"

        response = await call_next(request)

        # Proxied bodies are still streaming; this measures time to headers
        duration_ms = (time.monotonic() - start_time) * 1000
        self.logger.info(
            f"{client_ip} {request.method} {request.url.path} - "
            f"Status: {response.status_code} - Duration: {duration_ms:.2f}ms"
        )

        return response
