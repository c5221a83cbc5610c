"""Common utilities for transfer shortener."""

from .validators import is_valid_url
from .headers import accepts_html, filter_forward_headers, filter_response_headers
from .url_builder import build_short_url, rewrite_to_public, public_host
from .logging_config import setup_logging, get_logger

__all__ = [
    "is_valid_url",
    "accepts_html",
    "filter_forward_headers",
    "filter_response_headers",
    "build_short_url",
    "rewrite_to_public",
    "public_host",
    "setup_logging",
    "get_logger",
]
