"""Header utilities for proxying requests to the backend.

Headers are copied as raw bytes in both directions so values that are not
ASCII (e.g. a UTF-8 ``Content-Disposition`` filename) pass through unchanged.
"""

from typing import Iterable, List, Optional, Tuple, Union


# Headers that describe a single transport hop and must not be forwarded
HOP_BY_HOP_HEADERS = frozenset({
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "proxy-connection",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
})

HeaderValue = Union[str, bytes]
RawHeaders = List[Tuple[bytes, bytes]]


def header_bytes(value: HeaderValue) -> bytes:
    """Raw bytes of a header name or value.

    Strings from Starlette are latin-1 decodings of the raw bytes, so
    encoding them back as latin-1 restores the original bytes.
    """
    if isinstance(value, bytes):
        return value
    try:
        return value.encode("latin-1")
    except UnicodeEncodeError:
        return value.encode("utf-8")


def _is_hop_by_hop(name: bytes) -> bool:
    return name.decode("latin-1") in HOP_BY_HOP_HEADERS


def filter_forward_headers(
    headers: Iterable[Tuple[HeaderValue, HeaderValue]],
    host: Optional[str] = None,
) -> RawHeaders:
    """Copy request headers for forwarding.

    Drops ``Host`` and hop-by-hop headers. Repeated headers are kept.

    Args:
        headers: (name, value) pairs from the inbound request, str or bytes
        host: Optional value to send as the ``Host`` header instead

    Returns:
        List of lowercased (name, value) byte pairs for the outbound request
    """
    forwarded = []
    for name, value in headers:
        key = header_bytes(name).lower()
        if key == b"host" or _is_hop_by_hop(key):
            continue
        forwarded.append((key, header_bytes(value)))
    if host:
        forwarded.append((b"host", header_bytes(host)))
    return forwarded


def filter_response_headers(headers: Iterable[Tuple[HeaderValue, HeaderValue]]) -> RawHeaders:
    """Copy backend response headers, dropping hop-by-hop headers."""
    copied = []
    for name, value in headers:
        key = header_bytes(name).lower()
        if not _is_hop_by_hop(key):
            copied.append((key, header_bytes(value)))
    return copied


def accepts_html(accept: Optional[str]) -> bool:
    """Whether an ``Accept`` header value signals a browser."""
    return bool(accept) and "text/html" in accept.lower()
