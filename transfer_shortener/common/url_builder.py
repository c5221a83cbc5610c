"""URL building utilities for transfer shortener."""

from urllib.parse import urlsplit, urlunsplit


def build_short_url(token: str, public_url: str) -> str:
    """Build the public short URL for a token.

    Args:
        token: The token
        public_url: Public base URL (e.g., https://t.example.com)

    Returns:
        Complete short URL
    """
    return f"{public_url.rstrip('/')}/{token}"


def rewrite_to_public(url: str, public_url: str) -> str:
    """Swap the scheme and host of ``url`` for those of ``public_url``.

    Path, query and fragment are left untouched.

    Args:
        url: URL pointing at the internal backend
        public_url: Public base URL

    Returns:
        URL pointing at the public host
    """
    public = urlsplit(public_url)
    parsed = urlsplit(url.strip())
    return urlunsplit((public.scheme, public.netloc, parsed.path, parsed.query, parsed.fragment))


def public_host(public_url: str) -> str:
    """Host (with port, if any) of the public base URL."""
    return urlsplit(public_url).netloc
