"""Long URL validation and canonicalization."""

from urllib.parse import urlsplit

from .exceptions import invalid_input


ALLOWED_SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": 80, "https": 443}
MAX_URL_LENGTH = 2048


def normalize_url(raw_url: str, max_length: int = MAX_URL_LENGTH) -> str:
    """Validate a long URL and reduce it to canonical form.

    Canonical form lowercases scheme and host, drops the scheme's default
    port, strips trailing slashes from the path (a bare "/" becomes empty),
    and keeps the query string and fragment exactly as given. User info is
    not part of the canonical form.

    Args:
        raw_url: URL as supplied by the caller
        max_length: Maximum accepted length

    Returns:
        Canonical URL string

    Raises:
        ShortenerError: INVALID_INPUT if the URL is blank, too long,
            malformed, or not http/https
    """
    if raw_url is None or not isinstance(raw_url, str) or not raw_url.strip():
        raise invalid_input("A URL is required")

    # Surrounding whitespace counts toward the limit
    if len(raw_url) > max_length:
        raise invalid_input(f"URL must not exceed {max_length} characters")

    url = raw_url.strip()

    if any(c.isspace() for c in url):
        raise invalid_input("Invalid URL format")

    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        raise invalid_input("Invalid URL format")

    if not parts.scheme or not parts.netloc:
        raise invalid_input("Invalid URL format")

    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        raise invalid_input("Only HTTP and HTTPS URLs are allowed")

    host = parts.hostname
    if not host:
        raise invalid_input("URL must have a valid host")
    host = host.lower()
    if ":" in host:
        host = f"[{host}]"

    netloc = host
    if port is not None and port != DEFAULT_PORTS[scheme]:
        netloc = f"{host}:{port}"

    path = parts.path.rstrip("/")
    query = f"?{parts.query}" if parts.query else ""
    fragment = f"#{parts.fragment}" if parts.fragment else ""

    return f"{scheme}://{netloc}{path}{query}{fragment}"
