"""Public short URL construction."""

from typing import Mapping, Optional

from .headers import build_base_url, get_forwarded_path_prefix


def build_short_url(short_code: str, base_url: str, path_prefix: str = "") -> str:
    """Join base URL, optional path prefix and short code.

    Examples:
        >>> build_short_url("abc1234", "https://sho.rt/", "/s")
        'https://sho.rt/s/abc1234'
    """
    parts = [base_url.rstrip("/")]
    prefix = path_prefix.strip("/")
    if prefix:
        parts.append(prefix)
    parts.append(short_code)
    return "/".join(parts)


def short_url_for_request(
    short_code: str,
    headers: Mapping[str, str],
    fallback_base_url: str,
    fallback_prefix: str = "",
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
) -> str:
    """Short URL as seen by the client that sent the request.

    Proxy headers (X-Forwarded-Proto/Host/Prefix) win over the request's own
    scheme and host, which win over the configured base URL and prefix.
    """
    base_url = build_base_url(
        headers=headers,
        fallback_base_url=fallback_base_url,
        request_scheme=request_scheme,
        request_host=request_host,
    )
    prefix = get_forwarded_path_prefix(headers, fallback=fallback_prefix)
    return build_short_url(short_code, base_url, prefix)
