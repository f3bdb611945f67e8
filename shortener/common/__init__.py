"""Common utilities for URL shortener."""

from .validators import is_valid_short_code, is_valid_search
from .headers import extract_forwarded_headers, build_base_url, get_forwarded_path_prefix
from .url_builder import build_short_url, short_url_for_request
from .logging_config import setup_logging

__all__ = [
    "is_valid_short_code",
    "is_valid_search",
    "extract_forwarded_headers",
    "build_base_url",
    "get_forwarded_path_prefix",
    "build_short_url",
    "short_url_for_request",
    "setup_logging",
]
