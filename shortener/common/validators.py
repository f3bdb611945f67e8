"""Validation utilities for URL shortener."""

import re
from typing import Tuple


_ALPHANUMERIC = re.compile(r'[a-zA-Z0-9]+')


def is_valid_short_code(short_code: str, min_length: int = 1, max_length: int = 20) -> Tuple[bool, str]:
    """Validate a short code.
    
    Args:
        short_code: The short code to validate
        min_length: Minimum length for short code
        max_length: Maximum length for short code
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if not short_code or not isinstance(short_code, str) or not short_code.strip():
        return False, "Short code is required"
    
    if len(short_code) < min_length:
        return False, f"Short code must be at least {min_length} characters"
    
    if len(short_code) > max_length:
        return False, f"Short code must be at most {max_length} characters"
    
    # Letters and digits only; codes end up in URL paths
    if not _ALPHANUMERIC.fullmatch(short_code):
        return False, "Short code can only contain letters and numbers"
    
    return True, ""


def is_valid_search(search: str, max_length: int = 200) -> Tuple[bool, str]:
    """Validate a long URL search term.
    
    Args:
        search: The search term (may be empty)
        max_length: Maximum accepted length
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if search and len(search) > max_length:
        return False, f"Search term must be at most {max_length} characters"
    return True, ""
