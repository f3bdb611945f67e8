"""Error taxonomy for URL shortener operations."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Kinds of failure a shortener operation can report."""

    INVALID_INPUT = "invalid_input"
    DUPLICATE_CODE = "duplicate_code"
    NOT_FOUND = "not_found"


class ShortenerError(Exception):
    """Failure raised by the service layer, tagged with its kind."""

    def __init__(self, kind: ErrorKind, message: str, short_code: Optional[str] = None):
        """Initialize error.

        Args:
            kind: Error kind
            message: Human-readable message
            short_code: Short code involved, if any
        """
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.short_code = short_code

    def __repr__(self) -> str:
        return f"ShortenerError({self.kind.value!r}, {self.message!r})"


def invalid_input(message: str) -> ShortenerError:
    return ShortenerError(ErrorKind.INVALID_INPUT, message)


def not_found(short_code: str) -> ShortenerError:
    return ShortenerError(
        ErrorKind.NOT_FOUND,
        f"Short code '{short_code}' not found",
        short_code=short_code,
    )


def duplicate_code(short_code: Optional[str] = None, message: Optional[str] = None) -> ShortenerError:
    if message is None:
        message = f"Short code '{short_code}' already exists"
    return ShortenerError(ErrorKind.DUPLICATE_CODE, message, short_code=short_code)
