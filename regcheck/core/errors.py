"""Exceptions raised by regcheck checks.

A check either returns a definite boolean or raises one of the exceptions
below. Each carries an `ErrorKind` so callers can tell "the data is
invalid" (a `False` verdict) apart from "the check could not be evaluated".
"""

from enum import Enum


class ErrorKind(Enum):
    """The reasons a check can fail to produce a verdict."""

    PARSE = "parse"
    NOT_FOUND = "not_found"
    NETWORK = "network"


class RegCheckError(Exception):
    """Base class for all regcheck errors."""

    kind: ErrorKind


class ParseError(RegCheckError, ValueError):
    """Raised when input data cannot be parsed (a date, an image header)."""

    kind = ErrorKind.PARSE


class MissingFileError(RegCheckError, FileNotFoundError):
    """Raised when a check needs a file that does not exist or is unreadable."""

    kind = ErrorKind.NOT_FOUND


class ReferenceDataError(RegCheckError):
    """Raised when the country/language reference dataset cannot be fetched."""

    kind = ErrorKind.NETWORK
