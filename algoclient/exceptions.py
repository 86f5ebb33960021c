"""Error kinds raised by the client."""

from __future__ import annotations

from typing import List, Optional, Union


def _split_stacktrace(stacktrace: Union[str, List[str], None]) -> Optional[List[str]]:
    if stacktrace is None:
        return None
    if isinstance(stacktrace, str):
        return stacktrace.splitlines()
    return [str(line) for line in stacktrace]


class AlgorithmiaError(Exception):
    """Base exception for all client errors."""

    def __init__(
        self,
        message: str,
        stacktrace: Union[str, List[str], None] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.stacktrace = _split_stacktrace(stacktrace)
        self.status_code = status_code


class ApiError(AlgorithmiaError):
    """The server reported a structured error."""

    def __init__(
        self,
        message: str,
        stacktrace: Union[str, List[str], None] = None,
        error_type: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, stacktrace, status_code)
        self.error_type = error_type


class ContentTypeError(AlgorithmiaError):
    """A payload was asked for a representation it cannot provide."""


class Utf8Error(ContentTypeError):
    """Binary content is not valid UTF-8 text."""


class DataTypeError(AlgorithmiaError):
    """A data path resolved to a file where a directory was expected, or the reverse."""


class DataPathError(AlgorithmiaError):
    """Malformed data URI or an operation that is invalid for the path."""


class HttpError(AlgorithmiaError):
    """Transport failure or an error response without a structured body."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        retryable: bool = False,
    ):
        super().__init__(message, status_code=status_code)
        self.body = body
        self.retryable = retryable


class DecoderError(AlgorithmiaError):
    """JSON or payload decoding failed."""


class EncoderError(AlgorithmiaError):
    """JSON encoding failed."""


class UnsupportedInput(AlgorithmiaError):
    """No registered handler accepts the inbound payload."""
