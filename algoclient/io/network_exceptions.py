"""
Decoding of error responses and transport failures into client exceptions.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Union

import httpx
import requests

from algoclient.exceptions import AlgorithmiaError, ApiError, HttpError

logger = logging.getLogger(__name__)

ERROR_FIELD = "error"
MESSAGE_FIELD = "message"
STACKTRACE_FIELD = "stacktrace"
ERROR_TYPE_FIELD = "error_type"
ERROR_MESSAGE_HEADER = "X-Error-Message"
BODY_SNIPPET_LIMIT = 512


def parse_error_envelope(payload: Any, status_code: Optional[int] = None) -> Optional[ApiError]:
    """
    Builds an :class:`ApiError` from an already parsed JSON body.

    :param payload: Parsed JSON body.
    :type payload: Any
    :param status_code: HTTP status of the response, if any.
    :type status_code: int, optional
    :return: The decoded error, or None when the payload is not an error envelope.
    :rtype: :class:`ApiError` or None
    """
    if not isinstance(payload, dict):
        return None
    error = payload.get(ERROR_FIELD)
    if not isinstance(error, dict):
        return None
    message = error.get(MESSAGE_FIELD)
    if not isinstance(message, str):
        return None
    stacktrace = error.get(STACKTRACE_FIELD)
    if not isinstance(stacktrace, (str, list)):
        stacktrace = None
    error_type = error.get(ERROR_TYPE_FIELD)
    return ApiError(
        message,
        stacktrace=stacktrace,
        error_type=error_type if isinstance(error_type, str) else None,
        status_code=status_code,
    )


def decode_error_response(
    status_code: int,
    body: Union[str, bytes],
    headers: Optional[Mapping[str, str]] = None,
    url: Optional[str] = None,
) -> AlgorithmiaError:
    """
    Turns a failed response into the matching client exception.

    The structured ``{"error": {...}}`` envelope wins, then the
    ``X-Error-Message`` header, and otherwise an :class:`HttpError`
    carrying the status and a snippet of the body.
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")

    try:
        payload = json.loads(body) if body else None
    except ValueError:
        payload = None

    api_error = parse_error_envelope(payload, status_code)
    if api_error is not None:
        return api_error

    header_message = (headers or {}).get(ERROR_MESSAGE_HEADER)
    if header_message:
        return ApiError(f"{status_code}: {header_message}", status_code=status_code)

    snippet = body[:BODY_SNIPPET_LIMIT]
    kind = "Server Error" if status_code >= 500 else "Client Error"
    message = f"{status_code} {kind} for url: {url}"
    if snippet:
        message = f"{message} ({snippet})"
    return HttpError(message, status_code=status_code, body=snippet)


def raise_for_status(response: Union[requests.Response, httpx.Response]) -> None:
    """
    Raise the decoded error if the response status is not 2xx.

    :param response: Response object from requests or httpx.
    """
    if 200 <= response.status_code < 300:
        return
    error = decode_error_response(
        response.status_code, response.content, response.headers, str(response.url)
    )
    logger.debug(f"{response.status_code} from {response.url}: {error.message}")
    raise error


def process_requests_exception(
    exc: Union[requests.RequestException, httpx.RequestError], verb: str, url: str
) -> HttpError:
    """
    Converts a transport exception to :class:`HttpError`.

    Timeouts are marked retryable. The caller raises the result from ``exc``.
    """
    retryable = isinstance(exc, (requests.Timeout, httpx.TimeoutException))
    if retryable:
        message = f"{verb} {url} timed out: {exc}"
    else:
        message = f"{verb} {url} failed: {exc}"
    return HttpError(message, retryable=retryable)
