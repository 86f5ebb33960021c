"""
Request loop for algorithms hosted on the platform.

The host writes one JSON request per line to stdin and reads one JSON
response per line from the output pipe.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Callable, Dict, Iterable, Optional, Union

from algoclient.dto.algo_io import AlgoIo, to_json_string
from algoclient.entrypoint.handler import EntryPoint
from algoclient.exceptions import DecoderError, UnsupportedInput

logger = logging.getLogger(__name__)

ALGOOUT = "/tmp/algoout"
INIT_MESSAGE = "PIPE_INIT_COMPLETE"
REQUEST_CONTENT_TYPES = ("text", "json", "binary")

ALGORITHM_ERROR = "AlgorithmError"
SYSTEM_ERROR = "SystemError"
UNSUPPORTED_INPUT_ERROR = "UnsupportedInput"


def _cause_chain(exc: BaseException) -> str:
    causes = [str(exc) or type(exc).__name__]
    cause = exc.__cause__ or exc.__context__
    while cause is not None:
        causes.append(str(cause) or type(cause).__name__)
        cause = cause.__cause__ or cause.__context__
    return "\ncaused by: ".join(causes)


def failure(exc: BaseException, error_type: str) -> Dict[str, Any]:
    return {"error": {"message": _cause_chain(exc), "error_type": error_type}}


def success(output: AlgoIo) -> Dict[str, Any]:
    content_type, result = output.to_wire()
    return {"result": result, "metadata": {"content_type": content_type}}


def build_input(line: str) -> AlgoIo:
    """
    Parses one request line.

    :raises DecoderError: if the request is malformed.
    """
    try:
        request = json.loads(line)
    except ValueError as exc:
        raise DecoderError(f"Error decoding JSON request: {exc}") from exc
    if not isinstance(request, dict) or "data" not in request:
        raise DecoderError("Request is missing 'data'")

    content_type = request.get("content_type")
    if content_type not in REQUEST_CONTENT_TYPES:
        raise DecoderError(f"Content type {content_type!r} is invalid")
    return AlgoIo.from_wire(content_type, request["data"])


def handle_request(entrypoint: EntryPoint, line: str) -> Dict[str, Any]:
    """Runs one request line through ``entrypoint`` and builds the response."""
    try:
        input = build_input(line)
    except DecoderError as exc:
        logger.warning(f"Rejected malformed request: {exc}")
        return failure(exc, SYSTEM_ERROR)

    try:
        output = entrypoint.apply(input)
    except UnsupportedInput as exc:
        return failure(exc, UNSUPPORTED_INPUT_ERROR)
    except Exception as exc:
        # handler errors are reported to the caller, the loop keeps serving
        logger.warning(f"Algorithm raised {type(exc).__name__}: {exc}")
        return failure(exc, ALGORITHM_ERROR)
    return success(output)


def write_output(output: Dict[str, Any], output_path: str = ALGOOUT) -> None:
    with open(output_path, "a", encoding="utf-8") as f:
        f.write(to_json_string(output))
        f.write("\n")


def setup_handler(
    entrypoint: Union[EntryPoint, Callable[[Any], Any]],
    input_stream: Optional[Iterable[str]] = None,
    output_path: str = ALGOOUT,
) -> None:
    """
    Serves requests until the input stream is exhausted.

    :param entrypoint: Handler table, or a plain function accepting any input.
    :param input_stream: Request lines, defaults to stdin.
    :param output_path: Response pipe, defaults to ``/tmp/algoout``.
    """
    if not isinstance(entrypoint, EntryPoint):
        entrypoint = EntryPoint.from_function(entrypoint)
    if input_stream is None:
        input_stream = sys.stdin

    print(INIT_MESSAGE, flush=True)
    sys.stderr.flush()

    for line in input_stream:
        line = line.strip()
        if not line:
            continue
        output = handle_request(entrypoint, line)
        sys.stdout.flush()
        sys.stderr.flush()
        write_output(output, output_path)
