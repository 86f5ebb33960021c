from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Dict, Optional, Type, TypeVar

from algoclient.dto.algo_io import AlgoIo, ContentType
from algoclient.dto.algo_response import AlgoResponse
from algoclient.dto.version import AlgoRef, VersionLike

if TYPE_CHECKING:
    from algoclient.api.api import Api

T = TypeVar("T")

logger = logging.getLogger(__name__)

ALGO_ENDPOINT = "v1/algo"
# extra seconds the HTTP deadline allows on top of the algorithm timeout
TIMEOUT_GRACE_SEC = 10


@dataclass(frozen=True)
class AlgoOptions:
    """Per-call options sent as query parameters."""

    timeout: Optional[int] = None
    stdout: Optional[bool] = None

    def to_params(self) -> Dict[str, str]:
        params: Dict[str, str] = {}
        if self.timeout is not None:
            params["timeout"] = str(self.timeout)
        if self.stdout is not None:
            params["stdout"] = "true" if self.stdout else "false"
        return params


class Algorithm:
    """
    Handle to a hosted algorithm.

    Options are accumulated with the builder methods before a call::

        factor = api.algo("kenny/Factor").timeout(10).enable_stdout()
        response = factor.pipe("19635")
    """

    def __init__(self, api: "Api", algo_ref: AlgoRef, options: Optional[AlgoOptions] = None):
        self._api = api
        self.algo_ref = algo_ref
        self.options = options or AlgoOptions()

    @property
    def endpoint(self) -> str:
        return f"{ALGO_ENDPOINT}/{self.algo_ref.path}"

    def to_url(self) -> str:
        return self._api._prepare_url(self.endpoint)

    def version(self, version: VersionLike) -> "Algorithm":
        """Returns a handle pinned to ``version`` with the same options."""
        return Algorithm(self._api, self.algo_ref.pinned(version), self.options)

    def timeout(self, timeout: int) -> "Algorithm":
        """Sets the server-side timeout in seconds."""
        self.options = replace(self.options, timeout=int(timeout))
        return self

    def enable_stdout(self) -> "Algorithm":
        """
        Requests captured stdout in the response metadata.

        The server ignores this unless the caller has access to the
        algorithm source.
        """
        return self.stdout(True)

    def stdout(self, enabled: bool) -> "Algorithm":
        self.options = replace(self.options, stdout=bool(enabled))
        return self

    def set_options(self, options: AlgoOptions) -> "Algorithm":
        self.options = options
        return self

    def pipe(self, input: Any) -> AlgoResponse:
        """
        Calls the algorithm.

        :param input: ``str`` is sent as text, ``bytes`` as binary, any other
            value (or pydantic model) as JSON. An :class:`AlgoIo` is sent as is.
        :return: Decoded response.
        :rtype: :class:`AlgoResponse`
        :raises ApiError: if the algorithm or the API reports an error.
        :raises DecoderError: if the response envelope is malformed.
        """
        response = self._post(AlgoIo.from_value(input))
        return AlgoResponse.from_json(response.content)

    def pipe_decoded(self, input: Any, type_: Type[T]) -> T:
        """Calls the algorithm and validates the result into ``type_``."""
        return self.pipe(input).decode(type_)

    def pipe_json(self, json_text: str) -> AlgoResponse:
        """Sends an already serialized JSON string without re-encoding it."""
        response = self._send(json_text.encode("utf-8"), ContentType.JSON.mime_type)
        return AlgoResponse.from_json(response.content)

    def pipe_raw(self, input: Any) -> str:
        """Calls the algorithm and returns the response body untouched."""
        response = self._post(AlgoIo.from_value(input))
        return response.content.decode("utf-8", errors="replace")

    def _post(self, input: AlgoIo):
        return self._send(input.as_bytes(), input.mime_type)

    def _send(self, body: bytes, mime_type: str):
        timeout = None
        if self.options.timeout is not None:
            timeout = self.options.timeout + TIMEOUT_GRACE_SEC
        logger.debug(f"Calling {self.algo_ref} with {mime_type}, {len(body)} bytes")
        return self._api.post(
            self.endpoint,
            data=body,
            params=self.options.to_params(),
            headers={"Content-Type": mime_type, "Accept": "application/json"},
            timeout=timeout,
        )

    def __repr__(self) -> str:
        return f"Algorithm({self.algo_ref.path!r})"
