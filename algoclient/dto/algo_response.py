from __future__ import annotations

import json
from typing import Any, List, Optional, Type, TypeVar, Union

from pydantic import Field, ValidationError

from algoclient.dto.algo_io import AlgoIo, ContentType, JsonValue
from algoclient.dto.base import BaseInfo
from algoclient.exceptions import DecoderError
from algoclient.io.network_exceptions import parse_error_envelope

T = TypeVar("T")


class AlgoMetadata(BaseInfo):
    """Metadata the server attaches to an algorithm result."""

    duration: float = Field(..., description="Execution time in seconds")
    stdout: Optional[str] = Field(default=None, description="Captured stdout, when requested")
    alerts: List[str] = Field(default_factory=list, description="Alerts raised during execution")
    content_type: str = Field(..., description="Tag describing the result encoding")


class AlgoResponse:
    """Result of an algorithm call: metadata plus the decoded payload."""

    def __init__(self, metadata: AlgoMetadata, result: AlgoIo):
        self.metadata = metadata
        self.result = result

    @classmethod
    def from_json(cls, body: Union[str, bytes]) -> "AlgoResponse":
        """
        Decodes the ``{"metadata": ..., "result": ...}`` envelope.

        :param body: Raw response body.
        :raises ApiError: if the body is an error envelope.
        :raises DecoderError: if the body is not a valid result envelope.
        """
        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise DecoderError(f"Response body is not valid JSON: {exc}") from exc
        return cls.from_payload(payload)

    @classmethod
    def from_payload(cls, payload: Any) -> "AlgoResponse":
        api_error = parse_error_envelope(payload)
        if api_error is not None:
            raise api_error
        if not isinstance(payload, dict) or "metadata" not in payload or "result" not in payload:
            raise DecoderError("Response is missing 'metadata' or 'result'")

        try:
            metadata = AlgoMetadata.model_validate(payload["metadata"])
        except ValidationError as exc:
            raise DecoderError(f"Invalid response metadata: {exc}") from exc

        result = AlgoIo.from_wire(metadata.content_type, payload["result"])
        return cls(metadata, result)

    @property
    def content_type(self) -> ContentType:
        return self.result.content_type

    def as_string(self) -> str:
        return self.result.as_string()

    def as_json(self) -> JsonValue:
        return self.result.as_json()

    def as_bytes(self) -> bytes:
        return self.result.as_bytes()

    def decode(self, type_: Type[T]) -> T:
        return self.result.decode(type_)

    def __str__(self) -> str:
        if self.result.content_type == ContentType.BINARY:
            return self.result.value.decode("utf-8", errors="replace")
        return self.result.as_string()

    def __repr__(self) -> str:
        return f"AlgoResponse(duration={self.metadata.duration}, result={self.result!r})"
