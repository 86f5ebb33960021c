"""
Algorithm input and output payloads.

An :class:`AlgoIo` holds exactly one of three shapes: text, binary or JSON.
Conversions between shapes are explicit and raise when they would lose
information.
"""

from __future__ import annotations

import base64
import binascii
import copy
import enum
import json
from dataclasses import dataclass
from typing import Any, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from algoclient.exceptions import (
    ContentTypeError,
    DecoderError,
    EncoderError,
    Utf8Error,
)

T = TypeVar("T")

JsonValue = Union[None, bool, int, float, str, list, dict]


class ContentType(str, enum.Enum):
    TEXT = "text"
    JSON = "json"
    BINARY = "binary"

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self]


_MIME_TYPES = {
    ContentType.TEXT: "text/plain",
    ContentType.JSON: "application/json",
    ContentType.BINARY: "application/octet-stream",
}

# tag the server uses for a null JSON result
VOID_TAG = "void"


def to_json_string(value: Any) -> str:
    """Compact JSON serialization used for every JSON body the client sends."""
    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise EncoderError(f"Value is not JSON serializable: {exc}") from exc


def _parse_json(text: str) -> Any:
    return json.loads(text)


@dataclass(frozen=True)
class AlgoIo:
    """
    Payload sent to or returned by an algorithm.

    Build one with :meth:`from_text`, :meth:`from_bytes`, :meth:`from_json`
    or let :meth:`from_value` pick the shape from a Python value.
    """

    content_type: ContentType
    value: Any

    @classmethod
    def from_text(cls, text: str) -> "AlgoIo":
        if not isinstance(text, str):
            raise TypeError(f"Expected str, got {type(text).__name__}")
        return cls(ContentType.TEXT, text)

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, memoryview]) -> "AlgoIo":
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Expected bytes, got {type(data).__name__}")
        return cls(ContentType.BINARY, bytes(data))

    @classmethod
    def from_json(cls, value: Any) -> "AlgoIo":
        """
        Wraps a JSON-encodable value.

        The value is normalized through a JSON round trip, so tuples become
        lists and the stored value is detached from the caller's objects.
        """
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json")
        return cls(ContentType.JSON, _parse_json(to_json_string(value)))

    @classmethod
    def from_value(cls, value: Any) -> "AlgoIo":
        """
        Chooses the payload shape from the Python type of ``value``.

        ``str`` is text, ``bytes``-like is binary, and anything else must
        be JSON encodable.
        """
        if isinstance(value, AlgoIo):
            return value
        if isinstance(value, str):
            return cls.from_text(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls.from_bytes(value)
        return cls.from_json(value)

    @property
    def mime_type(self) -> str:
        return self.content_type.mime_type

    def as_string(self) -> str:
        if self.content_type == ContentType.TEXT:
            return self.value
        elif self.content_type == ContentType.JSON:
            return to_json_string(self.value)
        elif self.content_type == ContentType.BINARY:
            try:
                return self.value.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise Utf8Error(f"Binary content is not valid UTF-8: {exc}") from exc
        else:
            raise ContentTypeError(f"Unknown content type: {self.content_type}")

    def as_json(self) -> JsonValue:
        if self.content_type == ContentType.JSON:
            return copy.deepcopy(self.value)
        elif self.content_type == ContentType.TEXT:
            try:
                return _parse_json(self.value)
            except ValueError as exc:
                raise ContentTypeError(f"Text content is not valid JSON: {exc}") from exc
        elif self.content_type == ContentType.BINARY:
            raise ContentTypeError("Binary content cannot be read as JSON")
        else:
            raise ContentTypeError(f"Unknown content type: {self.content_type}")

    def as_bytes(self) -> bytes:
        if self.content_type == ContentType.BINARY:
            return self.value
        elif self.content_type in (ContentType.TEXT, ContentType.JSON):
            return self.as_string().encode("utf-8")
        else:
            raise ContentTypeError(f"Unknown content type: {self.content_type}")

    def decode(self, type_: Type[T]) -> T:
        """
        Validates the JSON content into ``type_`` using pydantic.

        :param type_: Any type pydantic can validate (models, ``List[int]``, ...).
        :raises DecoderError: if the content is not JSON or does not match ``type_``.
        :raises ContentTypeError: for binary content.
        """
        if self.content_type == ContentType.JSON:
            value = copy.deepcopy(self.value)
        elif self.content_type == ContentType.TEXT:
            try:
                value = _parse_json(self.value)
            except ValueError as exc:
                raise DecoderError(f"Text content is not valid JSON: {exc}") from exc
        elif self.content_type == ContentType.BINARY:
            raise ContentTypeError("Binary content cannot be decoded as JSON")
        else:
            raise ContentTypeError(f"Unknown content type: {self.content_type}")

        try:
            return TypeAdapter(type_).validate_python(value)
        except ValidationError as exc:
            raise DecoderError(f"Failed to decode content: {exc}") from exc

    def to_wire(self) -> Tuple[str, JsonValue]:
        """Content type tag and JSON-safe value, with binary base64 encoded."""
        if self.content_type == ContentType.BINARY:
            return self.content_type.value, base64.b64encode(self.value).decode("ascii")
        return self.content_type.value, self.value

    @classmethod
    def from_wire(cls, tag: str, value: Any) -> "AlgoIo":
        """
        Inverse of :meth:`to_wire`.

        ``void`` and ``json`` give JSON content, ``text`` requires a string,
        and any other tag is treated as base64 encoded binary.
        """
        if tag == VOID_TAG:
            return cls(ContentType.JSON, None)
        if tag == ContentType.JSON.value:
            return cls(ContentType.JSON, value)
        if tag == ContentType.TEXT.value:
            if not isinstance(value, str):
                raise DecoderError(f"Content type 'text' requires a string, got {type(value).__name__}")
            return cls(ContentType.TEXT, value)
        if not isinstance(value, str):
            raise DecoderError(
                f"Content type {tag!r} requires a base64 string, got {type(value).__name__}"
            )
        try:
            return cls(ContentType.BINARY, base64.b64decode(value, validate=True))
        except binascii.Error as exc:
            raise DecoderError(f"Invalid base64 content: {exc}") from exc

    def __repr__(self) -> str:
        if self.content_type == ContentType.BINARY:
            return f"AlgoIo(binary, {len(self.value)} bytes)"
        return f"AlgoIo({self.content_type.value}, {self.value!r})"
