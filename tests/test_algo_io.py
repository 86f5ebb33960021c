"""
Tests for the AlgoIo payload model.
"""

from typing import List

import pytest
from pydantic import BaseModel

from algoclient.dto.algo_io import AlgoIo, ContentType
from algoclient.exceptions import (
    ContentTypeError,
    DecoderError,
    EncoderError,
    Utf8Error,
)


class Point(BaseModel):
    x: int
    y: int


def test_from_value_picks_shape():
    assert AlgoIo.from_value("hello").content_type == ContentType.TEXT
    assert AlgoIo.from_value(b"\x00\x01").content_type == ContentType.BINARY
    assert AlgoIo.from_value(bytearray(b"ab")).value == b"ab"
    assert AlgoIo.from_value([1, 2, 3]).content_type == ContentType.JSON
    assert AlgoIo.from_value(None).content_type == ContentType.JSON
    assert AlgoIo.from_value(Point(x=1, y=2)).value == {"x": 1, "y": 2}


def test_from_value_passes_algo_io_through():
    io = AlgoIo.from_text("x")
    assert AlgoIo.from_value(io) is io


def test_from_json_normalizes_tuples():
    assert AlgoIo.from_json((1, 2)) == AlgoIo.from_json([1, 2])


def test_from_json_rejects_unserializable():
    with pytest.raises(EncoderError):
        AlgoIo.from_json({"when": object()})


def test_mime_types():
    assert AlgoIo.from_text("a").mime_type == "text/plain"
    assert AlgoIo.from_json({}).mime_type == "application/json"
    assert AlgoIo.from_bytes(b"a").mime_type == "application/octet-stream"


def test_as_string():
    assert AlgoIo.from_text("héllo").as_string() == "héllo"
    assert AlgoIo.from_json({"a": [1, 2]}).as_string() == '{"a":[1,2]}'
    assert AlgoIo.from_bytes("héllo".encode("utf-8")).as_string() == "héllo"


def test_as_string_invalid_utf8():
    with pytest.raises(Utf8Error):
        AlgoIo.from_bytes(b"\xff\xfe\xfa").as_string()
    # Utf8Error is also a ContentTypeError
    with pytest.raises(ContentTypeError):
        AlgoIo.from_bytes(b"\xff").as_string()


def test_as_json():
    assert AlgoIo.from_json([1, "a"]).as_json() == [1, "a"]
    assert AlgoIo.from_text('{"a": 1}').as_json() == {"a": 1}
    with pytest.raises(ContentTypeError):
        AlgoIo.from_text("not json").as_json()
    with pytest.raises(ContentTypeError):
        AlgoIo.from_bytes(b"[1]").as_json()


def test_json_payload_cannot_be_changed_through_accessors():
    io = AlgoIo.from_json({"primes": [3, 5]})
    io.as_json()["primes"].append(7)
    io.decode(dict)["primes"].append(11)

    assert io.as_json() == {"primes": [3, 5]}
    assert io.as_bytes() == b'{"primes":[3,5]}'


def test_as_bytes():
    assert AlgoIo.from_bytes(b"\x00\xff").as_bytes() == b"\x00\xff"
    assert AlgoIo.from_text("abc").as_bytes() == b"abc"
    assert AlgoIo.from_json({"k": True}).as_bytes() == b'{"k":true}'


def test_decode():
    assert AlgoIo.from_json([3, 5, 7]).decode(List[int]) == [3, 5, 7]
    assert AlgoIo.from_text('{"x": 1, "y": 2}').decode(Point) == Point(x=1, y=2)


def test_decode_failures():
    with pytest.raises(DecoderError):
        AlgoIo.from_json({"x": "one"}).decode(Point)
    with pytest.raises(DecoderError):
        AlgoIo.from_text("plain words").decode(List[int])
    with pytest.raises(ContentTypeError):
        AlgoIo.from_bytes(b"[1]").decode(List[int])


def test_decoder_error_keeps_cause():
    with pytest.raises(DecoderError) as exc_info:
        AlgoIo.from_json({"x": "one"}).decode(Point)
    assert exc_info.value.__cause__ is not None
    assert "x" in exc_info.value.message


def test_wire_roundtrip():
    for io in (
        AlgoIo.from_text("text"),
        AlgoIo.from_json({"nested": [1, None, 2.5]}),
        AlgoIo.from_bytes(bytes(range(256))),
    ):
        tag, value = io.to_wire()
        assert AlgoIo.from_wire(tag, value) == io


def test_from_wire_tags():
    assert AlgoIo.from_wire("void", None) == AlgoIo.from_json(None)
    assert AlgoIo.from_wire("binary", "AAE=").as_bytes() == b"\x00\x01"
    with pytest.raises(DecoderError):
        AlgoIo.from_wire("text", 42)
    with pytest.raises(DecoderError):
        AlgoIo.from_wire("binary", "***not base64***")
    with pytest.raises(DecoderError):
        AlgoIo.from_wire("binary", [1, 2])


if __name__ == "__main__":
    pytest.main()
