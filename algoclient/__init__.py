"""
Public package interface for the algoclient SDK.

The module exposes the :class:`Api` client, the :class:`AlgoIo` payload
model, data API handles and the error kinds raised by all of them.
"""

from __future__ import annotations

from algoclient.api._api import VERSION as __version__
from algoclient.api.algorithm_api import AlgoOptions, Algorithm
from algoclient.api.api import Api
from algoclient.api.data_api import (
    DataDir,
    DataDirItem,
    DataFile,
    DataFileItem,
    DataObject,
    DataPath,
    DirectoryListing,
    FileData,
)
from algoclient.dto.algo_io import AlgoIo, ContentType
from algoclient.dto.algo_response import AlgoMetadata, AlgoResponse
from algoclient.dto.data import DataAcl, DataType, DirectoryDeleted, ReadAcl
from algoclient.dto.version import AlgoRef, Hash, Latest, Minor, Revision, parse_version
from algoclient.entrypoint import EntryPoint, InputShape, setup_handler
from algoclient.exceptions import (
    AlgorithmiaError,
    ApiError,
    ContentTypeError,
    DataPathError,
    DataTypeError,
    DecoderError,
    EncoderError,
    HttpError,
    UnsupportedInput,
    Utf8Error,
)
from algoclient.io.credentials import ApiAuth, ClientSettings


def client(api_key: str = None, server_address: str = None) -> Api:
    """Shortcut for ``Api(server_address=..., api_key=...)``."""
    return Api(server_address=server_address, api_key=api_key)


__all__ = [
    "Api",
    "ApiAuth",
    "ClientSettings",
    "client",
    "Algorithm",
    "AlgoOptions",
    "AlgoIo",
    "ContentType",
    "AlgoMetadata",
    "AlgoResponse",
    "AlgoRef",
    "Latest",
    "Minor",
    "Revision",
    "Hash",
    "parse_version",
    "DataPath",
    "DataObject",
    "DataFile",
    "DataFileItem",
    "DataDir",
    "DataDirItem",
    "DirectoryListing",
    "FileData",
    "DataAcl",
    "ReadAcl",
    "DataType",
    "DirectoryDeleted",
    "EntryPoint",
    "InputShape",
    "setup_handler",
    "AlgorithmiaError",
    "ApiError",
    "ContentTypeError",
    "DataPathError",
    "DataTypeError",
    "DecoderError",
    "EncoderError",
    "HttpError",
    "UnsupportedInput",
    "Utf8Error",
]
