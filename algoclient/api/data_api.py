"""
Files and directories in the hosted data store and its connectors.

Every object is addressed by a data URI such as ``data://.my/robots/T-800.png``
or ``s3://bucket/key``. Handles are cheap to build and do not touch the
network until an operation needs it.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from datetime import datetime
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any, Deque, Iterator, Mapping, Optional, Union

from pydantic import ValidationError

from algoclient.dto.algo_io import AlgoIo, to_json_string
from algoclient.dto.data import (
    DataAcl,
    DataType,
    DirectoryDeleted,
    DirectoryShow,
    ReadAcl,
)
from algoclient.exceptions import (
    AlgorithmiaError,
    DataPathError,
    DataTypeError,
    DecoderError,
    Utf8Error,
)
from algoclient.io.fs import ensure_base_path, get_file_name_with_ext, silent_remove
from algoclient.io.url import data_api_suffix, format_data_uri, parse_data_uri

if TYPE_CHECKING:
    from algoclient.api.api import Api

logger = logging.getLogger(__name__)

DATA_TYPE_HEADER = "X-Data-Type"


def _data_type_from_headers(headers: Mapping[str, str]) -> DataType:
    data_type = headers.get(DATA_TYPE_HEADER)
    if data_type == DataType.FILE.value:
        return DataType.FILE
    if data_type == DataType.DIR.value:
        return DataType.DIR
    if data_type is None:
        raise DataTypeError("API response missing data type")
    raise DataTypeError(f"API responded with invalid data type: {data_type!r}")


def _parse_http_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring unparseable date header: {value!r}")
        return None


class DataPath:
    """Base handle shared by files, directories and untyped objects."""

    def __init__(self, api: "Api", uri: str):
        self._api = api
        self.scheme, self.segments = parse_data_uri(uri)

    @property
    def path(self) -> str:
        return self.to_data_uri()

    @property
    def is_root(self) -> bool:
        return not self.segments

    @property
    def endpoint(self) -> str:
        return data_api_suffix(self.scheme, self.segments)

    def to_data_uri(self) -> str:
        return format_data_uri(self.scheme, self.segments)

    def to_url(self) -> str:
        return self._api._prepare_url(self.endpoint)

    def basename(self) -> str:
        """
        Last path segment.

        A root such as ``data://`` has no segment and returns ``""`` rather
        than the scheme name, so a root is never mistaken for an object
        called ``data``.
        """
        if self.is_root:
            return ""
        return self.segments[-1]

    def parent(self) -> "DataDir":
        """Containing directory; the parent of a root is the root itself."""
        return DataDir(self._api, format_data_uri(self.scheme, self.segments[:-1]))

    def exists(self) -> DataType:
        """
        Checks whether the object exists.

        :return: ``DataType.FILE``, ``DataType.DIR`` or ``DataType.ABSENT``.
            Only ``ABSENT`` is falsy, so the result can be used as a bool.
        :rtype: :class:`DataType`
        :raises DataTypeError: if the server does not report a data type.
        """
        try:
            response = self._api.head(self.endpoint)
        except AlgorithmiaError as error:
            if error.status_code == 404:
                return DataType.ABSENT
            raise
        return _data_type_from_headers(response.headers)

    def _child_uri(self, name: str) -> str:
        child_segments = [segment for segment in name.split("/") if segment]
        if not child_segments:
            raise DataPathError(f"Invalid child name: {name!r}")
        return format_data_uri(self.scheme, self.segments + child_segments)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataPath):
            return NotImplemented
        return type(self) is type(other) and self.to_data_uri() == other.to_data_uri()

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.to_data_uri()))

    def __str__(self) -> str:
        return self.to_data_uri()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_data_uri()!r})"


class FileData:
    """Content and metadata of a downloaded file."""

    def __init__(self, content: bytes, size: int, last_modified: Optional[datetime]):
        self.content = content
        self.size = size
        self.last_modified = last_modified

    def as_bytes(self) -> bytes:
        return self.content

    def as_string(self) -> str:
        try:
            return self.content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise Utf8Error(f"File content is not valid UTF-8: {exc}") from exc

    def as_json(self) -> Any:
        try:
            return json.loads(self.as_string())
        except ValueError as exc:
            raise DecoderError(f"File content is not valid JSON: {exc}") from exc


class DataFile(DataPath):
    """A file in the data API."""

    def put(self, data: Union[str, bytes, IO[bytes], AlgoIo]) -> None:
        """
        Uploads ``data`` as the file content, replacing any existing file.

        :param data: Text (stored UTF-8 encoded), bytes, a binary file
            object or an :class:`AlgoIo`.
        """
        if isinstance(data, AlgoIo):
            data = data.as_bytes()
        elif isinstance(data, str):
            data = data.encode("utf-8")
        self._api.put(self.endpoint, data=data)

    def put_json(self, value: Any) -> None:
        self._api.put(
            self.endpoint,
            data=to_json_string(value).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    def get(self) -> FileData:
        """
        Downloads the file into memory.

        :raises DataTypeError: if the path is a directory.
        """
        response = self._api.get(self.endpoint)
        data_type = _data_type_from_headers(response.headers)
        if data_type != DataType.FILE:
            raise DataTypeError(f"Expected a file at {self.to_data_uri()}, found a directory")
        content = response.content
        size = len(content)
        last_modified = _parse_http_date(
            response.headers.get("Last-Modified") or response.headers.get("Date")
        )
        return FileData(content, size, last_modified)

    def download(self, file_path: Union[str, Path], chunk_size: int = 1024 * 1024) -> str:
        """
        Streams the file to a local path.

        A partially written file is removed if the download fails.

        :param file_path: Local destination.
        :type file_path: str or Path
        :param chunk_size: Size of the streamed chunks.
        :type chunk_size: int, optional
        :return: The destination path.
        :rtype: :class:`str`
        """
        file_path = str(file_path)
        ensure_base_path(file_path)
        try:
            with open(file_path, "wb") as f:
                for chunk in self._api.stream(self.endpoint, chunk_size=chunk_size):
                    f.write(chunk)
        except BaseException:
            silent_remove(file_path)
            raise
        return file_path

    def delete(self) -> None:
        self._api.delete(self.endpoint)


class DataFileItem(DataFile):
    """File yielded by a directory listing, with its listed metadata."""

    def __init__(self, api: "Api", uri: str, size: int, last_modified: datetime):
        super().__init__(api, uri)
        self.size = size
        self.last_modified = last_modified


class DataDir(DataPath):
    """A directory in the data API."""

    def list(self) -> "DirectoryListing":
        """
        Lazily lists the directory, one page per request.

        Each page yields its folders before its files.
        """
        return DirectoryListing(self)

    def get_acl(self) -> Optional[DataAcl]:
        return self._get_page(None).acl

    def create(self, acl: Union[DataAcl, ReadAcl, None] = None) -> None:
        """
        Creates the directory in its parent.

        :param acl: Read permissions, defaults to ``ReadAcl.MY_ALGORITHMS``.
        :raises DataPathError: for a root path.
        """
        if self.is_root:
            raise DataPathError(f"Cannot create root directory {self.to_data_uri()}")
        if acl is None:
            acl = DataAcl()
        elif not isinstance(acl, DataAcl):
            acl = DataAcl.from_read_acl(acl)

        body = {"name": self.basename(), "acl": acl.to_wire()}
        self._api.post(
            self.parent().endpoint,
            data=to_json_string(body).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    def delete(self, force: bool = False) -> DirectoryDeleted:
        """
        Deletes the directory.

        :param force: Also delete a non-empty directory and its content.
        :return: Number of deleted files.
        """
        params = {"force": "true"} if force else None
        response = self._api.delete(self.endpoint, params=params)
        try:
            payload = response.json()
        except ValueError as exc:
            raise DecoderError(f"Invalid delete response: {exc}") from exc
        result = payload.get("result", {}) if isinstance(payload, dict) else {}
        try:
            return DirectoryDeleted.model_validate(result)
        except ValidationError as exc:
            raise DecoderError(f"Invalid delete response: {exc}") from exc

    def put_file(self, file_path: Union[str, Path]) -> DataFile:
        """Uploads a local file into this directory under the same name."""
        data_file = self.child_file(get_file_name_with_ext(file_path))
        with open(file_path, "rb") as f:
            data_file.put(f)
        return data_file

    def child_file(self, name: str) -> DataFile:
        return DataFile(self._api, self._child_uri(name))

    def child_dir(self, name: str) -> "DataDir":
        return DataDir(self._api, self._child_uri(name))

    def _get_page(self, marker: Optional[str]) -> DirectoryShow:
        params = {"marker": marker} if marker is not None else None
        response = self._api.get(self.endpoint, params=params)
        if _data_type_from_headers(response.headers) != DataType.DIR:
            raise DataTypeError(f"Expected a directory at {self.to_data_uri()}, found a file")
        try:
            return DirectoryShow.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise DecoderError(f"Invalid directory listing for {self.to_data_uri()}: {exc}") from exc


class DataDirItem(DataDir):
    """Directory yielded by a directory listing."""

    def __init__(self, api: "Api", uri: str, acl: Optional[DataAcl] = None):
        super().__init__(api, uri)
        self.acl = acl


DataItem = Union[DataFileItem, DataDirItem]


class DirectoryListing(Iterator[DataItem]):
    """
    Iterator over a directory, fetching pages as needed.

    If fetching a page fails, ``next()`` raises and the listing keeps its
    position: calling ``next()`` again retries the same page. ``acl`` is
    available once the first page has been fetched.
    """

    def __init__(self, data_dir: DataDir):
        self._dir = data_dir
        self._items: Deque[DataItem] = deque()
        self._marker: Optional[str] = None
        self._fetched = False
        self.acl: Optional[DataAcl] = None

    def __iter__(self) -> "DirectoryListing":
        return self

    def __next__(self) -> DataItem:
        while not self._items:
            if self._fetched and self._marker is None:
                raise StopIteration
            page = self._dir._get_page(self._marker)
            if not self._fetched:
                self.acl = page.acl
            self._fetched = True
            self._marker = page.marker
            self._extend(page)
        return self._items.popleft()

    def _extend(self, page: DirectoryShow) -> None:
        api = self._dir._api
        for folder in page.folders:
            self._items.append(DataDirItem(api, self._dir._child_uri(folder.name), folder.acl))
        for file in page.files:
            self._items.append(
                DataFileItem(
                    api, self._dir._child_uri(file.filename), file.size, file.last_modified
                )
            )


class DataObject(DataPath):
    """A data path whose type is not known yet."""

    def get_type(self) -> DataType:
        """
        Resolves the object type.

        Unlike :meth:`exists`, a missing object raises.
        """
        response = self._api.head(self.endpoint)
        return _data_type_from_headers(response.headers)

    def into_type(self) -> Union[DataFile, DataDir]:
        data_type = self.get_type()
        if data_type == DataType.DIR:
            return DataDir(self._api, self.to_data_uri())
        return DataFile(self._api, self.to_data_uri())