"""
Tests for files and directories with the HTTP layer mocked.
"""

import json

import httpx
import pytest

from algoclient.api.data_api import DataDir, DataDirItem, DataFile, DataFileItem
from algoclient.dto.data import DataAcl, DataType, ReadAcl
from algoclient.exceptions import (
    ApiError,
    DataPathError,
    DataTypeError,
    DecoderError,
    HttpError,
    Utf8Error,
)

FILE_HEADERS = {"X-Data-Type": "file", "Date": "Tue, 03 Mar 2020 10:00:00 GMT"}
DIR_HEADERS = {"X-Data-Type": "directory"}


def test_exists_file_and_dir(api, mock_request, response):
    mock_request.return_value = response(headers={"X-Data-Type": "file"})
    assert api.file("data://.my/robots/T-800.png").exists() == DataType.FILE

    mock_request.return_value = response(headers=DIR_HEADERS)
    assert api.dir("data://.my/robots").exists() == DataType.DIR
    assert mock_request.call_args.args == ("HEAD", "https://api.test.local/v1/data/.my/robots")


def test_exists_absent_is_not_an_error(api, mock_request, response):
    mock_request.return_value = response(status_code=404)

    result = api.file("data://.my/robots/missing.png").exists()

    assert result == DataType.ABSENT
    assert not result


def test_exists_other_failures_raise(api, mock_request, response):
    mock_request.return_value = response(status_code=401, headers={"X-Error-Message": "denied"})
    with pytest.raises(ApiError) as exc_info:
        api.file("data://.my/secret").exists()
    assert exc_info.value.status_code == 401


def test_exists_missing_data_type(api, mock_request, response):
    mock_request.return_value = response()
    with pytest.raises(DataTypeError):
        api.file("data://.my/a").exists()


def test_data_object_into_type(api, mock_request, response):
    mock_request.return_value = response(headers=DIR_HEADERS)
    obj = api.data("data://.my/robots")
    assert obj.get_type() == DataType.DIR
    assert isinstance(obj.into_type(), DataDir)

    mock_request.return_value = response(headers=FILE_HEADERS)
    assert isinstance(api.data("data://.my/a.txt").into_type(), DataFile)


def test_file_put_variants(api, mock_request, response):
    mock_request.return_value = response()
    robot = api.file("data://.my/robots/T-800.txt")

    robot.put("I'll be back")
    args, kwargs = mock_request.call_args
    assert args == ("PUT", "https://api.test.local/v1/data/.my/robots/T-800.txt")
    assert kwargs["data"] == b"I'll be back"

    robot.put(b"\x00\x01")
    assert mock_request.call_args.kwargs["data"] == b"\x00\x01"

    robot.put_json({"model": 800})
    assert mock_request.call_args.kwargs["data"] == b'{"model":800}'


def test_file_get(api, mock_request, response):
    mock_request.return_value = response(body=b'{"model": 800}', headers=FILE_HEADERS)

    data = api.file("data://.my/robots/T-800.json").get()

    assert data.size == 14
    assert data.last_modified.year == 2020
    assert data.as_string() == '{"model": 800}'
    assert data.as_json() == {"model": 800}


def test_file_get_conversions_fail(api, mock_request, response):
    mock_request.return_value = response(body=b"\xff\xfe", headers=FILE_HEADERS)
    data = api.file("data://.my/blob").get()
    assert data.as_bytes() == b"\xff\xfe"
    with pytest.raises(Utf8Error):
        data.as_string()

    mock_request.return_value = response(body=b"not json", headers=FILE_HEADERS)
    with pytest.raises(DecoderError):
        api.file("data://.my/notes.txt").get().as_json()


def test_file_get_on_directory(api, mock_request, response):
    mock_request.return_value = response(json={"folders": []}, headers=DIR_HEADERS)
    with pytest.raises(DataTypeError):
        api.file("data://.my/robots").get()


def test_file_delete(api, mock_request, response):
    mock_request.return_value = response(json={"result": {"deleted": 1}})
    api.file("data://.my/a.txt").delete()
    assert mock_request.call_args.args == ("DELETE", "https://api.test.local/v1/data/.my/a.txt")


def test_listed_file_with_reserved_characters(api, mock_request, response):
    listing = response(
        json={
            "files": [
                {"filename": "report#1.csv", "size": 3, "last_modified": "2020-03-04T10:00:00Z"},
                {"filename": "what?.txt", "size": 1, "last_modified": "2020-03-04T10:00:00Z"},
            ]
        },
        headers=DIR_HEADERS,
    )
    deleted = response(json={"result": {"deleted": 1}})
    mock_request.side_effect = [listing, deleted, deleted]

    report, question = list(api.dir("data://.my/docs").list())
    report.delete()
    question.delete()

    assert report.to_data_uri() == "data://.my/docs/report#1.csv"
    urls = [c.args[1] for c in mock_request.call_args_list[1:]]
    assert urls == [
        "https://api.test.local/v1/data/.my/docs/report%231.csv",
        "https://api.test.local/v1/data/.my/docs/what%3F.txt",
    ]


def test_dir_create(api, mock_request, response):
    mock_request.return_value = response()

    api.dir("data://.my/robots").create()
    args, kwargs = mock_request.call_args
    assert args == ("POST", "https://api.test.local/v1/data/.my")
    assert json.loads(kwargs["data"]) == {"name": "robots", "acl": {"read": ["algo://.my/*"]}}

    api.dir("data://.my/public").create(ReadAcl.PUBLIC)
    assert json.loads(mock_request.call_args.kwargs["data"])["acl"] == {
        "read": ["user://*", "algo://.my/*"]
    }

    api.dir("data://.my/private").create(ReadAcl.PRIVATE)
    assert json.loads(mock_request.call_args.kwargs["data"])["acl"] == {"read": []}


def test_dir_create_root(api, mock_request):
    with pytest.raises(DataPathError):
        api.dir("data://").create()
    mock_request.assert_not_called()


def test_dir_delete(api, mock_request, response):
    mock_request.return_value = response(json={"result": {"deleted": 3}})

    deleted = api.dir("data://.my/robots").delete(force=True)

    assert deleted.deleted == 3
    assert mock_request.call_args.kwargs["params"] == {"force": "true"}


def test_dir_delete_conflict(api, mock_request, response):
    mock_request.return_value = response(
        status_code=409, json={"error": {"message": "Directory is not empty"}}
    )
    with pytest.raises(ApiError) as exc_info:
        api.dir("data://.my/robots").delete()
    assert exc_info.value.message == "Directory is not empty"
    assert mock_request.call_args.kwargs["params"] is None


def test_empty_listing(api, mock_request, response):
    mock_request.return_value = response(json={"folders": None, "files": None}, headers=DIR_HEADERS)

    assert list(api.dir("data://.my/empty").list()) == []
    assert mock_request.call_count == 1


def test_listing_pages(api, mock_request, response):
    first = response(
        json={
            "acl": {"read": ["algo://.my/*"]},
            "folders": [{"name": "models"}],
            "files": [
                {"filename": "T-800.png", "size": 1024, "last_modified": "2020-03-03T10:00:00Z"}
            ],
            "marker": "page-2",
        },
        headers=DIR_HEADERS,
    )
    second = response(
        json={
            "files": [
                {"filename": "T-1000.png", "size": 2048, "last_modified": "2020-03-04T10:00:00Z"}
            ]
        },
        headers=DIR_HEADERS,
    )
    mock_request.side_effect = [first, second]

    listing = api.dir("data://.my/robots").list()
    items = list(listing)

    assert [item.to_data_uri() for item in items] == [
        "data://.my/robots/models",
        "data://.my/robots/T-800.png",
        "data://.my/robots/T-1000.png",
    ]
    assert isinstance(items[0], DataDirItem)
    assert isinstance(items[1], DataFileItem)
    assert items[1].size == 1024
    assert items[2].last_modified.day == 4
    assert listing.acl.read_acl == ReadAcl.MY_ALGORITHMS

    first_call, second_call = mock_request.call_args_list
    assert first_call.kwargs["params"] is None
    assert second_call.kwargs["params"] == {"marker": "page-2"}


def test_listing_error_keeps_position(api, mock_request, response):
    first = response(
        json={"folders": [{"name": "a"}], "marker": "page-2"},
        headers=DIR_HEADERS,
    )
    failed = response(status_code=500, json={"error": {"message": "temporary failure"}})
    second = response(json={"folders": [{"name": "b"}]}, headers=DIR_HEADERS)
    mock_request.side_effect = [first, failed, second]

    listing = api.dir("data://.my/robots").list()

    assert next(listing).basename() == "a"
    with pytest.raises(ApiError):
        next(listing)
    assert next(listing).basename() == "b"
    with pytest.raises(StopIteration):
        next(listing)

    markers = [c.kwargs["params"] for c in mock_request.call_args_list]
    assert markers == [None, {"marker": "page-2"}, {"marker": "page-2"}]


def test_listing_on_file(api, mock_request, response):
    mock_request.return_value = response(body=b"content", headers=FILE_HEADERS)
    with pytest.raises(DataTypeError):
        list(api.dir("data://.my/robots/T-800.png").list())


def test_get_acl(api, mock_request, response):
    mock_request.return_value = response(json={"acl": {"read": ["user://*"]}}, headers=DIR_HEADERS)
    assert api.dir("data://.my/public").get_acl().read_acl == ReadAcl.PUBLIC


def test_put_file(api, mock_request, response, tmp_path):
    local = tmp_path / "T-800.png"
    local.write_bytes(b"\x89PNG")
    mock_request.return_value = response()

    uploaded = api.dir("data://.my/robots").put_file(local)

    assert uploaded.to_data_uri() == "data://.my/robots/T-800.png"
    assert mock_request.call_args.args == (
        "PUT",
        "https://api.test.local/v1/data/.my/robots/T-800.png",
    )


def test_download(api, tmp_path):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/data/.my/robots/T-800.png"
        assert request.headers["Authorization"].startswith("Simple ")
        return httpx.Response(200, content=b"chunk-1chunk-2", headers={"X-Data-Type": "file"})

    api._httpx_client = httpx.Client(transport=httpx.MockTransport(handler))
    target = tmp_path / "out" / "T-800.png"

    path = api.file("data://.my/robots/T-800.png").download(target, chunk_size=4)

    assert path == str(target)
    assert target.read_bytes() == b"chunk-1chunk-2"


def test_download_error_removes_partial_file(api, tmp_path):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": {"message": "file not found"}})

    api._httpx_client = httpx.Client(transport=httpx.MockTransport(handler))
    target = tmp_path / "missing.png"

    with pytest.raises(ApiError) as exc_info:
        api.file("data://.my/missing.png").download(target)

    assert exc_info.value.status_code == 404
    assert not target.exists()


def test_transport_timeout_is_retryable(api, tmp_path):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    api._httpx_client = httpx.Client(transport=httpx.MockTransport(handler))

    with pytest.raises(HttpError) as exc_info:
        api.file("data://.my/slow.bin").download(tmp_path / "slow.bin")
    assert exc_info.value.retryable


def test_acl_bits():
    assert DataAcl().read_acl == ReadAcl.MY_ALGORITHMS
    assert DataAcl.from_read_acl(ReadAcl.PRIVATE).to_wire() == {"read": []}
    custom = DataAcl(read_w=False, read_g=False, read_a=False, read_u=False)
    assert custom.read_acl is None
    assert DataAcl.model_validate({"read_w": True, "read_a": True}).read_acl == ReadAcl.PUBLIC


def test_acl_group_bit_cannot_be_sent():
    from algoclient.exceptions import EncoderError

    with pytest.raises(EncoderError):
        DataAcl(read_g=True).to_wire()


if __name__ == "__main__":
    pytest.main()
