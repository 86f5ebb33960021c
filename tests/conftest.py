import json as jsonlib
from typing import Any, Dict, Optional
from unittest.mock import patch

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from algoclient.api.api import Api

SERVER_ADDRESS = "https://api.test.local"
API_KEY = "simA8y8WJtWGW+4h1hB0sLKnvb11"


def make_response(
    status_code: int = 200,
    json: Any = None,
    body: Optional[bytes] = None,
    headers: Optional[Dict[str, str]] = None,
    url: str = SERVER_ADDRESS,
) -> requests.Response:
    """Builds a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    if json is not None:
        response._content = jsonlib.dumps(json).encode("utf-8")
    else:
        response._content = body if body is not None else b""
    response.headers = CaseInsensitiveDict(headers or {})
    response.url = url
    response.reason = "OK" if status_code < 400 else "Error"
    response.encoding = "utf-8"
    return response


@pytest.fixture
def api():
    return Api(server_address=SERVER_ADDRESS, api_key=API_KEY)


@pytest.fixture
def mock_request():
    with patch("algoclient.api._api.requests.request") as mocked:
        yield mocked


@pytest.fixture
def response():
    return make_response
