# coding: utf-8
"""HTTP transport shared by the algorithm and data clients."""

from __future__ import annotations

import logging
import platform
import threading
from typing import Any, Dict, Generator, Optional, Union

import httpx
import requests

from algoclient.io.credentials import DEFAULT_TIMEOUT, ApiAuth, _normalize_url
from algoclient.io.network_exceptions import process_requests_exception, raise_for_status

VERSION = "0.1.0"
USER_AGENT = f"algoclient-python/{VERSION} (Python {platform.python_version()})"

logger = logging.getLogger(__name__)

Timeout = Union[float, None]


class _Api:
    """
    Connection to the Algorithmia API.

    Holds the server address, authentication and default request timeout.
    None of these change after construction, so one instance can be shared
    between threads. Requests are not retried.
    """

    def __init__(
        self,
        server_address: Optional[str] = None,
        auth: Optional[ApiAuth] = None,
        timeout: Optional[float] = None,
    ):
        # authorization
        self._server_address = _normalize_url(server_address)
        self._auth = auth if auth is not None else ApiAuth.none()
        self._headers = {"User-Agent": USER_AGENT, **self._auth.headers()}

        self._timeout = DEFAULT_TIMEOUT if timeout is None else timeout

        # httpx client, created on first streamed request
        self._httpx_client: Optional[httpx.Client] = None
        self._client_lock = threading.Lock()

    @property
    def api_server_address(self) -> str:
        """
        Get API server address.

        :return: API server address.
        :rtype: :class:`str`
        :Usage example:

         .. code-block:: python

            import algoclient

            api = algoclient.Api(api_key="simA8y8WJtWGW+4h1hB0sLKnvb11")
            print(api.api_server_address)
            # Output:
            # 'https://api.algorithmia.com'
        """
        return self._server_address

    @property
    def auth(self) -> ApiAuth:
        return self._auth

    @property
    def timeout(self) -> float:
        return self._timeout

    def get(
        self,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Timeout = None,
    ) -> requests.Response:
        """
        Performs GET request to server with given parameters.

        :param method: API path relative to the server address.
        :type method: str
        :param params: URL query parameters.
        :type params: dict, optional
        :param headers: Extra headers for this request.
        :type headers: dict, optional
        :param timeout: Request deadline in seconds, defaults to the client timeout.
        :type timeout: float, optional
        :return: Response object
        :rtype: :class:`Response<Response>`
        """
        return self._request("GET", method, params=params, headers=headers, timeout=timeout)

    def post(
        self,
        method: str,
        data: Union[str, bytes, None] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Timeout = None,
    ) -> requests.Response:
        """
        Performs POST request to server with given parameters.

        :param method: API path relative to the server address.
        :type method: str
        :param data: Request body, sent as is.
        :type data: str or bytes, optional
        :param params: URL query parameters.
        :type params: dict, optional
        :param headers: Extra headers for this request.
        :type headers: dict, optional
        :param timeout: Request deadline in seconds, defaults to the client timeout.
        :type timeout: float, optional
        :return: Response object
        :rtype: :class:`Response<Response>`
        """
        return self._request(
            "POST", method, data=data, params=params, headers=headers, timeout=timeout
        )

    def put(
        self,
        method: str,
        data: Any = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Timeout = None,
    ) -> requests.Response:
        """
        Performs PUT request to server with given parameters.

        :param method: API path relative to the server address.
        :type method: str
        :param data: Request body: str, bytes or a binary file object.
        :param params: URL query parameters.
        :type params: dict, optional
        :return: Response object
        :rtype: :class:`Response<Response>`
        """
        return self._request(
            "PUT", method, data=data, params=params, headers=headers, timeout=timeout
        )

    def delete(
        self,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Timeout = None,
    ) -> requests.Response:
        """
        Performs DELETE request to server with given parameters.

        :param method: API path relative to the server address.
        :type method: str
        :param params: URL query parameters.
        :type params: dict, optional
        """
        return self._request("DELETE", method, params=params, headers=headers, timeout=timeout)

    def head(
        self,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Timeout = None,
    ) -> requests.Response:
        """Performs HEAD request to server."""
        return self._request("HEAD", method, params=params, headers=headers, timeout=timeout)

    def _request(
        self,
        verb: str,
        method: str,
        data: Any = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Timeout = None,
    ) -> requests.Response:
        url = self._prepare_url(method)
        logger.info(f"{verb} {url}")
        if headers is not None:
            headers = {**self._headers, **headers}
        else:
            headers = dict(self._headers)

        try:
            response = requests.request(
                verb,
                url,
                data=data,
                params=params,
                headers=headers,
                timeout=self._timeout if timeout is None else timeout,
            )
        except requests.RequestException as exc:
            raise process_requests_exception(exc, verb, url) from exc

        raise_for_status(response)
        return response

    def stream(
        self,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        chunk_size: int = 8192,
        timeout: Timeout = None,
    ) -> Generator[bytes, None, None]:
        """
        Performs streaming GET request to server.

        :param method: API path relative to the server address.
        :type method: str
        :param params: URL query parameters.
        :type params: dict, optional
        :param headers: Extra headers for this request.
        :type headers: dict, optional
        :param chunk_size: Size of the chunks to stream.
        :type chunk_size: int, optional
        :param timeout: Request deadline in seconds, defaults to the client timeout.
        :type timeout: float, optional
        :return: Generator of byte chunks.
        :rtype: :class:`Generator`
        """
        self._set_client()

        url = self._prepare_url(method)
        logger.info(f"GET {url}")
        if headers is not None:
            headers = {**self._headers, **headers}
        else:
            headers = dict(self._headers)

        try:
            with self._httpx_client.stream(
                "GET",
                url,
                params=params,
                headers=headers,
                timeout=self._timeout if timeout is None else timeout,
            ) as resp:
                if resp.status_code >= 300:
                    resp.read()
                    raise_for_status(resp)

                total_streamed = 0
                for chunk in resp.iter_bytes(chunk_size):
                    total_streamed += len(chunk)
                    yield chunk
                logger.debug(f"Streamed {total_streamed} bytes from {url}")
        except httpx.RequestError as exc:
            raise process_requests_exception(exc, "GET", url) from exc

    def _set_client(self) -> None:
        """
        Creates the shared httpx client on first use.
        """
        with self._client_lock:
            if self._httpx_client is None:
                self._httpx_client = httpx.Client(http2=True)

    def close(self) -> None:
        """Closes the streaming client, if one was created."""
        with self._client_lock:
            if self._httpx_client is not None:
                self._httpx_client.close()
                self._httpx_client = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def _prepare_url(self, method: str) -> str:
        """
        Prepares the API endpoint URL.
        """
        return f"{self._server_address}/{method.lstrip('/')}"
