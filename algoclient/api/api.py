from pathlib import Path
from typing import Optional, Union

from algoclient.api._api import _Api
from algoclient.api.algorithm_api import Algorithm
from algoclient.api.data_api import DataDir, DataFile, DataObject
from algoclient.dto.version import AlgoRef, VersionLike
from algoclient.io.credentials import ApiAuth


class Api(_Api):
    """
    Entry point of the client.

    :Usage example:

     .. code-block:: python

        import algoclient

        api = algoclient.Api(api_key="simA8y8WJtWGW+4h1hB0sLKnvb11")
        response = api.algo("kenny/Factor").pipe("19635")
        print(response.decode(list))
        # Output: [3, 5, 7, 11, 17]
    """

    def __init__(
        self,
        server_address: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        auth: Optional[ApiAuth] = None,
    ):
        if auth is None:
            auth = ApiAuth.from_key(api_key)
        super().__init__(server_address=server_address, auth=auth, timeout=timeout)

    def algo(self, algo_ref: Union[str, AlgoRef], version: VersionLike = None) -> Algorithm:
        """Handle to an algorithm, e.g. ``api.algo("kenny/Factor/0.1")``."""
        if not isinstance(algo_ref, AlgoRef):
            algo_ref = AlgoRef(algo_ref)
        if version is not None:
            algo_ref = algo_ref.pinned(version)
        return Algorithm(self, algo_ref)

    def file(self, uri: str) -> DataFile:
        return DataFile(self, uri)

    def dir(self, uri: str) -> DataDir:
        return DataDir(self, uri)

    def data(self, uri: str) -> DataObject:
        """Handle to a data path whose type is resolved on demand."""
        return DataObject(self, uri)

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "Api":
        """
        Create API client from environment variables.

        Reads ``ALGORITHMIA_API``, ``ALGORITHMIA_API_KEY`` and
        ``ALGORITHMIA_TIMEOUT``, after loading ``~/algorithmia.env`` (or
        ``env_file``) and a project ``.env``. Without a key the client is
        anonymous.
        """
        from algoclient.io.env import load_settings

        settings = load_settings(Path(env_file) if env_file is not None else None)
        return cls(
            server_address=settings.server_address,
            timeout=settings.ALGORITHMIA_TIMEOUT,
            auth=settings.auth,
        )
