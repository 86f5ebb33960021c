"""
Credential models and helpers used by the transport layer.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import urlparse

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_ADDRESS = "https://api.algorithmia.com"
DEFAULT_TIMEOUT = 300
ENV_FILENAME = "algorithmia.env"


def _normalize_url(url: Optional[str]) -> str:
    """Adds a scheme when missing and drops the trailing slash."""
    if not url:
        return DEFAULT_API_ADDRESS
    parsed_url = urlparse(url)
    if not parsed_url.scheme:
        url = "https://" + url
    return url.rstrip("/")


class AuthKind(str, enum.Enum):
    SIMPLE = "simple"
    NONE = "none"


@dataclass(frozen=True)
class ApiAuth:
    """
    Authentication attached to every request.

    ``ApiAuth.none()`` sends no ``Authorization`` header and is only
    useful against endpoints that accept anonymous access.
    """

    kind: AuthKind
    key: Optional[str] = None

    @classmethod
    def simple(cls, key: str) -> "ApiAuth":
        return cls(AuthKind.SIMPLE, key)

    @classmethod
    def none(cls) -> "ApiAuth":
        return cls(AuthKind.NONE)

    @classmethod
    def from_key(cls, key: Optional[str]) -> "ApiAuth":
        """An empty or missing key means no authentication."""
        if not key:
            return cls.none()
        return cls.simple(key)

    def headers(self) -> Dict[str, str]:
        if self.kind == AuthKind.SIMPLE:
            return {"Authorization": f"Simple {self.key}"}
        return {}

    def __repr__(self) -> str:
        # keep the key out of logs
        return f"ApiAuth({self.kind.value})"


class ClientSettings(BaseSettings):
    """
    Settings model for client configuration via environment variables
    or other settings sources supported by `pydantic-settings`.
    """

    ALGORITHMIA_API: str = DEFAULT_API_ADDRESS
    ALGORITHMIA_API_KEY: Optional[SecretStr] = None
    ALGORITHMIA_TIMEOUT: float = DEFAULT_TIMEOUT

    model_config = SettingsConfigDict(
        env_file=ENV_FILENAME,
        extra="ignore",
    )

    @property
    def server_address(self) -> str:
        return _normalize_url(self.ALGORITHMIA_API)

    @property
    def auth(self) -> ApiAuth:
        if self.ALGORITHMIA_API_KEY is None:
            return ApiAuth.none()
        return ApiAuth.from_key(self.ALGORITHMIA_API_KEY.get_secret_value())
