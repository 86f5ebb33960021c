import re
from typing import List, Tuple
from urllib.parse import quote

from algoclient.exceptions import DataPathError

DEFAULT_SCHEME = "data"
HOSTED_SCHEMES = ("data",)
SCHEME_SEPARATOR = "://"

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*$")


def parse_data_uri(uri: str) -> Tuple[str, List[str]]:
    """
    Parses a data URI into its scheme and path segments.

    Supports ``scheme://a/b``, ``/a/b`` and ``a/b``; the last two default
    to the hosted ``data`` scheme. Empty segments are dropped, so
    ``data://a//b/`` and ``data://a/b`` address the same object.

    :param uri: Data URI.
    :type uri: str
    :return: Scheme and list of path segments (empty for a root).
    :rtype: :class:`tuple`
    """
    if not isinstance(uri, str) or not uri.strip():
        raise DataPathError(f"Invalid data URI: {uri!r}")

    uri = uri.strip()
    if SCHEME_SEPARATOR in uri:
        scheme, rest = uri.split(SCHEME_SEPARATOR, 1)
        scheme = scheme.lower()
        if not _SCHEME_RE.match(scheme):
            raise DataPathError(f"Unrecognized scheme in data URI: {uri!r}")
    else:
        scheme, rest = DEFAULT_SCHEME, uri

    segments = [segment for segment in rest.split("/") if segment]
    return scheme, segments


def format_data_uri(scheme: str, segments: List[str]) -> str:
    return f"{scheme}{SCHEME_SEPARATOR}{'/'.join(segments)}"


def data_api_suffix(scheme: str, segments: List[str]) -> str:
    """
    API path (relative to the server address) for a data object.

    Hosted data lives under ``v1/data``; every connector (``dropbox``,
    ``s3``, ...) lives under ``v1/connector/<scheme>``. Each segment is
    percent-encoded, so names containing ``#``, ``?`` or ``%`` stay in the path.
    """
    if scheme in HOSTED_SCHEMES:
        base = "v1/data"
    else:
        base = f"v1/connector/{scheme}"
    if not segments:
        return base
    return f"{base}/{'/'.join(quote(segment, safe='') for segment in segments)}"
