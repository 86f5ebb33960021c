"""Algorithm references and version pins."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

ALGO_SCHEME = "algo://"


@dataclass(frozen=True)
class Latest:
    def __str__(self) -> str:
        return "latest"

    @property
    def url_segment(self) -> str:
        return ""


@dataclass(frozen=True)
class Minor:
    major: int
    minor: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"

    @property
    def url_segment(self) -> str:
        return str(self)


@dataclass(frozen=True)
class Revision:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def url_segment(self) -> str:
        return str(self)


@dataclass(frozen=True)
class Hash:
    commit: str

    def __str__(self) -> str:
        return self.commit

    @property
    def url_segment(self) -> str:
        return self.commit


Version = Union[Latest, Minor, Revision, Hash]

VersionLike = Union[Version, str, Tuple[int, ...], None]


def parse_version(version: VersionLike) -> Version:
    """
    Parses a version pin.

    Three numeric parts give a :class:`Revision`, two a :class:`Minor`,
    ``None``, ``""`` or ``"latest"`` give :class:`Latest`, and anything
    else is treated as a commit :class:`Hash`.
    """
    if isinstance(version, (Latest, Minor, Revision, Hash)):
        return version
    if version is None:
        return Latest()
    if isinstance(version, tuple):
        version = ".".join(str(part) for part in version)

    version = version.strip()
    if version in ("", "latest"):
        return Latest()

    parts = version.split(".")
    if all(part.isdigit() for part in parts):
        numbers = [int(part) for part in parts]
        if len(numbers) == 3:
            return Revision(*numbers)
        if len(numbers) == 2:
            return Minor(*numbers)
    return Hash(version)


class AlgoRef:
    """
    Normalized ``user/algo[/version]`` reference.

    Accepts an ``algo://`` prefix and a leading ``/``.
    """

    def __init__(self, path: str):
        if path.startswith(ALGO_SCHEME):
            path = path[len(ALGO_SCHEME) :]
        segments = [segment for segment in path.strip().split("/") if segment]
        if len(segments) < 2 or len(segments) > 3:
            raise ValueError(f"Invalid algorithm reference: {path!r}")

        self.user = segments[0]
        self.name = segments[1]
        self.version: Version = parse_version(segments[2] if len(segments) == 3 else None)

    @classmethod
    def with_version(cls, user_algo: str, version: VersionLike) -> "AlgoRef":
        ref = cls(user_algo)
        return ref.pinned(version)

    def pinned(self, version: VersionLike) -> "AlgoRef":
        ref = AlgoRef(f"{self.user}/{self.name}")
        ref.version = parse_version(version)
        return ref

    @property
    def path(self) -> str:
        segment = self.version.url_segment
        if segment:
            return f"{self.user}/{self.name}/{segment}"
        return f"{self.user}/{self.name}"

    def __str__(self) -> str:
        return f"{ALGO_SCHEME}{self.path}"

    def __repr__(self) -> str:
        return f"AlgoRef({self.path!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AlgoRef):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)
