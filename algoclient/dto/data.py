from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator, model_validator

from algoclient.dto.base import BaseInfo
from algoclient.exceptions import EncoderError

WORLD_READ_TOKEN = "user://*"
MY_ALGORITHMS_READ_TOKEN = "algo://.my/*"


class DataType(str, enum.Enum):
    """What a data path resolved to."""

    FILE = "file"
    DIR = "directory"
    ABSENT = "absent"

    def __bool__(self) -> bool:
        return self is not DataType.ABSENT


class ReadAcl(str, enum.Enum):
    PRIVATE = "private"
    MY_ALGORITHMS = "my_algorithms"
    PUBLIC = "public"


class DataAcl(BaseInfo):
    """
    Read permissions of a directory.

    Four independent bits: world, group, the owner's algorithms and the
    owner. Instances are immutable; build a new one to change permissions.
    The API exchanges the ``{"read": [...]}`` form, decoded here into bits.
    """

    read_w: bool = Field(default=False, description="World readable")
    read_g: bool = Field(default=False, description="Group readable")
    read_a: bool = Field(default=True, description="Readable by the owner's algorithms")
    read_u: bool = Field(default=True, description="Readable by the owner")

    @model_validator(mode="before")
    @classmethod
    def from_read_list(cls, values: Any) -> Any:
        """Accept the API's read list as well as explicit bits"""
        if isinstance(values, dict) and "read" in values:
            read = values.get("read") or []
            return {
                "read_w": WORLD_READ_TOKEN in read,
                "read_g": False,
                "read_a": MY_ALGORITHMS_READ_TOKEN in read,
                "read_u": True,
            }
        return values

    @classmethod
    def from_read_acl(cls, acl: ReadAcl) -> "DataAcl":
        return cls(**_READ_ACL_BITS[ReadAcl(acl)])

    @property
    def read_acl(self) -> Optional[ReadAcl]:
        """The matching convenience value, or None for a custom combination."""
        bits = self.model_dump()
        for acl, acl_bits in _READ_ACL_BITS.items():
            if acl_bits == bits:
                return acl
        return None

    def to_wire(self) -> Dict[str, List[str]]:
        if self.read_g:
            raise EncoderError("Group read permission cannot be expressed in the API read list")
        read: List[str] = []
        if self.read_w:
            read.append(WORLD_READ_TOKEN)
        if self.read_a:
            read.append(MY_ALGORITHMS_READ_TOKEN)
        return {"read": read}


_READ_ACL_BITS = {
    ReadAcl.PRIVATE: {"read_w": False, "read_g": False, "read_a": False, "read_u": True},
    ReadAcl.MY_ALGORITHMS: {"read_w": False, "read_g": False, "read_a": True, "read_u": True},
    ReadAcl.PUBLIC: {"read_w": True, "read_g": False, "read_a": True, "read_u": True},
}


class FileItem(BaseInfo):
    filename: str = Field(..., description="Name of the file")
    size: int = Field(..., description="Size of the file in bytes")
    last_modified: datetime = Field(..., description="Last modified timestamp")

    @field_validator("last_modified", mode="before")
    @classmethod
    def validate_last_modified(cls, v):
        if isinstance(v, str):
            try:
                return datetime.fromisoformat(v.replace("Z", "+00:00"))
            except ValueError:
                raise ValueError("last_modified must be a valid ISO 8601 datetime string")
        return v


class FolderItem(BaseInfo):
    name: str = Field(..., description="Name of the folder")
    acl: Optional[DataAcl] = None


class DirectoryShow(BaseInfo):
    """One page of a directory listing."""

    acl: Optional[DataAcl] = None
    folders: List[FolderItem] = Field(default_factory=list)
    files: List[FileItem] = Field(default_factory=list)
    marker: Optional[str] = None

    @field_validator("folders", "files", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return [] if v is None else v


class DirectoryDeleted(BaseInfo):
    deleted: int = Field(default=0, description="Number of files deleted")
