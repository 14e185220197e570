"""Result types: FileEntry, ShareInfo."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FileKind(str, Enum):
    FILE = "file"
    FOLDER = "folder"


@dataclass
class FileEntry:
    """File/folder descriptor computed from live filesystem metadata.

    ``absolute_path`` is root-relative and only set by search and share
    flows.
    """

    name: str
    size: int
    kind: FileKind
    last_modified: int
    absolute_path: str | None = None

    @property
    def is_folder(self) -> bool:
        return self.kind is FileKind.FOLDER

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "size": self.size,
            "type": self.kind.value,
            "lastModifiedTime": self.last_modified,
        }
        if self.absolute_path is not None:
            data["absolutePath"] = self.absolute_path
        return data


@dataclass
class ShareInfo:
    """A persisted share record as returned to authenticated callers.

    ``password`` is returned verbatim; redaction is up to the caller.
    """

    path: str
    url: str
    password: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "url": self.url, "password": self.password}
