"""Filesystem layer — sandbox, catalog, file operations and sharing."""

from cubby.fs.catalog import FileCatalog, build_entry
from cubby.fs.sandbox import PathSandbox
from cubby.fs.sharing import MAX_TOKEN_ATTEMPTS, ShareRegistry, random_token
from cubby.fs.types import FileEntry, FileKind, ShareInfo

__all__ = [
    "MAX_TOKEN_ATTEMPTS",
    "FileCatalog",
    "FileEntry",
    "FileKind",
    "PathSandbox",
    "ShareInfo",
    "ShareRegistry",
    "build_entry",
    "random_token",
]
