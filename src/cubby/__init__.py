"""Cubby: self-hosted file storage with sandboxed paths and share links."""

__version__ = "0.1.0"

from cubby._cubby import Cubby
from cubby.auth import AuthGateway, AuthToken, Claim, TokenSigner
from cubby.config import Settings
from cubby.exceptions import (
    AuthError,
    AuthErrorKind,
    ContentError,
    CubbyError,
    DatabaseError,
    FileError,
    IoError,
    PathError,
    ServerError,
)
from cubby.fs import FileCatalog, FileEntry, FileKind, PathSandbox, ShareInfo, ShareRegistry

__all__ = [
    "AuthError",
    "AuthErrorKind",
    "AuthGateway",
    "AuthToken",
    "Claim",
    "ContentError",
    "Cubby",
    "CubbyError",
    "DatabaseError",
    "FileCatalog",
    "FileEntry",
    "FileError",
    "FileKind",
    "IoError",
    "PathError",
    "PathSandbox",
    "ServerError",
    "Settings",
    "ShareInfo",
    "ShareRegistry",
    "TokenSigner",
    "__version__",
]
