"""PathSandbox — confines caller-supplied paths to the sandbox root."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path, PurePosixPath

from cubby.exceptions import PathError

logger = logging.getLogger(__name__)

_SEPARATORS = "/" + os.sep


class PathSandbox:
    """Resolves root-relative path strings to disk paths under ``root``.

    The parent of a joined path is canonicalized (existing symlinks
    followed, ``..`` applied afterwards) and must lie under the root, as
    must the target of the final segment when it exists.  The returned
    path is that canonical parent plus the final segment, so every
    filesystem operation acts on exactly the path that was checked.
    Missing entries are accepted so new files and folders can be created.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(os.path.realpath(root))

    def join(self, relative: str) -> Path:
        """Join *relative* onto the root, ignoring any leading separator."""
        if "\x00" in relative:
            raise PathError(f"Path contains null bytes: {relative!r}")
        rel = relative.lstrip(_SEPARATORS)
        if not rel:
            return self.root
        return self.root / rel

    def contain(self, path: Path) -> Path | None:
        """Canonical form of *path* if it stays under the root, else None.

        Parent directories are canonicalized; the final segment is kept so
        a symlink inside the root names the link itself.  An entry that
        exists but cannot be canonicalized (dangling symlink, loop) is
        rejected; a missing one is accepted when its canonical parent is
        under the root.
        """
        try:
            if path.name in ("", ".."):
                candidate = path.resolve()
            else:
                candidate = Path(os.path.realpath(path.parent)) / path.name
        except (OSError, RuntimeError):
            return None
        if not candidate.is_relative_to(self.root):
            return None
        try:
            target = candidate.resolve(strict=True)
        except (OSError, RuntimeError):
            return None if os.path.lexists(candidate) else candidate
        return candidate if target.is_relative_to(self.root) else None

    def is_traversal(self, path: Path) -> bool:
        """Return True when *path* escapes the root."""
        return self.contain(path) is None

    def resolve_sync(self, relative: str) -> Path:
        """Validate *relative* and return its canonical disk path under the root.

        Raises ``PathError`` on traversal.
        """
        actual = self.contain(self.join(relative))
        if actual is None:
            logger.warning("Path traversal rejected: %r", relative)
            raise PathError(f"Path traversal detected: {relative!r} resolves outside root")
        return actual

    async def resolve(self, relative: str) -> Path:
        return await asyncio.to_thread(self.resolve_sync, relative)

    def is_root(self, path: Path) -> bool:
        return Path(os.path.normpath(path)) == self.root

    def to_relative(self, path: Path) -> str:
        """Root-relative POSIX form of *path* (``""`` for the root itself)."""
        try:
            rel = Path(os.path.normpath(path)).relative_to(self.root)
        except ValueError:
            raise PathError(f"Path is outside root: {path}") from None
        posix = PurePosixPath(*rel.parts).as_posix()
        return "" if posix == "." else posix
