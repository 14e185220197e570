"""FileCatalog — directory listing and recursive name search."""

from __future__ import annotations

import asyncio
import logging
import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING

from cubby.exceptions import FileError, IoError, PathError

from .types import FileEntry, FileKind

if TYPE_CHECKING:
    from .sandbox import PathSandbox

logger = logging.getLogger(__name__)


def build_entry(path: Path) -> FileEntry:
    """Describe *path* from its (symlink-following) metadata.

    Raises ``PathError`` if the name is not valid text and ``IoError`` if
    the metadata cannot be read.
    """
    name = path.name
    if not name:
        raise PathError(f"Path has no name: {path}")
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        raise PathError(f"Name is not valid text: {name!r}") from None

    try:
        st = path.stat()
    except OSError as e:
        raise IoError(str(e)) from e

    # Timestamps before the epoch are reported as 0
    last_modified = int(st.st_mtime) if st.st_mtime >= 0 else 0
    return FileEntry(
        name=name,
        size=st.st_size,
        kind=FileKind.FOLDER if stat.S_ISDIR(st.st_mode) else FileKind.FILE,
        last_modified=last_modified,
    )


class FileCatalog:
    """Read-only views of the sandbox tree.

    Callers pass disk paths already returned by the sandbox; ``search``
    always starts at the root.
    """

    def __init__(self, sandbox: PathSandbox) -> None:
        self._sandbox = sandbox

    def entry_sync(self, path: Path, *, absolute: bool = False) -> FileEntry:
        entry = build_entry(path)
        if absolute:
            entry.absolute_path = self._sandbox.to_relative(path)
        return entry

    def list_children_sync(self, path: Path) -> list[FileEntry]:
        """One entry per direct child, in directory iteration order.

        Children whose metadata cannot be read are skipped.
        """
        entries: list[FileEntry] = []
        try:
            with os.scandir(path) as it:
                for item in it:
                    try:
                        entries.append(build_entry(Path(item.path)))
                    except FileError as e:
                        logger.warning("Skipping unreadable entry %s: %s", item.path, e)
        except OSError as e:
            raise IoError(str(e)) from e
        return entries

    def search_sync(self, name: str) -> list[FileEntry]:
        """Every entry under the root whose name contains *name*.

        Case-sensitive.  Each folder is visited once; symlinked folders
        leading outside the root or back into visited folders are not
        descended.  A folder that cannot be read aborts the search.
        """
        root = self._sandbox.root
        pending: list[Path] = [root]
        visited: set[Path] = {root}
        found: list[FileEntry] = []

        while pending:
            folder = pending.pop()
            for entry in self.list_children_sync(folder):
                child = folder / entry.name
                if entry.is_folder:
                    real = child.resolve()
                    if real not in visited and not self._sandbox.is_traversal(real):
                        visited.add(real)
                        pending.append(child)
                if name in entry.name:
                    entry.absolute_path = self._sandbox.to_relative(child)
                    found.append(entry)

        logger.debug("Search for %r matched %d entries", name, len(found))
        return found

    async def entry(self, path: Path, *, absolute: bool = False) -> FileEntry:
        return await asyncio.to_thread(self.entry_sync, path, absolute=absolute)

    async def list_children(self, path: Path) -> list[FileEntry]:
        return await asyncio.to_thread(self.list_children_sync, path)

    async def search(self, name: str) -> list[FileEntry]:
        return await asyncio.to_thread(self.search_sync, name)
