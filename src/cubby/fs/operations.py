"""Standalone file operations over the sandbox.

Each function takes the sandbox (and catalog where it lists) as a
parameter and runs its blocking I/O in a worker thread.  ``OSError`` is
wrapped into ``IoError``; no in-process locking is done, concurrent
requests race at the OS level.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from cubby.exceptions import ContentError, IoError, PathError

if TYPE_CHECKING:
    from pathlib import Path

    from .catalog import FileCatalog
    from .sandbox import PathSandbox
    from .types import FileEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _run_io(func: Callable[..., T], *args: Any) -> T:
    try:
        return await asyncio.to_thread(func, *args)
    except OSError as e:
        raise IoError(str(e)) from e


async def list_folder(
    path: str,
    *,
    sandbox: PathSandbox,
    catalog: FileCatalog,
) -> list[FileEntry]:
    """List the direct children of folder *path*."""
    actual = await sandbox.resolve(path)
    if not await asyncio.to_thread(actual.is_dir):
        raise PathError(f"Not a directory: {path}")
    return await catalog.list_children(actual)


async def create_folder(path: str, *, sandbox: PathSandbox) -> None:
    """Create a single folder; the parent must already exist."""
    actual = await sandbox.resolve(path)
    await _run_io(actual.mkdir)
    logger.debug("Created folder %s", actual)


async def read_file(path: str, *, sandbox: PathSandbox) -> bytes:
    """Return the raw bytes of file *path*."""
    actual = await sandbox.resolve(path)
    if not await asyncio.to_thread(actual.is_file):
        raise PathError(f"File not found: {path}")
    return await _run_io(actual.read_bytes)


async def upload_file(
    folder: str,
    name: str,
    data: bytes,
    *,
    sandbox: PathSandbox,
) -> Path:
    """Write *data* to ``folder/name``; existing files are never overwritten."""
    if not name or "/" in name or os.sep in name or name in (".", ".."):
        raise ContentError(f"Invalid file name: {name!r}")

    target = await sandbox.resolve(f"{folder.rstrip('/')}/{name}")

    def _do_write() -> None:
        # "x" mode fails atomically if the file appeared meanwhile
        with open(target, "xb") as f:
            f.write(data)

    if await asyncio.to_thread(target.exists):
        raise PathError(f"File already exists: {name}")
    try:
        await asyncio.to_thread(_do_write)
    except FileExistsError:
        raise PathError(f"File already exists: {name}") from None
    except OSError as e:
        raise IoError(str(e)) from e

    logger.debug("Uploaded %d bytes to %s", len(data), target)
    return target


async def rename_file(src: str, dest: str, *, sandbox: PathSandbox) -> None:
    """Rename *src* to *dest*, both root-relative."""
    source = await sandbox.resolve(src)
    target = await sandbox.resolve(dest)
    if sandbox.is_root(source) or sandbox.is_root(target):
        raise PathError("Cannot rename the root folder")
    await _run_io(os.rename, source, target)
    logger.debug("Renamed %s -> %s", source, target)


async def delete_file(path: str, *, sandbox: PathSandbox) -> None:
    """Delete a file, or an empty folder."""
    actual = await sandbox.resolve(path)
    if sandbox.is_root(actual):
        raise PathError("Cannot delete the root folder")

    def _do_delete() -> None:
        if actual.is_dir() and not actual.is_symlink():
            actual.rmdir()
        else:
            actual.unlink()

    await _run_io(_do_delete)
    logger.debug("Deleted %s", actual)
