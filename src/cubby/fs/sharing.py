"""ShareRegistry — public share tokens bound to sandboxed paths.

Stateless service that receives a session factory at construction and
opens one session per operation.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from typing import TYPE_CHECKING

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import select

from cubby.exceptions import ContentError, DatabaseError, IoError, PathError, ServerError
from cubby.models import Share

from .sandbox import PathSandbox
from .types import ShareInfo

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncSession

    from .catalog import FileCatalog
    from .types import FileEntry

logger = logging.getLogger(__name__)

MAX_TOKEN_ATTEMPTS = 10


def random_token() -> str:
    """A uniformly random unsigned 32-bit integer, as text."""
    return str(secrets.randbits(32))


class ShareRegistry:
    """Allocates, lists, deletes and resolves share links.

    Token uniqueness is enforced by the ``share.url`` unique constraint.
    The pre-insert lookup only avoids needless failed inserts; a
    constraint violation at insert time is treated as a collision and
    retried like one.
    """

    def __init__(
        self,
        sessions: Callable[[], AsyncSession],
        sandbox: PathSandbox,
        catalog: FileCatalog,
        *,
        token_factory: Callable[[], str] = random_token,
    ) -> None:
        self._sessions = sessions
        self._sandbox = sandbox
        self._catalog = catalog
        self._token_factory = token_factory

    @staticmethod
    async def _token_taken(session: AsyncSession, token: str) -> bool:
        result = await session.execute(select(Share.id).where(Share.url == token))
        return result.first() is not None

    async def _try_insert(self, path: str, token: str, password: str | None) -> bool:
        """Insert one candidate.  Returns False on collision."""
        async with self._sessions() as session:
            try:
                if await self._token_taken(session, token):
                    return False
                session.add(Share(path=path, url=token, password=password))
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return False
        return True

    async def add_share(self, path: str, password: str | None = None) -> str:
        """Share *path* and return its new public token.

        Raises ``PathError`` for paths outside the root and ``ServerError``
        when no free token was found after ``MAX_TOKEN_ATTEMPTS`` draws.
        """
        await self._sandbox.resolve(path)

        for attempt in range(1, MAX_TOKEN_ATTEMPTS + 1):
            token = self._token_factory()
            try:
                inserted = await self._try_insert(path, token, password)
            except SQLAlchemyError as e:
                logger.error("Share insert failed for %s: %s", path, e, exc_info=True)
                raise DatabaseError(str(e)) from e
            if inserted:
                logger.debug("Shared %s as %s (attempt %d)", path, token, attempt)
                return token
            logger.warning("Share token collision on attempt %d", attempt)

        raise ServerError(f"No free share token after {MAX_TOKEN_ATTEMPTS} attempts")

    async def delete_share(self, path: str) -> int:
        """Delete every share whose stored path equals *path* exactly."""
        try:
            async with self._sessions() as session:
                result = await session.execute(delete(Share).where(Share.path == path))
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Share delete failed for %s: %s", path, e, exc_info=True)
            raise DatabaseError(str(e)) from e
        return result.rowcount or 0

    async def list_shares(self) -> list[ShareInfo]:
        """All share records, passwords included."""
        try:
            async with self._sessions() as session:
                result = await session.execute(select(Share))
                shares = result.scalars().all()
        except SQLAlchemyError as e:
            raise DatabaseError(str(e)) from e
        return [ShareInfo(path=s.path, url=s.url, password=s.password) for s in shares]

    async def _lookup(self, token: str) -> Share | None:
        try:
            async with self._sessions() as session:
                result = await session.execute(select(Share).where(Share.url == token))
                return result.scalars().first()
        except SQLAlchemyError as e:
            raise DatabaseError(str(e)) from e

    async def resolve_share(
        self,
        token: str,
        sub_path: str = "",
        password: str | None = None,
        *,
        download: bool = False,
    ) -> FileEntry | bytes | list[FileEntry]:
        """Resolve an anonymous share request.

        Folder shares accept a *sub_path* below the shared folder; it is
        validated against the shared folder itself, not only the root.
        Returns a listing for folders, raw bytes for files when
        *download* is set, otherwise a single descriptor carrying its
        root-relative ``absolute_path``.
        """
        share = await self._lookup(token)
        if share is None:
            raise PathError(f"Unknown share: {token!r}")
        if password != share.password:
            raise ContentError("Share password mismatch")

        base = await self._sandbox.resolve(share.path)

        def _locate() -> tuple[Path, bool, bool]:
            if base.is_file():
                target = base
            else:
                target = PathSandbox(base).resolve_sync(sub_path)
            return target, target.exists(), target.is_dir()

        target, exists, is_dir = await asyncio.to_thread(_locate)
        if not exists:
            raise PathError(f"Not found in share {token!r}: {sub_path!r}")

        if is_dir:
            return await self._catalog.list_children(target)
        if download:
            try:
                return await asyncio.to_thread(target.read_bytes)
            except OSError as e:
                raise IoError(str(e)) from e
        return await self._catalog.entry(target, absolute=True)
