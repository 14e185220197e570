"""Cubby — async facade wiring sandbox, catalog, auth and sharing."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cubby.auth.gateway import AuthGateway
from cubby.auth.tokens import TokenSigner
from cubby.database import Database
from cubby.fs import operations
from cubby.fs.catalog import FileCatalog
from cubby.fs.sandbox import PathSandbox
from cubby.fs.sharing import ShareRegistry, random_token

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncSession

    from cubby.auth.gateway import AuthToken
    from cubby.auth.tokens import Claim
    from cubby.config import Settings
    from cubby.fs.types import FileEntry, ShareInfo

logger = logging.getLogger(__name__)


class Cubby:
    """One storage service instance over a single sandbox root.

    Built once from :class:`~cubby.config.Settings`; every component
    receives its configuration from here.  Usage::

        cubby = Cubby(Settings.from_env())
        await cubby.open()
        token = await cubby.authorize("alice", "secret123")
        entries = await cubby.list_folder("/docs")
        await cubby.close()

    File operations do not take a claim: any authenticated caller may
    access the whole root, and authentication happens before them.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        clock: Callable[[], float] | None = None,
        token_factory: Callable[[], str] = random_token,
    ) -> None:
        self.settings = settings
        self.sandbox = PathSandbox(settings.folder_path)
        self.catalog = FileCatalog(self.sandbox)
        self.database = Database(settings.database_path)

        signer_kwargs = {"clock": clock} if clock is not None else {}
        self.signer = TokenSigner(settings.salt, ttl=settings.token_ttl, **signer_kwargs)
        self.auth = AuthGateway(
            self._session,
            self.signer,
            can_register=settings.can_register,
        )
        self.shares = ShareRegistry(
            self._session,
            self.sandbox,
            self.catalog,
            token_factory=token_factory,
        )

    def _session(self) -> AsyncSession:
        return self.database.session_factory()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        await self.database.open()
        logger.info("Serving %s (database %s)", self.sandbox.root, self.database.path)

    async def close(self) -> None:
        await self.database.close()

    async def __aenter__(self) -> Cubby:
        await self.open()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def authorize(self, username: str, password: str) -> AuthToken:
        return await self.auth.authorize(username, password)

    async def register(self, username: str, password: str) -> None:
        await self.auth.register(username, password)

    async def reset_password(self, claim: Claim, old_password: str, new_password: str) -> None:
        await self.auth.reset_password(claim, old_password, new_password)

    def authenticate(
        self,
        authorization: str | None,
        cookies: Mapping[str, str] | None = None,
    ) -> Claim:
        return self.auth.authenticate(authorization, cookies)

    # ------------------------------------------------------------------
    # Files and folders
    # ------------------------------------------------------------------

    async def list_folder(self, path: str = "") -> list[FileEntry]:
        return await operations.list_folder(path, sandbox=self.sandbox, catalog=self.catalog)

    async def create_folder(self, path: str) -> None:
        await operations.create_folder(path, sandbox=self.sandbox)

    async def read_file(self, path: str) -> bytes:
        return await operations.read_file(path, sandbox=self.sandbox)

    async def upload_file(self, folder: str, name: str, data: bytes) -> Path:
        return await operations.upload_file(folder, name, data, sandbox=self.sandbox)

    async def rename_file(self, src: str, dest: str) -> None:
        await operations.rename_file(src, dest, sandbox=self.sandbox)

    async def delete_file(self, path: str) -> None:
        await operations.delete_file(path, sandbox=self.sandbox)

    async def search(self, name: str) -> list[FileEntry]:
        return await self.catalog.search(name)

    # ------------------------------------------------------------------
    # Shares
    # ------------------------------------------------------------------

    async def add_share(self, path: str, password: str | None = None) -> str:
        return await self.shares.add_share(path, password)

    async def delete_share(self, path: str) -> int:
        return await self.shares.delete_share(path)

    async def list_shares(self) -> list[ShareInfo]:
        return await self.shares.list_shares()

    async def resolve_share(
        self,
        token: str,
        sub_path: str = "",
        password: str | None = None,
        *,
        download: bool = False,
    ) -> FileEntry | bytes | list[FileEntry]:
        return await self.shares.resolve_share(token, sub_path, password, download=download)
