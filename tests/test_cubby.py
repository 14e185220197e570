"""End-to-end tests through the Cubby facade."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from cubby._cubby import Cubby
from cubby.exceptions import AuthError, AuthErrorKind, PathError

if TYPE_CHECKING:
    from pathlib import Path

    from cubby.config import Settings


class TestAccountFlow:
    async def test_register_login_authenticate(self, cubby: Cubby):
        await cubby.register("alice", "secret123")
        auth = await cubby.authorize("alice", "secret123")
        claim = cubby.authenticate(f"Bearer {auth.token}")
        assert claim.username == "alice"

        with pytest.raises(AuthError) as exc_info:
            await cubby.authorize("alice", "wrong")
        assert exc_info.value.kind is AuthErrorKind.WRONG_CREDENTIALS


class TestFileFlow:
    async def test_upload_search_share_download(self, cubby: Cubby, root: Path):
        await cubby.create_folder("/docs")
        await cubby.upload_file("/docs", "report.pdf", b"%PDF-1.4")

        found = await cubby.search("report")
        assert [e.absolute_path for e in found] == ["docs/report.pdf"]

        token = await cubby.add_share("/docs")
        data = await cubby.resolve_share(token, "report.pdf", None, download=True)
        assert data == (root / "docs" / "report.pdf").read_bytes()

    async def test_rename_then_list(self, cubby: Cubby):
        await cubby.upload_file("", "a.txt", b"a")
        await cubby.rename_file("a.txt", "b.txt")
        assert [e.name for e in await cubby.list_folder()] == ["b.txt"]
        assert await cubby.read_file("/b.txt") == b"a"

    async def test_delete_share_then_resolve(self, cubby: Cubby):
        await cubby.create_folder("docs")
        token = await cubby.add_share("docs")
        assert await cubby.delete_share("docs") == 1
        assert await cubby.list_shares() == []
        with pytest.raises(PathError):
            await cubby.resolve_share(token)


class TestLifecycle:
    async def test_state_survives_reopen(self, settings: Settings):
        async with Cubby(settings) as service:
            await service.register("alice", "secret123")
        async with Cubby(settings) as service:
            auth = await service.authorize("alice", "secret123")
        assert auth.claim.username == "alice"
