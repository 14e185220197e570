"""Shared fixtures for Cubby tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlmodel import Session, SQLModel, create_engine

from cubby._cubby import Cubby
from cubby.config import Settings
from cubby.database import Database
from cubby.fs.catalog import FileCatalog
from cubby.fs.sandbox import PathSandbox

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator
    from pathlib import Path

    from sqlalchemy import Engine


@pytest.fixture
def engine() -> Engine:
    """In-memory SQLite engine with all tables created."""
    eng = create_engine("sqlite://", echo=False)
    SQLModel.metadata.create_all(eng)
    return eng


@pytest.fixture
def session(engine: Engine) -> Iterator[Session]:
    """SQLModel session bound to the in-memory engine."""
    with Session(engine) as s:
        yield s


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """Canonical sandbox root with a sibling ``outside`` folder."""
    base = tmp_path.resolve()
    (base / "files").mkdir()
    (base / "outside").mkdir()
    (base / "outside" / "secret.txt").write_text("secret")
    return base / "files"


@pytest.fixture
def sandbox(root: Path) -> PathSandbox:
    return PathSandbox(root)


@pytest.fixture
def catalog(sandbox: PathSandbox) -> FileCatalog:
    return FileCatalog(sandbox)


@pytest.fixture
def settings(root: Path) -> Settings:
    return Settings(
        folder_path=root,
        database_path=str(root.parent / "database.db"),
        salt="test-signing-salt",
    )


@pytest.fixture
async def database(settings: Settings) -> AsyncIterator[Database]:
    """File-backed async database so concurrent sessions get real connections."""
    db = Database(settings.database_path)
    await db.open()
    yield db
    await db.close()


@pytest.fixture
async def cubby(settings: Settings) -> AsyncIterator[Cubby]:
    async with Cubby(settings) as service:
        yield service
