"""Share model — public links to sandboxed files and folders.

``url`` holds the share token.  Its uniqueness is enforced by the table,
not only by the allocation loop.
"""

from __future__ import annotations

from sqlmodel import Field, SQLModel


class Share(SQLModel, table=True):
    """Share table — ``share``."""

    __tablename__ = "share"

    id: int | None = Field(default=None, primary_key=True)
    path: str = Field(index=True)
    url: str = Field(unique=True, nullable=False)
    password: str | None = Field(default=None, nullable=True)
