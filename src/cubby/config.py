"""Settings — immutable process configuration read once at startup."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_FOLDER = "./files"
DEFAULT_DATABASE = "./database.db"
DEFAULT_LISTEN = "127.0.0.1:5000"
PLACEHOLDER_SALT = "AAAABBBBCCCCDDDD"

# Token and cookie lifetime
TOKEN_TTL_SECONDS = 60 * 60 * 24

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Configuration shared by every component.

    ``folder_path`` is the sandbox root: absolute and canonical.  Build
    with :meth:`from_env` in production or directly in tests.
    """

    folder_path: Path
    database_path: str = DEFAULT_DATABASE
    listen_addr: str = DEFAULT_LISTEN
    can_register: bool = True
    salt: str = PLACEHOLDER_SALT
    token_ttl: int = TOKEN_TTL_SECONDS

    def __post_init__(self) -> None:
        if not self.folder_path.is_absolute():
            raise ValueError(f"Sandbox root must be absolute: {self.folder_path}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Read ``FS_*`` variables, creating and canonicalizing the root folder.

        Raises ``OSError`` when the folder cannot be created; callers treat
        that as fatal.
        """
        env = os.environ if environ is None else environ

        folder = Path(env.get("FS_FOLDER", DEFAULT_FOLDER)).expanduser()
        if not folder.exists():
            folder.mkdir()
        folder = folder.resolve(strict=True)

        salt = env.get("FS_SALT", PLACEHOLDER_SALT)
        if salt == PLACEHOLDER_SALT:
            logger.warning(
                "FS_SALT is not set; session tokens are signed with the "
                "placeholder salt and can be forged. Set FS_SALT in production."
            )

        settings = cls(
            folder_path=folder,
            database_path=env.get("FS_DATABASE", DEFAULT_DATABASE),
            listen_addr=env.get("FS_LISTEN", DEFAULT_LISTEN),
            can_register=_parse_bool(env.get("FS_REGISTER"), default=True),
            salt=salt,
        )
        # Validate the listen address eagerly so a typo fails at startup
        _ = (settings.host, settings.port)
        return settings

    @property
    def host(self) -> str:
        host, _, _ = self.listen_addr.rpartition(":")
        if not host:
            raise ValueError(f"Invalid listen address: {self.listen_addr!r}")
        return host.strip("[]")

    @property
    def port(self) -> int:
        _, sep, port = self.listen_addr.rpartition(":")
        if not sep or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError(f"Invalid listen address: {self.listen_addr!r}")
        return int(port)


def _parse_bool(value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES
