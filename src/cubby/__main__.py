"""Run the Cubby server: ``python -m cubby`` or the ``cubby`` script."""

from __future__ import annotations

import logging
import os

import uvicorn

from cubby.config import Settings
from cubby.web import create_app


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("FS_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
