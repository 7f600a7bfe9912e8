"""Entry point: ``python -m archivist`` or the ``archivist`` console script."""

import logging
import os

from .config import ArchivistConfig
from .runner import ArchivistRunner


def main():
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ArchivistRunner(ArchivistConfig.from_env()).start()


if __name__ == "__main__":
    main()
