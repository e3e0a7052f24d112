from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: int = logging.DEBUG) -> None:
    """(Re)initialize the root logger, replacing any handlers already installed."""
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
