from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    """
    Configure le logging stdlib pour le service.

    Idempotent : un second appel ne fait que changer le niveau.
    """
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    root.setLevel(level)
    # le SQL est piloté par SQL_ECHO, pas par le niveau global
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
