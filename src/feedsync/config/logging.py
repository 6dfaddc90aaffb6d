"""Shared logging helpers for feedsync."""

from __future__ import annotations

import logging

NOISY_LOGGERS = ("httpx", "httpcore", "alembic.runtime.migration")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with a terse CLI format.

    Pass ``force=True`` to reconfigure during tests or specialised entry points.
    Transport-level loggers are capped at WARNING so that per-request lines do not
    drown the per-record sync output.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
