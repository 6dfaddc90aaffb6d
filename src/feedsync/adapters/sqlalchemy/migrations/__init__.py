"""Alembic scripts for the record store, shipped inside the package."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from feedsync.config import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

SCRIPT_DIR: Final[Path] = Path(__file__).resolve().parent


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Bring the schema to the newest revision.

    With ``engine`` the migration shares one transaction-scoped connection, which is
    what keeps an in-memory sqlite database alive across the upgrade.
    """

    alembic_config = Config()
    alembic_config.set_main_option("script_location", str(SCRIPT_DIR))
    alembic_config.set_main_option("version_locations", str(SCRIPT_DIR / "versions"))
    if engine is None:
        alembic_config.set_main_option(
            "sqlalchemy.url", database_uri or get_database_config().uri
        )
        command.upgrade(alembic_config, "head")
        return
    with engine.begin() as connection:
        alembic_config.attributes["connection"] = connection
        command.upgrade(alembic_config, "head")
