"""Interfaces the sync engine consumes from its collaborators."""

from __future__ import annotations

from .catalog import RemoteCatalog
from .feed import FeedSource
from .persistence import CatalogRecordRepository, Repository
from .unit_of_work import (
    CatalogRepositories,
    CatalogUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
    UnitOfWorkFactory,
)

__all__ = [
    "CatalogRecordRepository",
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "FeedSource",
    "RemoteCatalog",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
