"""Incremental sync of a feed snapshot into the remote catalog and the store."""

from __future__ import annotations

from .orchestrator import SyncOrchestrator
from .result import SyncFailure, SyncRunResult
from .retry import RetryingCatalog

__all__ = ["RetryingCatalog", "SyncFailure", "SyncOrchestrator", "SyncRunResult"]
