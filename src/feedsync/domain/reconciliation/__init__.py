"""Drift detection and repair across feed, store and remote catalog."""

from __future__ import annotations

from .auditor import ReconciliationAuditor
from .report import Discrepancy, DiscrepancyKind, DiscrepancyReport, ReconciliationResult

__all__ = [
    "Discrepancy",
    "DiscrepancyKind",
    "DiscrepancyReport",
    "ReconciliationAuditor",
    "ReconciliationResult",
]
