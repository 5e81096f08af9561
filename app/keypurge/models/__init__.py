"""Data models for keypurge.

This module exports the core data structures used throughout the application.
"""

from keypurge.models.condition import AccessMode, MatchCondition
from keypurge.models.results import (
    DeleteResult,
    MatchedKey,
    ReconciliationState,
    RunSummary,
)

__all__ = [
    "AccessMode",
    "DeleteResult",
    "MatchCondition",
    "MatchedKey",
    "ReconciliationState",
    "RunSummary",
]
