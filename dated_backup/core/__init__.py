"""Core backup functionality."""

from .backup import DatedBackup
from .candidates import CandidateResolver
from .classifier import classify, peek, resolve_final_target
from .executor import ActionExecutor
from .models import Operation, PathKind, SyncAction, DestinationCandidate
from .planner import decide_operation, plan_partial_sync

__all__ = [
    "DatedBackup", "CandidateResolver", "ActionExecutor",
    "classify", "peek", "resolve_final_target",
    "decide_operation", "plan_partial_sync",
    "Operation", "PathKind", "SyncAction", "DestinationCandidate",
]
