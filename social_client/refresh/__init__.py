"""Auto-refresh scheduling shared by the client views."""

from .config import RefreshConfig, ViewOverrides, merge_refresh_config
from .environment import EnvironmentChange, EnvironmentMonitor, environment_monitor
from .retry import AttemptDecision, effective_budget, evaluate_attempt, is_budget_exhausted, should_attempt
from .scheduler import RefreshScheduler, RefreshSession, RefreshState, RefreshStatus

__all__ = [
    "RefreshConfig",
    "ViewOverrides",
    "merge_refresh_config",
    "EnvironmentChange",
    "EnvironmentMonitor",
    "environment_monitor",
    "AttemptDecision",
    "effective_budget",
    "evaluate_attempt",
    "is_budget_exhausted",
    "should_attempt",
    "RefreshScheduler",
    "RefreshSession",
    "RefreshState",
    "RefreshStatus",
]
