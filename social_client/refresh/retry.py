"""Consecutive-failure budget and the automatic attempt gate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import RefreshConfig
    from .scheduler import RefreshSession


@dataclass(frozen=True, slots=True)
class AttemptDecision:
    should_run: bool
    reason: str


def effective_budget(max_retries: int) -> int:
    # max_retries=0 suspends after the first failure rather than never attempting.
    return max(max_retries, 1)


def is_budget_exhausted(consecutive_failures: int, max_retries: int) -> bool:
    return consecutive_failures >= effective_budget(max_retries)


def environment_allows(session: RefreshSession, config: RefreshConfig) -> bool:
    if config.pause_on_hidden and not session.visible:
        return False
    if config.pause_on_offline and not session.online:
        return False
    return True


def evaluate_attempt(session: RefreshSession, config: RefreshConfig) -> AttemptDecision:
    if not config.enabled:
        return AttemptDecision(False, "disabled")
    if config.pause_on_hidden and not session.visible:
        return AttemptDecision(False, "paused while hidden")
    if config.pause_on_offline and not session.online:
        return AttemptDecision(False, "paused while offline")
    if is_budget_exhausted(session.consecutive_failures, config.max_retries):
        return AttemptDecision(
            False,
            f"retry budget exhausted ({session.consecutive_failures}/{effective_budget(config.max_retries)})",
        )
    return AttemptDecision(True, "due")


def should_attempt(session: RefreshSession, config: RefreshConfig) -> bool:
    return evaluate_attempt(session, config).should_run


__all__ = [
    "AttemptDecision",
    "effective_budget",
    "is_budget_exhausted",
    "environment_allows",
    "evaluate_attempt",
    "should_attempt",
]
