"""
Risk Policy Tables

Fixed per-kind and per-tier tables consulted by the constraint gate and
the execution planner. Every table is keyed by its enum and checked for
completeness at import, so adding a StepKind or RiskTier fails loudly
until each table covers it.
"""

from enum import Enum
from typing import TypeVar

from playbook_planner.models.blueprint import RiskTier, StepKind

E = TypeVar("E", bound=Enum)
V = TypeVar("V")


def _complete(name: str, enum: type[E], table: dict[E, V]) -> dict[E, V]:
    missing = [member.value for member in enum if member not in table]
    if missing:
        raise RuntimeError(f"{name} has no entry for: {', '.join(missing)}")
    return table


# Projected duration multiplier per step kind.
RISK_MULTIPLIER: dict[StepKind, float] = _complete("RISK_MULTIPLIER", StepKind, {
    StepKind.ASSESS: 1.0,
    StepKind.NOTIFY: 0.8,
    StepKind.ISOLATE: 1.6,
    StepKind.RESTORE: 1.8,
    StepKind.VERIFY: 1.1,
    StepKind.POSTMORTEM: 0.6,
})

# Automation budget units per step kind; multiplied by tier concurrency.
BUDGET_UNITS: dict[StepKind, int] = _complete("BUDGET_UNITS", StepKind, {
    StepKind.ASSESS: 2,
    StepKind.NOTIFY: 3,
    StepKind.ISOLATE: 1,
    StepKind.RESTORE: 2,
    StepKind.VERIFY: 2,
    StepKind.POSTMORTEM: 3,
})

# Scheduling weight per step kind; isolate and restore dominate.
KIND_WEIGHT: dict[StepKind, float] = _complete("KIND_WEIGHT", StepKind, {
    StepKind.ASSESS: 1.0,
    StepKind.NOTIFY: 0.6,
    StepKind.ISOLATE: 3.0,
    StepKind.RESTORE: 2.6,
    StepKind.VERIFY: 1.2,
    StepKind.POSTMORTEM: 0.4,
})

# Per-step time tolerance in minutes; tightens as the tier escalates.
TIER_TIME_BUDGET: dict[RiskTier, float] = _complete("TIER_TIME_BUDGET", RiskTier, {
    RiskTier.NONE: 240.0,
    RiskTier.LOW: 180.0,
    RiskTier.MEDIUM: 120.0,
    RiskTier.HIGH: 90.0,
    RiskTier.CRITICAL: 60.0,
})

MAX_CONCURRENCY: dict[RiskTier, int] = _complete("MAX_CONCURRENCY", RiskTier, {
    RiskTier.NONE: 6,
    RiskTier.LOW: 5,
    RiskTier.MEDIUM: 4,
    RiskTier.HIGH: 2,
    RiskTier.CRITICAL: 1,
})

# Risk tier on a 1-3 scale, used for the blueprint risk-cap note.
SEVERITY_WEIGHT: dict[RiskTier, float] = _complete("SEVERITY_WEIGHT", RiskTier, {
    RiskTier.NONE: 1.0,
    RiskTier.LOW: 1.5,
    RiskTier.MEDIUM: 2.0,
    RiskTier.HIGH: 2.5,
    RiskTier.CRITICAL: 3.0,
})

# Minutes per unit of severity weight above which a risk-cap note is raised.
RISK_CAP_MINUTES = 60.0


def step_capacity(kind: StepKind, tier: RiskTier) -> int:
    """Highest automation level a step of ``kind`` may carry under ``tier``."""
    return MAX_CONCURRENCY[tier] * BUDGET_UNITS[kind]
