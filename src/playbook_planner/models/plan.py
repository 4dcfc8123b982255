"""
Plan Models

Constraint gate findings and execution plan outputs. Every value here is
freshly computed by the gate or planner and never mutated afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import Field

from playbook_planner.models.base import FrozenModel
from playbook_planner.models.blueprint import RiskTier
from playbook_planner.models.ids import BlueprintId, StepId
from playbook_planner.models.run import Run


class ViolationSeverity(str, Enum):
    """Constraint violation severity. Only ERROR blocks planning."""
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class ParallelismPreference(str, Enum):
    """How aggressively a host may run ready steps side by side."""
    SERIAL = "serial"
    BALANCED = "balanced"
    AGGRESSIVE = "aggressive"


class RollbackPolicy(str, Enum):
    """What a host rolls back when a step fails."""
    NONE = "none"
    STEP = "step"
    FULL = "full"


class ConstraintContext(FrozenModel):
    """Operational context a blueprint is gated against."""
    service: str = Field(min_length=1)
    time_budget_minutes: float = Field(ge=0, allow_inf_nan=False)
    active_workload: int = Field(ge=0)
    risk_tier: RiskTier


class MergeConfig(FrozenModel):
    """Scheduling configuration carried through to the execution plan."""
    parallelism: ParallelismPreference = ParallelismPreference.BALANCED
    max_parallel_steps: int = Field(default=1, ge=1)
    auto_escalate: bool = False
    rollback_policy: RollbackPolicy = RollbackPolicy.STEP


@dataclass(frozen=True)
class ConstraintViolation:
    """A single finding from the constraint gate."""
    key: str
    message: str
    severity: ViolationSeverity

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "message": self.message,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class ConstraintResult:
    """Outcome of gating a step or blueprint."""
    ok: bool
    violations: tuple[ConstraintViolation, ...] = ()

    @classmethod
    def from_violations(cls, violations: list[ConstraintViolation]) -> "ConstraintResult":
        ok = not any(v.severity == ViolationSeverity.ERROR for v in violations)
        return cls(ok=ok, violations=tuple(violations))

    def _with_severity(self, severity: ViolationSeverity) -> list[ConstraintViolation]:
        return [v for v in self.violations if v.severity == severity]

    @property
    def errors(self) -> list[ConstraintViolation]:
        return self._with_severity(ViolationSeverity.ERROR)

    @property
    def warnings(self) -> list[ConstraintViolation]:
        return self._with_severity(ViolationSeverity.WARN)

    @property
    def infos(self) -> list[ConstraintViolation]:
        return self._with_severity(ViolationSeverity.INFO)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "violations": [v.to_dict() for v in self.violations],
        }


@dataclass(frozen=True)
class SeverityVector:
    """Normalized minor/major/catastrophic weighting of a blueprint."""
    minor: float
    major: float
    catastrophic: float

    @property
    def total(self) -> float:
        return self.minor + self.major + self.catastrophic

    def to_dict(self) -> dict[str, float]:
        return {
            "minor": self.minor,
            "major": self.major,
            "catastrophic": self.catastrophic,
        }


# Fixed fallback used when every accumulated weight is zero. A chosen
# constant, not a computed equilibrium.
DEFAULT_SEVERITY_VECTOR = SeverityVector(minor=0.34, major=0.33, catastrophic=0.33)


@dataclass(frozen=True)
class PlanOptions:
    """Inputs to the execution planner beyond the blueprint itself."""
    active_run: Optional[Run] = None
    merge_config: MergeConfig = field(default_factory=MergeConfig)


@dataclass(frozen=True)
class ExecutionPlan:
    """
    Planner output.

    ``order`` is a total, dependency-respecting ordering of every step id
    in the blueprint; ``gate`` holds the advisory findings that did not
    block planning.
    """
    blueprint_id: BlueprintId
    version: int
    run: Optional[Run]
    order: tuple[StepId, ...]
    risk_profile: SeverityVector
    merged: MergeConfig
    gate: ConstraintResult = field(default_factory=lambda: ConstraintResult(ok=True))

    def to_dict(self) -> dict[str, Any]:
        return {
            "blueprintId": self.blueprint_id,
            "version": self.version,
            "runbook": self.run.to_dict() if self.run else None,
            "order": list(self.order),
            "riskProfile": self.risk_profile.to_dict(),
            "merged": self.merged.to_dict(),
            "gate": self.gate.to_dict(),
        }
