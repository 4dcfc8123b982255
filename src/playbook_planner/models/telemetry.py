"""
Telemetry Models

Derived views of a run's progress. None of these have a lifecycle of
their own; they are recomputed on demand.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from pydantic import Field, model_validator

from playbook_planner.models.base import FrozenModel, as_utc
from playbook_planner.models.ids import BlueprintId, RunId, StepId
from playbook_planner.models.run import Run


class ProgressWindow(FrozenModel):
    """Step activity observed for a run within one time window."""
    start_at: datetime
    end_at: datetime
    completed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)
    avg_latency_minutes: float = Field(default=0.0, ge=0, allow_inf_nan=False)

    @model_validator(mode="after")
    def check_order(self) -> "ProgressWindow":
        if as_utc(self.end_at) < as_utc(self.start_at):
            raise ValueError("window end_at precedes start_at")
        return self

    @property
    def observed(self) -> int:
        return self.completed + self.failed + self.skipped


@dataclass(frozen=True)
class PlanSummary:
    """Headline ratios for a plan's run."""
    completion_ratio: float = 0.0
    elapsed_minutes: float = 0.0
    failure_ratio: float = 0.0
    confidence: float = 1.0

    def to_dict(self) -> dict[str, float]:
        return {
            "completionRatio": self.completion_ratio,
            "elapsedMinutes": self.elapsed_minutes,
            "failureRatio": self.failure_ratio,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class Projection:
    """Where a run stands against its planned order."""
    run_id: Optional[RunId]
    blueprint_id: Optional[BlueprintId]
    active_step: Optional[StepId]
    completed_steps: tuple[StepId, ...] = ()
    failed_steps: tuple[StepId, ...] = ()
    confidence: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "runId": self.run_id,
            "blueprintId": self.blueprint_id,
            "activeStep": self.active_step,
            "completedSteps": list(self.completed_steps),
            "failedSteps": list(self.failed_steps),
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class ReadinessSignal:
    """Compact health summary of a run."""
    step_id: Optional[StepId]
    score: float
    confidence: float
    evidence: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "stepId": self.step_id,
            "score": self.score,
            "confidence": self.confidence,
            "evidence": list(self.evidence),
        }


@dataclass(frozen=True)
class WindowAggregate:
    """Roll-up of a set of progress windows."""
    window_count: int = 0
    completed: int = 0
    failed: int = 0
    skipped: int = 0
    completion_rate: float = 0.0
    fail_rate: float = 0.0
    avg_latency_minutes: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "windowCount": self.window_count,
            "completed": self.completed,
            "failed": self.failed,
            "skipped": self.skipped,
            "completionRate": self.completion_rate,
            "failRate": self.fail_rate,
            "avgLatencyMinutes": self.avg_latency_minutes,
        }


@dataclass(frozen=True)
class TelemetrySnapshot:
    """Run, progress windows, projection and current signal in one bundle."""
    run: Optional[Run]
    windows: tuple[ProgressWindow, ...]
    projection: Projection
    signal: Optional[ReadinessSignal] = None
    aggregate: WindowAggregate = field(default_factory=WindowAggregate)

    def to_dict(self) -> dict[str, Any]:
        return {
            "run": self.run.to_dict() if self.run else None,
            "windows": [w.to_dict() for w in self.windows],
            "projection": self.projection.to_dict(),
            "signal": self.signal.to_dict() if self.signal else None,
            "aggregate": self.aggregate.to_dict(),
        }
