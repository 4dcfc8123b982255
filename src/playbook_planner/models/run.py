"""
Run Models

A run is a live execution attempt against a blueprint. Outcomes are
reported by the external actuator; the planner only reads them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, Field

from playbook_planner.models.base import FrozenModel
from playbook_planner.models.blueprint import TimelineWindow
from playbook_planner.models.ids import BlueprintIdField, RunIdField, StepIdField


class RunStatus(str, Enum):
    """Run lifecycle: draft -> active <-> paused -> completed|aborted."""
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.COMPLETED, RunStatus.ABORTED)


class StepStatus(str, Enum):
    """Step lifecycle: pending -> running -> passed|failed|skipped."""
    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class StepOutcome(FrozenModel):
    """Reported outcome of one step within a run."""
    status: StepStatus = StepStatus.PENDING
    attempt: int = Field(default=0, ge=0)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    details: dict[str, Any] = Field(default_factory=dict)
    next_step_ids: tuple[StepIdField, ...] = ()


class Run(FrozenModel):
    """A live execution of a blueprint, tracked by per-step outcomes."""
    id: RunIdField
    blueprint_id: BlueprintIdField = Field(
        validation_alias=AliasChoices("playbookId", "blueprintId", "blueprint_id"),
        serialization_alias="playbookId",
    )
    triggered_by: str = Field(min_length=1)
    started_at: datetime
    window: TimelineWindow
    status: RunStatus = RunStatus.DRAFT
    outcome_by_step: dict[StepIdField, StepOutcome] = Field(default_factory=dict)
    notes: tuple[str, ...] = ()

    def outcome(self, step_id: str) -> Optional[StepOutcome]:
        return self.outcome_by_step.get(step_id)

    def steps_with_status(self, *statuses: StepStatus) -> list[str]:
        """Step ids whose outcome is in ``statuses``, in outcome-map order."""
        return [
            step_id
            for step_id, outcome in self.outcome_by_step.items()
            if outcome.status in statuses
        ]
