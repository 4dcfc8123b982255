"""
Blueprint Models

Defines recovery playbook blueprints: the static, ordered list of
remediation steps with their dependencies, risk weights and
automation levels.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, Field, field_validator, model_validator

from playbook_planner.models.base import FrozenModel, as_utc
from playbook_planner.models.ids import BlueprintIdField, StepId, StepIdField


class StepKind(str, Enum):
    """Kinds of remediation step."""
    ASSESS = "assess"
    NOTIFY = "notify"
    ISOLATE = "isolate"
    RESTORE = "restore"
    VERIFY = "verify"
    POSTMORTEM = "postmortem"


class StepScope(str, Enum):
    """Blast radius a step operates on."""
    SERVICE = "service"
    REGION = "region"
    WORKLOAD = "workload"
    GLOBAL = "global"


class Severity(str, Enum):
    """Incident severity a blueprint is written for."""
    MINOR = "minor"
    MAJOR = "major"
    CATASTROPHIC = "catastrophic"


class RiskTier(str, Enum):
    """Blueprint-level risk policy tier, in escalating order."""
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TimelineWindow(FrozenModel):
    """Time window a blueprint or run is expected to occupy."""
    start_at: datetime
    end_at: datetime
    timezone: str = "UTC"

    @model_validator(mode="after")
    def check_order(self) -> "TimelineWindow":
        if as_utc(self.end_at) < as_utc(self.start_at):
            raise ValueError("timeline end_at precedes start_at")
        return self


class StepAction(FrozenModel):
    """An action the external actuator performs for a step."""
    action_type: str = Field(alias="type", min_length=1)
    target: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)


class StepTemplate(FrozenModel):
    """A single remediation step within a blueprint."""
    id: StepIdField
    title: str = Field(min_length=1)
    kind: StepKind
    scope: StepScope
    owner_team: str = Field(min_length=1)
    dependencies: tuple[StepIdField, ...] = ()
    expected_latency_minutes: float = Field(gt=0, allow_inf_nan=False)
    risk_delta: float = Field(default=0.0, allow_inf_nan=False)
    automation_level: int = Field(ge=0, le=10)
    metadata: dict[str, Any] = Field(default_factory=dict)
    actions: tuple[StepAction, ...] = ()

    @field_validator("dependencies")
    @classmethod
    def dedupe_dependencies(cls, v: tuple[StepId, ...]) -> tuple[StepId, ...]:
        """Dependencies form a set; keep first occurrence order."""
        return tuple(dict.fromkeys(v))


class Blueprint(FrozenModel):
    """
    Recovery playbook blueprint.

    Steps are kept in authored order. Step ids are unique; dependency
    resolution and acyclicity are checked by the validator.
    """
    id: BlueprintIdField
    title: str = Field(min_length=1)
    service: str = Field(min_length=1)
    severity: Severity
    risk_tier: RiskTier = Field(
        validation_alias=AliasChoices("tier", "riskTier", "risk_tier"),
        serialization_alias="tier",
    )
    timeline: TimelineWindow
    owner: str = Field(min_length=1)
    labels: tuple[str, ...] = ()
    steps: tuple[StepTemplate, ...] = ()
    created_at: datetime
    updated_at: datetime
    version: int = Field(ge=1)

    @field_validator("labels")
    @classmethod
    def dedupe_labels(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(dict.fromkeys(v))

    @model_validator(mode="after")
    def check_unique_steps(self) -> "Blueprint":
        seen: set[str] = set()
        duplicates = []
        for step in self.steps:
            if step.id in seen:
                duplicates.append(step.id)
            seen.add(step.id)
        if duplicates:
            raise ValueError(f"duplicate step ids: {', '.join(duplicates)}")
        return self

    @property
    def step_ids(self) -> list[StepId]:
        return [step.id for step in self.steps]

    @property
    def estimated_minutes(self) -> float:
        """Sum of every step's expected latency."""
        return sum(step.expected_latency_minutes for step in self.steps)

    def get_step(self, step_id: str) -> Optional[StepTemplate]:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None
