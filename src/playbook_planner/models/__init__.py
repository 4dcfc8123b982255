"""
Playbook Planner Data Models

Blueprints and runs are parsed, immutable pydantic records; gate,
plan and telemetry outputs are frozen dataclasses.
"""

from playbook_planner.models.blueprint import (
    Blueprint,
    RiskTier,
    Severity,
    StepAction,
    StepKind,
    StepScope,
    StepTemplate,
    TimelineWindow,
)
from playbook_planner.models.ids import BlueprintId, RunId, StepId
from playbook_planner.models.plan import (
    DEFAULT_SEVERITY_VECTOR,
    ConstraintContext,
    ConstraintResult,
    ConstraintViolation,
    ExecutionPlan,
    MergeConfig,
    ParallelismPreference,
    PlanOptions,
    RollbackPolicy,
    SeverityVector,
    ViolationSeverity,
)
from playbook_planner.models.run import Run, RunStatus, StepOutcome, StepStatus
from playbook_planner.models.telemetry import (
    PlanSummary,
    ProgressWindow,
    Projection,
    ReadinessSignal,
    TelemetrySnapshot,
    WindowAggregate,
)

__all__ = [
    # Ids
    "BlueprintId",
    "StepId",
    "RunId",
    # Blueprint
    "Blueprint",
    "StepTemplate",
    "StepAction",
    "StepKind",
    "StepScope",
    "Severity",
    "RiskTier",
    "TimelineWindow",
    # Run
    "Run",
    "RunStatus",
    "StepOutcome",
    "StepStatus",
    # Plan
    "ConstraintContext",
    "ConstraintResult",
    "ConstraintViolation",
    "ViolationSeverity",
    "ExecutionPlan",
    "MergeConfig",
    "ParallelismPreference",
    "PlanOptions",
    "RollbackPolicy",
    "SeverityVector",
    "DEFAULT_SEVERITY_VECTOR",
    # Telemetry
    "PlanSummary",
    "ProgressWindow",
    "Projection",
    "ReadinessSignal",
    "TelemetrySnapshot",
    "WindowAggregate",
]
