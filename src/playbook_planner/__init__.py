"""
Playbook Planner: incident-recovery playbook execution planning

Validates recovery playbook blueprints, gates them against risk-tier
policy, computes a deterministic execution order with a normalized
severity profile, and projects live run progress into readiness signals.
"""

__version__ = "0.1.0"

from playbook_planner.config.settings import Settings
from playbook_planner.errors import (
    ConstraintGateError,
    CycleError,
    DependencyResolutionError,
    PlanningError,
    PlaybookPlannerError,
    SchemaError,
    UnresolvedDependencyError,
    UnschedulableError,
)
from playbook_planner.orchestrator import (
    build_execution_plan,
    can_blueprint_run,
    can_step_run,
    ensure_acyclic,
    load_blueprint,
    parse_blueprint,
    parse_run,
)
from playbook_planner.telemetry import (
    aggregate_windows,
    build_projection,
    build_snapshot,
    project_signal,
    summarize_plan,
)

__all__ = [
    "Settings",
    "__version__",
    # Errors
    "PlaybookPlannerError",
    "SchemaError",
    "DependencyResolutionError",
    "UnresolvedDependencyError",
    "CycleError",
    "PlanningError",
    "ConstraintGateError",
    "UnschedulableError",
    # Design time
    "parse_blueprint",
    "parse_run",
    "load_blueprint",
    "ensure_acyclic",
    "can_step_run",
    "can_blueprint_run",
    "build_execution_plan",
    # Run time
    "summarize_plan",
    "build_projection",
    "project_signal",
    "build_snapshot",
    "aggregate_windows",
]
