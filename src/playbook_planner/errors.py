"""
Planner Errors

Exception hierarchy for blueprint validation and plan construction.
Constraint violations are returned as values; only structural and
planning failures are raised.
"""

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from playbook_planner.models.plan import ConstraintResult


class PlaybookPlannerError(Exception):
    """Base error for the playbook planner."""


class SchemaError(PlaybookPlannerError):
    """Malformed blueprint or run input."""

    def __init__(self, subject: str, issues: list[dict[str, Any]]):
        self.subject = subject
        self.issues = issues
        summary = "; ".join(
            f"{issue.get('location') or '<root>'}: {issue.get('message')}"
            for issue in issues
        )
        super().__init__(f"Invalid {subject}: {summary}")


class DependencyResolutionError(PlaybookPlannerError):
    """A step dependency cannot be resolved into a DAG."""


class UnresolvedDependencyError(DependencyResolutionError):
    """One or more steps reference dependencies that do not exist."""

    def __init__(self, unresolved: list[tuple[str, str]]):
        self.unresolved = unresolved
        pairs = ", ".join(f"{step} -> {dep}" for step, dep in unresolved)
        super().__init__(f"Unresolved step dependencies: {pairs}")


class CycleError(DependencyResolutionError):
    """The step dependency graph contains a cycle."""

    def __init__(self, step_id: str):
        self.step_id = step_id
        super().__init__(f"Dependency cycle detected at step '{step_id}'")


class PlanningError(PlaybookPlannerError):
    """Plan construction failed. No partial plan is produced."""


class ConstraintGateError(PlanningError):
    """The blueprint was rejected by the constraint gate."""

    def __init__(self, blueprint_id: str, result: "ConstraintResult"):
        self.blueprint_id = blueprint_id
        self.result = result
        messages = "; ".join(v.message for v in result.violations)
        super().__init__(
            f"Blueprint '{blueprint_id}' is not runnable: {messages}"
        )


class UnschedulableError(PlanningError):
    """No ready step exists while steps remain to be ordered."""

    def __init__(self, remaining: list[str], blueprint_id: Optional[str] = None):
        self.remaining = remaining
        self.blueprint_id = blueprint_id
        super().__init__(
            "Unschedulable steps (cycle or dangling dependency): "
            + ", ".join(remaining)
        )
