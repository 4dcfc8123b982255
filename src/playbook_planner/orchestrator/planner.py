"""
Execution Planner

Turns a gated blueprint into a deterministic, dependency-respecting step
order and a normalized severity profile. Planning is all-or-nothing:
any failure raises and no partial plan is returned.
"""

import hashlib
import heapq
import json
from collections import defaultdict
from typing import Optional

import structlog

from playbook_planner.config.settings import Settings, settings as default_settings
from playbook_planner.errors import ConstraintGateError, UnschedulableError
from playbook_planner.models.blueprint import Blueprint, StepKind, StepTemplate
from playbook_planner.models.ids import StepId
from playbook_planner.models.plan import (
    DEFAULT_SEVERITY_VECTOR,
    ConstraintContext,
    ExecutionPlan,
    PlanOptions,
    SeverityVector,
)
from playbook_planner.orchestrator.constraints import can_blueprint_run
from playbook_planner.orchestrator.policy import KIND_WEIGHT

logger = structlog.get_logger(__name__)


def step_risk(step: StepTemplate) -> float:
    """Scheduling score of a step; lower scores are scheduled first."""
    return (
        step.expected_latency_minutes * KIND_WEIGHT[step.kind]
        + len(step.actions)
        + len(step.dependencies)
    )


def schedule_steps(blueprint: Blueprint) -> list[StepId]:
    """
    Order every step so each follows all of its dependencies.

    Among ready steps the lowest ``step_risk`` goes first; equal scores
    fall back to the lexicographically smallest step id, so the result
    does not depend on the order steps were authored in.

    Raises:
        UnschedulableError: Steps remain but none is ready (a cycle, or a
            dependency on an id outside the blueprint).
    """
    waiting: dict[StepId, int] = {}
    dependents: dict[str, list[StepId]] = defaultdict(list)
    scores: dict[StepId, float] = {}
    for step in blueprint.steps:
        waiting[step.id] = len(step.dependencies)
        scores[step.id] = step_risk(step)
        for dep in step.dependencies:
            dependents[dep].append(step.id)

    ready = [(scores[step_id], step_id) for step_id, count in waiting.items() if count == 0]
    heapq.heapify(ready)

    order: list[StepId] = []
    while ready:
        _, step_id = heapq.heappop(ready)
        order.append(step_id)
        for child in dependents.get(step_id, ()):
            waiting[child] -= 1
            if waiting[child] == 0:
                heapq.heappush(ready, (scores[child], child))

    if len(order) < len(blueprint.steps):
        placed = set(order)
        remaining = [step_id for step_id in blueprint.step_ids if step_id not in placed]
        logger.warning(
            "Blueprint unschedulable",
            blueprint_id=blueprint.id,
            remaining=remaining,
        )
        raise UnschedulableError(remaining, blueprint_id=blueprint.id)

    return order


def severity_profile(blueprint: Blueprint) -> SeverityVector:
    """
    Normalized minor/major/catastrophic weighting of a blueprint.

    Each step contributes ``step_risk / (index + 1)`` to its kind, so
    earlier steps weigh more. Kinds fold into severities as
    assess+notify -> minor, restore+verify -> major and
    isolate+postmortem -> catastrophic. With no weight at all the fixed
    DEFAULT_SEVERITY_VECTOR is returned.
    """
    weight = {kind: 0.0 for kind in StepKind}
    for index, step in enumerate(blueprint.steps):
        weight[step.kind] += step_risk(step) / (index + 1)

    minor = weight[StepKind.ASSESS] + weight[StepKind.NOTIFY]
    major = weight[StepKind.RESTORE] + weight[StepKind.VERIFY]
    catastrophic = weight[StepKind.ISOLATE] + weight[StepKind.POSTMORTEM]
    total = minor + major + catastrophic
    if total <= 0:
        return DEFAULT_SEVERITY_VECTOR

    return SeverityVector(
        minor=minor / total,
        major=major / total,
        catastrophic=catastrophic / total,
    )


def plan_cache_key(blueprint: Blueprint, context: ConstraintContext) -> str:
    """Stable fingerprint a host can memoize plans under."""
    payload = json.dumps(
        {
            "blueprint": blueprint.id,
            "version": blueprint.version,
            "context": context.to_dict(),
        },
        sort_keys=True,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ExecutionPlanner:
    """
    Builds execution plans for recovery blueprints.

    Holds only settings; every call is independent and safe to run
    concurrently.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    def default_context(self, blueprint: Blueprint) -> ConstraintContext:
        """Constraint context a blueprint is gated with before planning."""
        return ConstraintContext(
            service=blueprint.service,
            time_budget_minutes=self.settings.default_time_budget_minutes,
            active_workload=self.settings.default_active_workload,
            risk_tier=blueprint.risk_tier,
        )

    def build(self, blueprint: Blueprint, options: Optional[PlanOptions] = None) -> ExecutionPlan:
        """
        Build an execution plan.

        Args:
            blueprint: A parsed blueprint.
            options: Active run and merge configuration to carry through.

        Returns:
            ExecutionPlan with the step order and severity profile.

        Raises:
            ConstraintGateError: The constraint gate reported an error.
            UnschedulableError: Scheduling could not place every step.
        """
        options = options or PlanOptions()

        gate = can_blueprint_run(blueprint, self.default_context(blueprint))
        if not gate.ok:
            logger.warning(
                "Blueprint rejected by constraint gate",
                blueprint_id=blueprint.id,
                errors=[v.key for v in gate.errors],
            )
            raise ConstraintGateError(blueprint.id, gate)

        order = schedule_steps(blueprint)
        profile = severity_profile(blueprint)

        logger.info(
            "Execution plan built",
            blueprint_id=blueprint.id,
            version=blueprint.version,
            steps=len(order),
            warnings=len(gate.warnings),
            run_id=options.active_run.id if options.active_run else None,
        )

        return ExecutionPlan(
            blueprint_id=blueprint.id,
            version=blueprint.version,
            run=options.active_run,
            order=tuple(order),
            risk_profile=profile,
            merged=options.merge_config,
            gate=gate,
        )


# Global planner instance
_planner: Optional[ExecutionPlanner] = None


def get_planner() -> ExecutionPlanner:
    """Get the global execution planner instance."""
    global _planner
    if _planner is None:
        _planner = ExecutionPlanner()
    return _planner


def build_execution_plan(
    blueprint: Blueprint,
    options: Optional[PlanOptions] = None,
    settings: Optional[Settings] = None,
) -> ExecutionPlan:
    """Build an execution plan with the given or global settings."""
    planner = ExecutionPlanner(settings) if settings else get_planner()
    return planner.build(blueprint, options)
