"""
Constraint Gate

Evaluates step and blueprint feasibility against the risk-tier policy.
Findings are returned as violation records; nothing here raises for a
failed check, so callers can decide to proceed past warnings.
"""

import structlog

from playbook_planner.models.blueprint import Blueprint, StepTemplate
from playbook_planner.models.plan import (
    ConstraintContext,
    ConstraintResult,
    ConstraintViolation,
    ViolationSeverity,
)
from playbook_planner.orchestrator.policy import (
    MAX_CONCURRENCY,
    RISK_CAP_MINUTES,
    RISK_MULTIPLIER,
    SEVERITY_WEIGHT,
    TIER_TIME_BUDGET,
    step_capacity,
)

logger = structlog.get_logger(__name__)


def _step_violations(step: StepTemplate, context: ConstraintContext) -> list[ConstraintViolation]:
    violations: list[ConstraintViolation] = []

    projected = step.expected_latency_minutes * RISK_MULTIPLIER[step.kind]
    tolerance = TIER_TIME_BUDGET[context.risk_tier]
    capacity = step_capacity(step.kind, context.risk_tier)

    if projected > tolerance:
        violations.append(ConstraintViolation(
            key=f"{step.id}:projected-duration",
            message=(
                f"Step {step.id} projects {projected:.1f} minutes, over the "
                f"{tolerance:.0f} minute tolerance for {context.risk_tier.value} tier"
            ),
            severity=ViolationSeverity.WARN,
        ))

    if step.automation_level > capacity:
        violations.append(ConstraintViolation(
            key=f"{step.id}:automation-capacity",
            message=(
                f"Step {step.id} automation level {step.automation_level} exceeds "
                f"capacity {capacity} for {step.kind.value} under {context.risk_tier.value} tier"
            ),
            severity=ViolationSeverity.ERROR,
        ))

    if step.expected_latency_minutes <= 0:
        violations.append(ConstraintViolation(
            key=f"{step.id}:non-positive-latency",
            message=f"Step {step.id} has non-positive expected latency",
            severity=ViolationSeverity.ERROR,
        ))

    if not step.actions:
        violations.append(ConstraintViolation(
            key=f"{step.id}:no-actions",
            message=f"Step {step.id} has no actions",
            severity=ViolationSeverity.WARN,
        ))

    return violations


def can_step_run(step: StepTemplate, context: ConstraintContext) -> ConstraintResult:
    """
    Gate a single step.

    Args:
        step: The step to check.
        context: Service, time budget, workload and risk tier.

    Returns:
        ConstraintResult; ``ok`` is False iff an error was emitted.
    """
    return ConstraintResult.from_violations(_step_violations(step, context))


def _blocks_scheduling(steps: tuple[StepTemplate, ...]) -> bool:
    """Remove one ready step per pass; True if a pass ever finds none."""
    remaining = {step.id: step for step in steps}
    completed: set[str] = set()
    while remaining:
        ready = next(
            (
                step_id
                for step_id, step in remaining.items()
                if all(dep in completed for dep in step.dependencies)
            ),
            None,
        )
        if ready is None:
            return True
        completed.add(ready)
        del remaining[ready]
    return False


def can_blueprint_run(blueprint: Blueprint, context: ConstraintContext) -> ConstraintResult:
    """
    Gate a whole blueprint.

    Aggregates every step's findings, then adds dependency fan-out,
    structural, version, time budget, step count and risk-cap checks.

    Returns:
        ConstraintResult; ``ok`` is False iff any violation is an error.
    """
    violations: list[ConstraintViolation] = []
    for step in blueprint.steps:
        violations.extend(_step_violations(step, context))

    for step in blueprint.steps:
        if len(step.dependencies) > context.active_workload:
            violations.append(ConstraintViolation(
                key=f"{step.id}:dependency-fanout",
                message=(
                    f"Step {step.id} waits on {len(step.dependencies)} dependencies, "
                    f"more than the active workload of {context.active_workload}"
                ),
                severity=ViolationSeverity.WARN,
            ))

    if _blocks_scheduling(blueprint.steps):
        violations.append(ConstraintViolation(
            key="unschedulable-graph",
            message=f"Blueprint {blueprint.id} has steps that can never become ready",
            severity=ViolationSeverity.ERROR,
        ))

    if blueprint.version <= 0:
        violations.append(ConstraintViolation(
            key="invalid-version",
            message=f"Blueprint {blueprint.id} has invalid version {blueprint.version}",
            severity=ViolationSeverity.ERROR,
        ))

    estimated = blueprint.estimated_minutes
    if estimated > context.time_budget_minutes:
        violations.append(ConstraintViolation(
            key="time-budget",
            message=(
                f"Estimated {estimated:.0f} minutes exceeds the "
                f"{context.time_budget_minutes:.0f} minute budget for {context.service}"
            ),
            severity=ViolationSeverity.WARN,
        ))

    concurrency = MAX_CONCURRENCY[context.risk_tier]
    if len(blueprint.steps) > 2 * concurrency:
        violations.append(ConstraintViolation(
            key="step-count",
            message=(
                f"{len(blueprint.steps)} steps is more than twice the "
                f"{context.risk_tier.value} tier concurrency of {concurrency}"
            ),
            severity=ViolationSeverity.INFO,
        ))

    if estimated / SEVERITY_WEIGHT[context.risk_tier] > RISK_CAP_MINUTES:
        violations.append(ConstraintViolation(
            key="risk-cap",
            message=(
                f"Risk cap reached: {estimated:.0f} estimated minutes at "
                f"{context.risk_tier.value} tier"
            ),
            severity=ViolationSeverity.INFO,
        ))

    result = ConstraintResult.from_violations(violations)
    logger.debug(
        "Blueprint gated",
        blueprint_id=blueprint.id,
        ok=result.ok,
        errors=len(result.errors),
        warnings=len(result.warnings),
        infos=len(result.infos),
    )
    return result
