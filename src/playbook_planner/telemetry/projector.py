"""
Telemetry Projector

Projects a plan and its live run into completion, confidence and
readiness signals. These functions never raise on missing or empty run
data; they fall back to neutral values instead.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import Optional

from playbook_planner.models.base import as_utc
from playbook_planner.models.ids import StepId
from playbook_planner.models.plan import ExecutionPlan
from playbook_planner.models.run import Run, StepStatus
from playbook_planner.models.telemetry import (
    PlanSummary,
    ProgressWindow,
    Projection,
    ReadinessSignal,
    TelemetrySnapshot,
    WindowAggregate,
)

MIN_CONFIDENCE = 0.05


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def summarize_plan(plan: ExecutionPlan, now: Optional[datetime] = None) -> PlanSummary:
    """
    Headline ratios for the plan's run.

    Ratios are taken over the run's outcome map. Elapsed time is never
    negative and confidence stays within [0.05, 1].
    """
    run = plan.run
    if run is None:
        return PlanSummary()

    now = as_utc(now or datetime.now(timezone.utc))
    elapsed = max(0.0, (now - as_utc(run.started_at)).total_seconds() / 60.0)

    total = len(run.outcome_by_step)
    if total == 0:
        return PlanSummary(elapsed_minutes=elapsed)

    passed = len(run.steps_with_status(StepStatus.PASSED))
    failed = len(run.steps_with_status(StepStatus.FAILED))
    failure_ratio = failed / total

    return PlanSummary(
        completion_ratio=passed / total,
        elapsed_minutes=elapsed,
        failure_ratio=failure_ratio,
        confidence=_clamp(1.0 - failure_ratio, MIN_CONFIDENCE, 1.0),
    )


def build_projection(run: Optional[Run], order: Sequence[StepId]) -> Projection:
    """
    Where ``run`` stands against the planned ``order``.

    The active step is the first step in order that is running or
    pending. Steps with no reported outcome are not considered.
    """
    if run is None:
        return Projection(
            run_id=None,
            blueprint_id=None,
            active_step=None,
            confidence=1.0 if order else 0.0,
        )

    active: Optional[StepId] = None
    completed: list[StepId] = []
    failed: list[StepId] = []
    for step_id in order:
        outcome = run.outcome(step_id)
        if outcome is None:
            continue
        if active is None and outcome.status in (StepStatus.RUNNING, StepStatus.PENDING):
            active = step_id
        if outcome.status == StepStatus.PASSED:
            completed.append(step_id)
        elif outcome.status == StepStatus.FAILED:
            failed.append(step_id)

    confidence = 1.0 - len(failed) / len(order) if order else 0.0

    return Projection(
        run_id=run.id,
        blueprint_id=run.blueprint_id,
        active_step=active,
        completed_steps=tuple(completed),
        failed_steps=tuple(failed),
        confidence=confidence,
    )


def project_signal(run: Optional[Run]) -> ReadinessSignal:
    """
    Readiness signal for a run.

    Points at the first failed step, else the first reported step.
    Each failure costs 20 points of score (floor 20) and 0.15 of
    confidence (floor 0.35).
    """
    if run is None or not run.outcome_by_step:
        return ReadinessSignal(step_id=None, score=90.0, confidence=0.96)

    failed = run.steps_with_status(StepStatus.FAILED)
    failure_count = len(failed)
    step_id = failed[0] if failed else next(iter(run.outcome_by_step))

    if failure_count == 0:
        score = 90.0
        confidence = 0.96
    else:
        score = max(20.0, 80.0 - 20.0 * failure_count)
        confidence = max(0.35, 1.0 - 0.15 * failure_count)

    evidence = tuple(
        f"{sid}:{outcome.status.value}"
        for sid, outcome in run.outcome_by_step.items()
        if outcome.status in (StepStatus.PASSED, StepStatus.FAILED)
    )

    return ReadinessSignal(
        step_id=step_id,
        score=score,
        confidence=confidence,
        evidence=evidence,
    )


def aggregate_windows(windows: Iterable[ProgressWindow]) -> WindowAggregate:
    """Roll up progress windows; latency is weighted by observed steps."""
    windows = list(windows)
    if not windows:
        return WindowAggregate()

    completed = sum(w.completed for w in windows)
    failed = sum(w.failed for w in windows)
    skipped = sum(w.skipped for w in windows)
    observed = completed + failed + skipped
    if observed == 0:
        return WindowAggregate(window_count=len(windows))

    latency = sum(w.avg_latency_minutes * w.observed for w in windows) / observed

    return WindowAggregate(
        window_count=len(windows),
        completed=completed,
        failed=failed,
        skipped=skipped,
        completion_rate=completed / observed,
        fail_rate=failed / observed,
        avg_latency_minutes=latency,
    )


def build_snapshot(
    plan: ExecutionPlan,
    progress_windows: Iterable[ProgressWindow] = (),
) -> TelemetrySnapshot:
    """
    Bundle the plan's run, progress windows, projection and signal.

    The readiness signal is only included once at least one progress
    window has been observed.
    """
    windows = tuple(progress_windows)
    projection = build_projection(plan.run, plan.order)
    if projection.blueprint_id is None:
        projection = Projection(
            run_id=None,
            blueprint_id=plan.blueprint_id,
            active_step=None,
            confidence=projection.confidence,
        )

    return TelemetrySnapshot(
        run=plan.run,
        windows=windows,
        projection=projection,
        signal=project_signal(plan.run) if windows else None,
        aggregate=aggregate_windows(windows),
    )
