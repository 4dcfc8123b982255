"""
Run Telemetry Module

Run-time projections of plan progress:
- Plan summaries (completion, failure, confidence)
- Projections against the planned order
- Readiness signals and snapshots
"""

from playbook_planner.telemetry.projector import (
    aggregate_windows,
    build_projection,
    build_snapshot,
    project_signal,
    summarize_plan,
)

__all__ = [
    "summarize_plan",
    "build_projection",
    "project_signal",
    "build_snapshot",
    "aggregate_windows",
]
