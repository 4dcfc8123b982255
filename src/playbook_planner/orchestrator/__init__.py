"""
Playbook Orchestration Module

Design-time planning for recovery playbooks:
- Blueprint parsing and dependency validation
- Constraint gating against risk-tier policy
- Deterministic execution planning
"""

from playbook_planner.orchestrator.constraints import can_blueprint_run, can_step_run
from playbook_planner.orchestrator.planner import (
    ExecutionPlanner,
    build_execution_plan,
    get_planner,
    plan_cache_key,
    schedule_steps,
    severity_profile,
    step_risk,
)
from playbook_planner.orchestrator.validator import (
    ensure_acyclic,
    load_blueprint,
    parse_blueprint,
    parse_run,
    unresolved_dependencies,
)

__all__ = [
    # Validator
    "parse_blueprint",
    "parse_run",
    "load_blueprint",
    "ensure_acyclic",
    "unresolved_dependencies",
    # Constraint gate
    "can_step_run",
    "can_blueprint_run",
    # Planner
    "ExecutionPlanner",
    "build_execution_plan",
    "get_planner",
    "plan_cache_key",
    "schedule_steps",
    "severity_profile",
    "step_risk",
]
