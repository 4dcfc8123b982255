"""
Blueprint Validator

Parses raw blueprint and run records, checks dependency resolution,
and proves the step dependency graph is acyclic.
"""

from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from playbook_planner.config.settings import Settings, settings as default_settings
from playbook_planner.errors import CycleError, SchemaError, UnresolvedDependencyError
from playbook_planner.models.blueprint import Blueprint, StepTemplate
from playbook_planner.models.run import Run

logger = structlog.get_logger(__name__)


class _Color(Enum):
    UNVISITED = 0
    IN_PROGRESS = 1
    DONE = 2


def _issues(error: ValidationError) -> list[dict[str, Any]]:
    return [
        {
            "location": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in error.errors()
    ]


def parse_blueprint(raw: Any, settings: Optional[Settings] = None) -> Blueprint:
    """
    Parse and validate a raw blueprint.

    Args:
        raw: Mapping decoded from JSON, or an existing Blueprint.
        settings: Planner settings (default: global settings).

    Returns:
        The validated Blueprint.

    Raises:
        SchemaError: Field shapes or ranges are invalid, step ids repeat,
            or the step count exceeds the configured ceiling.
        UnresolvedDependencyError: A step depends on an id that is not a
            step of this blueprint.
    """
    settings = settings or default_settings

    if isinstance(raw, Mapping):
        steps = raw.get("steps")
        if isinstance(steps, (list, tuple)) and len(steps) > settings.max_blueprint_steps:
            raise SchemaError("blueprint", [{
                "location": "steps",
                "message": (
                    f"{len(steps)} steps exceeds the limit of "
                    f"{settings.max_blueprint_steps}"
                ),
                "type": "too_long",
            }])

    try:
        blueprint = Blueprint.model_validate(raw)
    except ValidationError as e:
        logger.warning("Blueprint rejected", error_count=e.error_count())
        raise SchemaError("blueprint", _issues(e)) from e

    unresolved = unresolved_dependencies(blueprint.steps)
    if unresolved:
        logger.warning(
            "Blueprint has unresolved dependencies",
            blueprint_id=blueprint.id,
            unresolved=len(unresolved),
        )
        raise UnresolvedDependencyError(unresolved)

    return blueprint


def parse_run(raw: Any) -> Run:
    """Parse and validate a raw run record."""
    try:
        return Run.model_validate(raw)
    except ValidationError as e:
        raise SchemaError("run", _issues(e)) from e


def unresolved_dependencies(steps: Iterable[StepTemplate]) -> list[tuple[str, str]]:
    """Every (step id, dependency id) pair whose dependency is not a known step."""
    steps = list(steps)
    known = {step.id for step in steps}
    return [
        (step.id, dep)
        for step in steps
        for dep in step.dependencies
        if dep not in known
    ]


def ensure_acyclic(steps: Iterable[StepTemplate]) -> None:
    """
    Prove the dependency graph of ``steps`` is acyclic.

    Iterative depth-first search with three-color marking; each step is
    entered once. Dependencies on unknown ids are ignored here.

    Raises:
        CycleError: A dependency edge reaches a step still in progress.
            The error names that step, which lies on the cycle.
    """
    graph = {step.id: step.dependencies for step in steps}
    color = {step_id: _Color.UNVISITED for step_id in graph}

    for root in graph:
        if color[root] is not _Color.UNVISITED:
            continue
        color[root] = _Color.IN_PROGRESS
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(graph[root]))]

        while stack:
            node, deps = stack[-1]
            advanced = False
            for dep in deps:
                state = color.get(dep)
                if state is None or state is _Color.DONE:
                    continue
                if state is _Color.IN_PROGRESS:
                    raise CycleError(dep)
                color[dep] = _Color.IN_PROGRESS
                stack.append((dep, iter(graph[dep])))
                advanced = True
                break
            if not advanced:
                color[node] = _Color.DONE
                stack.pop()


def load_blueprint(raw: Any, settings: Optional[Settings] = None) -> Blueprint:
    """Parse a blueprint and prove its step graph is a DAG."""
    blueprint = parse_blueprint(raw, settings)
    ensure_acyclic(blueprint.steps)
    return blueprint
