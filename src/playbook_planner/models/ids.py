"""
Typed identifiers.

Blueprint, step and run ids are distinct ``NewType`` wrappers over
``str``. They are checked once when a blueprint or run is parsed; past
that boundary they are trusted.
"""

import re
from typing import Annotated, NewType

from pydantic import AfterValidator

BlueprintId = NewType("BlueprintId", str)
StepId = NewType("StepId", str)
RunId = NewType("RunId", str)

_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._:-]*$")


def _check_id(value: str, kind: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{kind} id must not be empty")
    if not _ID_PATTERN.match(value):
        raise ValueError(f"{kind} id '{value}' contains invalid characters")
    return value


def _blueprint_id(value: str) -> BlueprintId:
    return BlueprintId(_check_id(value, "blueprint"))


def _step_id(value: str) -> StepId:
    return StepId(_check_id(value, "step"))


def _run_id(value: str) -> RunId:
    return RunId(_check_id(value, "run"))


BlueprintIdField = Annotated[BlueprintId, AfterValidator(_blueprint_id)]
StepIdField = Annotated[StepId, AfterValidator(_step_id)]
RunIdField = Annotated[RunId, AfterValidator(_run_id)]
