"""Predicate evaluation for conditional choices, scenes, content and endings."""
from __future__ import annotations

import re
from typing import Iterable, Mapping, Sequence

from storygraph.domain.defs import (
    ConditionsDef,
    ContentVariableDef,
    EndingDef,
    SceneDef,
    StoryVariableDef,
    VariableRange,
)

_PLACEHOLDER = re.compile(r"\{([A-Za-z0-9_-]+)\}")


def variable_value(variables: Mapping[str, StoryVariableDef], name: str) -> int:
    """Return the current value of ``name``; undeclared variables read as 0."""
    variable = variables.get(name)
    return variable.value if variable is not None else 0


def value_in_range(value: int, bounds: VariableRange) -> bool:
    if bounds.min is not None and value < bounds.min:
        return False
    if bounds.max is not None and value > bounds.max:
        return False
    return True


def ranges_met(
    required: Mapping[str, VariableRange], variables: Mapping[str, StoryVariableDef]
) -> bool:
    return all(
        value_in_range(variable_value(variables, name), bounds) for name, bounds in required.items()
    )


def conditions_met(
    conditions: ConditionsDef | None,
    variables: Mapping[str, StoryVariableDef],
    achievements: Iterable[str] = (),
) -> bool:
    """Return True when every variable range and required achievement holds."""
    if conditions is None:
        return True
    unlocked = set(achievements)
    if any(achievement not in unlocked for achievement in conditions.required_achievements):
        return False
    return ranges_met(conditions.required_variables, variables)


def select_content_variant(
    content_variable: ContentVariableDef, variables: Mapping[str, StoryVariableDef]
) -> str:
    for candidate in content_variable.conditions:
        if ranges_met(candidate.variables, variables):
            return candidate.text
    return content_variable.default_text


def resolve_scene_content(scene: SceneDef, variables: Mapping[str, StoryVariableDef]) -> str:
    """Substitute ``{name}`` placeholders with the matching content variant.

    Placeholders without a declared content variable are left untouched.
    """
    if not scene.content_variables:
        return scene.content

    def _replace(match: re.Match[str]) -> str:
        content_variable = scene.content_variables.get(match.group(1))
        if content_variable is None:
            return match.group(0)
        return select_content_variant(content_variable, variables)

    return _PLACEHOLDER.sub(_replace, scene.content)


def resolve_ending(
    endings: Sequence[EndingDef],
    variables: Mapping[str, StoryVariableDef],
    achievements: Iterable[str] = (),
) -> EndingDef | None:
    """Return the first ending whose conditions hold, in declaration order."""
    unlocked = list(achievements)
    for ending in endings:
        if conditions_met(ending.conditions, variables, unlocked):
            return ending
    return None
