"""Static story graph validation utilities."""
from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass
from typing import Deque, Mapping, Set

from storygraph.core.types import Severity
from storygraph.domain.defs import SceneDef, StoryDef
from storygraph.domain.story_graph import is_terminal, resolve_outgoing

SCENE_ID_PATTERN = re.compile(r"^[a-z0-9-_]+$")


@dataclass(frozen=True, slots=True)
class Issue:
    severity: Severity
    code: str
    message: str
    context: dict[str, str]


def format_issue(issue: Issue) -> str:
    context = " ".join(f"{key}={value}" for key, value in issue.context.items())
    suffix = f" ({context})" if context else ""
    return f"[{issue.severity}] {issue.code}: {issue.message}{suffix}"


def has_errors(issues: list[Issue]) -> bool:
    return any(issue.severity == "ERROR" for issue in issues)


def validate_story(story: StoryDef) -> list[Issue]:
    """Collect structural problems in a story without raising."""
    issues: list[Issue] = []
    start = story.config.start_scene
    if start not in story.scenes:
        issues.append(
            Issue(
                severity="ERROR",
                code="MISSING_START_SCENE",
                message="Start scene references missing scene.",
                context={"story_id": story.id, "referenced_id": start},
            )
        )

    declared_variables = set(story.config.default_variables)
    declared_achievements = {achievement.id for achievement in story.config.achievements}
    for key, scene in story.scenes.items():
        _validate_scene_identity(key, scene, issues)
        _validate_scene_references(scene, story.scenes, issues)
        _validate_choice_ids(scene, issues)
        _validate_consequences(scene, declared_variables, declared_achievements, issues)

    _validate_reachability(story, issues)
    return issues


def _validate_scene_identity(key: str, scene: SceneDef, issues: list[Issue]) -> None:
    if scene.id != key:
        issues.append(
            Issue(
                severity="ERROR",
                code="SCENE_ID_MISMATCH",
                message="Scene id does not match its key in the story.",
                context={"scene_key": key, "scene_id": scene.id},
            )
        )
    if not SCENE_ID_PATTERN.fullmatch(key):
        issues.append(
            Issue(
                severity="WARN",
                code="INVALID_SCENE_ID",
                message="Scene id should only contain lowercase letters, numbers, hyphens, and underscores.",
                context={"scene_id": key},
            )
        )


def _validate_scene_references(
    scene: SceneDef, scenes: Mapping[str, SceneDef], issues: list[Issue]
) -> None:
    edges = resolve_outgoing(scene)
    if not edges:
        issues.append(
            Issue(
                severity="WARN",
                code="DEAD_END_SCENE",
                message="Scene has no choices and no next scene.",
                context={"scene_id": scene.id},
            )
        )
    for index, edge in enumerate(edges):
        if is_terminal(edge.target_id) or edge.target_id in scenes:
            continue
        field_path = f"choices[{index}].nextScene" if edge.choice_id is not None else "nextScene"
        issues.append(
            Issue(
                severity="ERROR",
                code="MISSING_SCENE_REF",
                message="Scene references missing scene.",
                context={
                    "scene_id": scene.id,
                    "field_path": field_path,
                    "referenced_id": edge.target_id,
                },
            )
        )


def _validate_choice_ids(scene: SceneDef, issues: list[Issue]) -> None:
    seen: Set[str] = set()
    for index, choice in enumerate(scene.choices):
        if choice.id in seen:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="DUPLICATE_CHOICE_ID",
                    message="Choice id is not unique within its scene.",
                    context={
                        "scene_id": scene.id,
                        "field_path": f"choices[{index}].id",
                        "choice_id": choice.id,
                    },
                )
            )
        seen.add(choice.id)


def _validate_consequences(
    scene: SceneDef,
    declared_variables: Set[str],
    declared_achievements: Set[str],
    issues: list[Issue],
) -> None:
    for index, choice in enumerate(scene.choices):
        if choice.consequences is None:
            continue
        for name in choice.consequences.variables:
            if name in declared_variables:
                continue
            # Still legal: the variable is created at 0 on first use.
            issues.append(
                Issue(
                    severity="WARN",
                    code="UNKNOWN_VARIABLE",
                    message="Choice changes a variable missing from the default variables.",
                    context={
                        "scene_id": scene.id,
                        "field_path": f"choices[{index}].consequences.variables.{name}",
                    },
                )
            )
        for achievement in choice.consequences.achievements:
            if achievement in declared_achievements:
                continue
            issues.append(
                Issue(
                    severity="WARN",
                    code="UNKNOWN_ACHIEVEMENT",
                    message="Choice unlocks an achievement that is not declared.",
                    context={
                        "scene_id": scene.id,
                        "field_path": f"choices[{index}].consequences.achievements",
                        "achievement_id": achievement,
                    },
                )
            )


def _validate_reachability(story: StoryDef, issues: list[Issue]) -> None:
    scenes = story.scenes
    start = story.config.start_scene
    reachable: Set[str] = set()
    queue: Deque[str] = deque([start] if start in scenes else [])
    while queue:
        scene_id = queue.popleft()
        if scene_id in reachable:
            continue
        reachable.add(scene_id)
        for edge in resolve_outgoing(scenes[scene_id]):
            if edge.target_id in scenes and edge.target_id not in reachable:
                queue.append(edge.target_id)
    for scene_id in sorted(set(scenes) - reachable):
        issues.append(
            Issue(
                severity="WARN",
                code="UNREACHABLE_SCENE",
                message="Scene is unreachable from the start scene.",
                context={"scene_id": scene_id},
            )
        )
