"""Edge resolution helpers over the story model."""
from __future__ import annotations

import re
from typing import List, NamedTuple

from storygraph.core.types import END_SCENE_ID
from storygraph.domain.defs import SceneDef

_NON_SLUG_RUN = re.compile(r"[^a-z0-9]+")


class OutgoingEdge(NamedTuple):
    """A scene's effective edge; ``choice_id`` is None for the linear fallback."""

    choice_id: str | None
    target_id: str


def resolve_outgoing(scene: SceneDef | None) -> List[OutgoingEdge]:
    """Return the effective edges of a scene in declaration order.

    Choices win when present, otherwise the single ``next_scene`` fallback is
    used, otherwise the scene is a dead end.
    """
    if scene is None:
        return []
    if scene.choices:
        return [OutgoingEdge(choice.id, choice.next_scene) for choice in scene.choices]
    if scene.next_scene:
        return [OutgoingEdge(None, scene.next_scene)]
    return []


def is_terminal(target_id: str | None) -> bool:
    return target_id == END_SCENE_ID


def slugify_title(title: str) -> str:
    """Derive a story id: lowercase, non-alphanumeric runs become one hyphen."""
    return _NON_SLUG_RUN.sub("-", title.lower())
