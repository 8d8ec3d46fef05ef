"""Layered graph layout used to visualise a story for authors."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Tuple

from storygraph.core.logging import get_logger
from storygraph.core.types import END_SCENE_ID
from storygraph.domain.defs import StoryDef
from storygraph.domain.story_graph import is_terminal, resolve_outgoing

logger = get_logger(__name__)

LEVEL_SPACING = 300
NODE_SPACING = 150
LABEL_PREVIEW_LENGTH = 50
END_NODE_LABEL = "END"


@dataclass(frozen=True, slots=True)
class LayoutNode:
    id: str
    x: float
    y: float
    label: str
    level: int
    selected: bool = False
    terminal: bool = False


@dataclass(frozen=True, slots=True)
class LayoutEdge:
    id: str
    source: str
    target: str
    label: str
    arrow: bool = True


@dataclass(slots=True)
class StoryLayout:
    nodes: List[LayoutNode] = field(default_factory=list)
    edges: List[LayoutEdge] = field(default_factory=list)

    def node(self, node_id: str) -> LayoutNode | None:
        return next((node for node in self.nodes if node.id == node_id), None)


def assign_levels(story: StoryDef) -> Dict[int, List[str]]:
    """Breadth-first level assignment from the start scene.

    The first discovery of a scene fixes its level. Targets missing from the
    story still occupy a slot in their level but are never expanded. The end sentinel is never levelled.
    """
    start = story.config.start_scene
    levels: Dict[int, List[str]] = {}
    if start not in story.scenes:
        return levels
    visited = {start}
    queue: Deque[Tuple[str, int]] = deque([(start, 0)])
    while queue:
        scene_id, level = queue.popleft()
        levels.setdefault(level, []).append(scene_id)
        if scene_id not in story.scenes:
            continue
        for edge in resolve_outgoing(story.scenes[scene_id]):
            target = edge.target_id
            if is_terminal(target) or target in visited:
                continue
            visited.add(target)
            queue.append((target, level + 1))
    return levels


def node_position(level: int, index: int, count_in_level: int) -> Tuple[float, float]:
    x = level * LEVEL_SPACING
    y = (index - (count_in_level - 1) / 2) * NODE_SPACING
    return x, y


def build_story_layout(story: StoryDef, selected_scene_id: str | None = None) -> StoryLayout:
    """Compute positioned nodes and labelled edges for the reachable graph."""
    layout = StoryLayout()
    levels = assign_levels(story)
    if not levels:
        logger.warning(
            "Story '%s' start scene '%s' is missing; layout is empty",
            story.id,
            story.config.start_scene,
        )
        return layout

    placement: Dict[str, Tuple[int, int, int]] = {}
    for level, scene_ids in levels.items():
        for index, scene_id in enumerate(scene_ids):
            placement[scene_id] = (level, index, len(scene_ids))

    start = story.config.start_scene
    visited = {start}
    queue: Deque[str] = deque([start])
    while queue:
        scene_id = queue.popleft()
        scene = story.scenes[scene_id]
        level, index, count = placement[scene_id]
        x, y = node_position(level, index, count)
        layout.nodes.append(
            LayoutNode(
                id=scene_id,
                x=x,
                y=y,
                label=scene.content[:LABEL_PREVIEW_LENGTH] + "...",
                level=level,
                selected=scene_id == selected_scene_id,
            )
        )
        for edge_index, edge in enumerate(resolve_outgoing(scene)):
            target = edge.target_id
            layout.edges.append(
                LayoutEdge(
                    id=f"{scene_id}-{target}-{edge_index}",
                    source=scene_id,
                    target=target,
                    label=scene.choices[edge_index].text if scene.choices else "",
                )
            )
            if is_terminal(target) or target in visited or target not in story.scenes:
                continue
            visited.add(target)
            queue.append(target)

    if any(is_terminal(edge.target) for edge in layout.edges):
        max_level = max(levels)
        layout.nodes.append(
            LayoutNode(
                id=END_SCENE_ID,
                x=(max_level + 1) * LEVEL_SPACING,
                y=0,
                label=END_NODE_LABEL,
                level=max_level + 1,
                terminal=True,
            )
        )
    logger.debug(
        "Laid out story '%s': %d nodes, %d edges", story.id, len(layout.nodes), len(layout.edges)
    )
    return layout
