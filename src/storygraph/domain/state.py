"""Per-session playthrough state."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal

from storygraph.domain.defs import StoryVariableDef

PendingKind = Literal["advance", "retreat"]


@dataclass
class PlaythroughState:
    """Ephemeral reader state derived from a story; never written back to it."""

    story_id: str
    current_scene: str
    history: List[str] = field(default_factory=list)
    variables: Dict[str, StoryVariableDef] = field(default_factory=dict)
    achievements: List[str] = field(default_factory=list)
    transitioning: bool = False
    pending_kind: PendingKind | None = None
    pending_target: str | None = None
    completed: bool = False
    ending_id: str | None = None
