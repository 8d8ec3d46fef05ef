"""Story definition structures shared by playthroughs, layout and authoring."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class VariableRange:
    """Inclusive bounds on a variable value; a missing bound is open."""

    min: int | None = None
    max: int | None = None


@dataclass(slots=True)
class ConditionsDef:
    """Gating predicate over variable ranges and unlocked achievements."""

    required_variables: Dict[str, VariableRange] = field(default_factory=dict)
    required_achievements: List[str] = field(default_factory=list)


@dataclass(slots=True)
class ConsequencesDef:
    """Effects applied when a choice is taken."""

    variables: Dict[str, int] = field(default_factory=dict)
    achievements: List[str] = field(default_factory=list)


@dataclass(slots=True)
class StoryVariableDef:
    """Named numeric attribute tracked during a playthrough.

    ``min`` and ``max`` are display hints only and are never enforced.
    """

    value: int = 0
    min: int | None = None
    max: int | None = None
    hidden: bool = False
    display_name: str | None = None


@dataclass(slots=True)
class ChoiceDef:
    """A directed edge from one scene to another (or to the end)."""

    id: str
    text: str
    next_scene: str
    consequences: ConsequencesDef | None = None
    conditions: ConditionsDef | None = None


@dataclass(slots=True)
class ContentConditionDef:
    variables: Dict[str, VariableRange] = field(default_factory=dict)
    text: str = ""


@dataclass(slots=True)
class ContentVariableDef:
    """Variant text substituted for ``{name}`` placeholders in scene content."""

    default_text: str = ""
    conditions: List[ContentConditionDef] = field(default_factory=list)


@dataclass(slots=True)
class AtmosphereDef:
    mood: str | None = None
    music: str | None = None
    background: str | None = None


@dataclass(slots=True)
class SceneDef:
    """Fully parsed story scene."""

    id: str
    title: str = ""
    content: str = ""
    choices: List[ChoiceDef] = field(default_factory=list)
    next_scene: str | None = None
    conditions: ConditionsDef | None = None
    content_variables: Dict[str, ContentVariableDef] = field(default_factory=dict)
    atmosphere: AtmosphereDef | None = None


@dataclass(slots=True)
class AchievementDef:
    id: str
    name: str
    description: str = ""
    hidden: bool = False


@dataclass(slots=True)
class EndingDef:
    """Named ending selected when a playthrough reaches the end sentinel."""

    id: str
    name: str
    description: str = ""
    conditions: ConditionsDef = field(default_factory=ConditionsDef)


@dataclass(slots=True)
class StoryConfigDef:
    start_scene: str
    default_variables: Dict[str, StoryVariableDef] = field(default_factory=dict)
    achievements: List[AchievementDef] = field(default_factory=list)
    endings: List[EndingDef] = field(default_factory=list)


@dataclass(slots=True)
class StoryStatsDef:
    """Reader counters. The engine reads these but never updates them."""

    rating: float = 0.0
    plays: int = 0
    completions: int = 0
    average_play_time: int = 0


@dataclass(slots=True)
class StoryMetadataDef:
    created_at: str = ""
    updated_at: str = ""
    version: str = "1.0.0"
    estimated_read_time: int = 0
    difficulty: str = "Medium"
    genre: List[str] = field(default_factory=list)
    is_published: bool = False
    content_warnings: List[str] = field(default_factory=list)
    age_rating: str | None = None


@dataclass(slots=True)
class StoryDef:
    """Aggregate root: a story and all of its scenes."""

    id: str
    title: str
    author: str
    config: StoryConfigDef
    scenes: Dict[str, SceneDef] = field(default_factory=dict)
    description: str = ""
    cover_image: str = ""
    category: str = ""
    tags: List[str] = field(default_factory=list)
    stats: StoryStatsDef = field(default_factory=StoryStatsDef)
    metadata: StoryMetadataDef = field(default_factory=StoryMetadataDef)
    scene_order: List[str] | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
