"""Service layer exports."""

from .authoring_service import AuthoringService
from .errors import (
    ChoiceLockedError,
    DuplicateIdError,
    InvalidChoiceError,
    NotFoundError,
    PlaythroughCompleteError,
    SceneNotFoundError,
    StoryGraphError,
    TransitionInProgressError,
    ValidationError,
)
from .layout_service import LayoutEdge, LayoutNode, StoryLayout, build_story_layout
from .playthrough_service import (
    AdvanceResult,
    ChoiceView,
    EndView,
    PlaythroughService,
    SceneView,
    VariableView,
)

__all__ = [
    "AdvanceResult",
    "AuthoringService",
    "ChoiceLockedError",
    "ChoiceView",
    "DuplicateIdError",
    "EndView",
    "InvalidChoiceError",
    "LayoutEdge",
    "LayoutNode",
    "NotFoundError",
    "PlaythroughCompleteError",
    "PlaythroughService",
    "SceneNotFoundError",
    "SceneView",
    "StoryGraphError",
    "StoryLayout",
    "TransitionInProgressError",
    "ValidationError",
    "VariableView",
    "build_story_layout",
]
