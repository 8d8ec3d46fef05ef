"""Service-layer exceptions."""

from storygraph.data.errors import DuplicateIdError, NotFoundError

__all__ = [
    "ChoiceLockedError",
    "DuplicateIdError",
    "InvalidChoiceError",
    "NotFoundError",
    "PlaythroughCompleteError",
    "SceneNotFoundError",
    "StoryGraphError",
    "TransitionInProgressError",
    "ValidationError",
]


class StoryGraphError(Exception):
    """Base class for engine and authoring errors."""


class SceneNotFoundError(StoryGraphError):
    """Raised when the current scene id has no matching scene in the story."""

    def __init__(self, scene_id: str) -> None:
        super().__init__(f"Scene {scene_id} is referenced but not found in the story.")
        self.scene_id = scene_id


class ValidationError(StoryGraphError):
    """Raised for malformed authoring input such as a bad scene id."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class TransitionInProgressError(StoryGraphError):
    """Raised when advance or retreat is called while a transition is pending."""


class InvalidChoiceError(StoryGraphError):
    """Raised when a choice id or target does not match the current scene."""


class ChoiceLockedError(StoryGraphError):
    """Raised when the conditions gating a choice are not satisfied."""


class PlaythroughCompleteError(StoryGraphError):
    """Raised when advancing a playthrough that has already reached the end."""
