"""Authoring operations: validated scene edits on top of a story store."""
from __future__ import annotations

import itertools
from typing import Iterator, List, Sequence

from storygraph.core.logging import get_logger
from storygraph.core.types import END_SCENE_ID
from storygraph.data.errors import DuplicateIdError, NotFoundError
from storygraph.data.repositories import StoryStore
from storygraph.domain.defs import ChoiceDef, SceneDef, StoryConfigDef, StoryDef, StoryStatsDef
from storygraph.domain.story_graph import is_terminal
from storygraph.services.errors import ValidationError
from storygraph.services.story_graph_validator import SCENE_ID_PATTERN, Issue, validate_story

logger = get_logger(__name__)

DEFAULT_SCENE_CONTENT = "Enter scene content here..."


def validate_scene_id(story: StoryDef, scene_id: str, *, editing_scene_id: str | None = None) -> str | None:
    """Return an error message for a bad new scene id, or None when it is usable."""
    if not scene_id:
        return "Scene ID is required"
    if not SCENE_ID_PATTERN.fullmatch(scene_id):
        return "Scene ID can only contain lowercase letters, numbers, hyphens, and underscores"
    if scene_id in story.scenes and scene_id != editing_scene_id:
        return "This scene ID already exists"
    return None


def validate_next_scene(story: StoryDef, next_scene: str | None) -> str | None:
    if not next_scene:
        return "Next scene ID is required"
    if next_scene not in story.scenes and not is_terminal(next_scene):
        return "This scene does not exist"
    return None


def effective_scene_order(story: StoryDef) -> List[str]:
    """Author display order: saved order first, then any scenes it does not mention."""
    saved = [scene_id for scene_id in story.scene_order or [] if scene_id in story.scenes]
    remaining = [scene_id for scene_id in story.scenes if scene_id not in saved]
    return saved + remaining


class AuthoringService:
    """Validates authoring input before delegating to the story store."""

    def __init__(self, store: StoryStore) -> None:
        self._store = store
        self._choice_counter: Iterator[int] = itertools.count(1)

    def create_story(self, title: str, author: str) -> StoryDef:
        """Create an empty story with the defaults used for new drafts."""
        if not title.strip():
            raise ValidationError("title", "Story title is required")
        return self._store.create_story(
            title,
            author,
            config=StoryConfigDef(start_scene="start"),
            description="A new interactive story",
            tags=["New"],
            stats=StoryStatsDef(),
        )

    def create_scene(
        self,
        story_id: str,
        scene_id: str,
        *,
        title: str | None = None,
        content: str = DEFAULT_SCENE_CONTENT,
    ) -> SceneDef:
        story = self._require_story(story_id)
        message = validate_scene_id(story, scene_id)
        if message is not None:
            if scene_id in story.scenes:
                raise DuplicateIdError(message)
            raise ValidationError("scene_id", message)
        return self._store.create_scene(
            story_id,
            scene_id,
            title=title or f"Scene {scene_id}",
            content=content,
            choices=[],
        )

    def update_scene(self, story_id: str, scene_id: str, **changes: object) -> SceneDef:
        """Apply changes after checking every outgoing reference."""
        story = self._require_story(story_id)
        if scene_id not in story.scenes:
            raise NotFoundError("Scene not found")
        choices = changes.get("choices")
        if choices is not None:
            self._validate_choices(story, choices)
        next_scene = changes.get("next_scene")
        if next_scene is not None:
            message = validate_next_scene(story, next_scene)
            if message is not None:
                raise ValidationError("next_scene", message)
        return self._store.update_scene(story_id, scene_id, **changes)

    def delete_scene(self, story_id: str, scene_id: str) -> StoryDef:
        """Delete a scene and drop it from the saved display order."""
        story = self._require_story(story_id)
        order = [existing for existing in effective_scene_order(story) if existing != scene_id]
        self._store.delete_scene(story_id, scene_id)
        return self._store.update_scene_order(story_id, order)

    def move_scene(self, story_id: str, scene_id: str, new_index: int) -> StoryDef:
        """Move one scene within the display order, as a drag-and-drop would."""
        story = self._require_story(story_id)
        order = effective_scene_order(story)
        if scene_id not in order:
            raise NotFoundError("Scene not found")
        order.remove(scene_id)
        order.insert(max(0, min(new_index, len(order))), scene_id)
        return self._store.update_scene_order(story_id, order)

    def reorder_scenes(self, story_id: str, scene_order: Sequence[str]) -> StoryDef:
        self._require_story(story_id)
        return self._store.update_scene_order(story_id, scene_order)

    def new_choice(self, text: str = "", next_scene: str = END_SCENE_ID) -> ChoiceDef:
        """Build a choice with a fresh id that is unique for this service."""
        return ChoiceDef(id=f"choice-{next(self._choice_counter)}", text=text, next_scene=next_scene)

    def check_story(self, story_id: str) -> list[Issue]:
        return validate_story(self._require_story(story_id))

    def _validate_choices(self, story: StoryDef, choices: object) -> None:
        if not isinstance(choices, list):
            raise ValidationError("choices", "Choices must be a list")
        for index, choice in enumerate(choices):
            if not isinstance(choice, ChoiceDef):
                raise ValidationError(f"choices[{index}]", "Choice entries must be ChoiceDef instances")
            message = validate_next_scene(story, choice.next_scene)
            if message is not None:
                logger.info(
                    "Rejected choice '%s' in story '%s': %s", choice.id, story.id, message
                )
                raise ValidationError(f"choices[{index}].next_scene", message)

    def _require_story(self, story_id: str) -> StoryDef:
        story = self._store.get_story(story_id)
        if story is None:
            raise NotFoundError("Story not found")
        return story
