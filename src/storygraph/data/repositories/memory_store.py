"""Mutable story storage behind a repository-style interface."""
from __future__ import annotations

import copy
import dataclasses
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Protocol, Sequence

from storygraph.core.logging import get_logger
from storygraph.data.errors import DuplicateIdError, NotFoundError
from storygraph.domain.defs import SceneDef, StoryConfigDef, StoryDef
from storygraph.domain.story_graph import slugify_title

logger = get_logger(__name__)

_PROTECTED_STORY_FIELDS = frozenset({"id", "created_at", "updated_at"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoryStore(Protocol):
    """Capability set the engine and authoring tools rely on."""

    def get_story(self, story_id: str) -> StoryDef | None: ...

    def list_stories(self) -> List[StoryDef]: ...

    def create_story(self, title: str, author: str, **fields: object) -> StoryDef: ...

    def update_story(self, story_id: str, **changes: object) -> StoryDef: ...

    def delete_story(self, story_id: str) -> None: ...

    def create_scene(self, story_id: str, scene_id: str, **fields: object) -> SceneDef: ...

    def update_scene(self, story_id: str, scene_id: str, **changes: object) -> SceneDef: ...

    def delete_scene(self, story_id: str, scene_id: str) -> None: ...

    def update_scene_order(self, story_id: str, scene_order: Sequence[str]) -> StoryDef: ...


class InMemoryStoryStore:
    """Process-local story storage. Every mutation bumps ``updated_at``."""

    def __init__(
        self,
        stories: Iterable[StoryDef] = (),
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._clock = clock
        self._stories: Dict[str, StoryDef] = {story.id: copy.deepcopy(story) for story in stories}

    def get_story(self, story_id: str) -> StoryDef | None:
        return self._stories.get(story_id)

    def list_stories(self) -> List[StoryDef]:
        """Return stories, most recently updated first."""
        return sorted(self._stories.values(), key=lambda story: story.updated_at, reverse=True)

    def create_story(
        self,
        title: str,
        author: str,
        *,
        config: StoryConfigDef | None = None,
        scenes: Dict[str, SceneDef] | None = None,
        **fields: object,
    ) -> StoryDef:
        """Create a story whose id is derived from its title."""
        story_id = slugify_title(title)
        if story_id in self._stories:
            raise DuplicateIdError("A story with this title already exists")
        extra = {key: value for key, value in fields.items() if key not in _PROTECTED_STORY_FIELDS}
        now = self._clock()
        story = StoryDef(
            id=story_id,
            title=title,
            author=author,
            config=config or StoryConfigDef(start_scene="start"),
            scenes=dict(scenes or {}),
            created_at=now,
            updated_at=now,
            **extra,
        )
        self._stories[story_id] = story
        logger.info("Created story '%s'", story_id)
        return story

    def update_story(self, story_id: str, **changes: object) -> StoryDef:
        story = self._require_story(story_id)
        allowed = {key: value for key, value in changes.items() if key not in _PROTECTED_STORY_FIELDS}
        updated = dataclasses.replace(story, **allowed, updated_at=self._clock())
        self._stories[story_id] = updated
        logger.info("Updated story '%s' (%s)", story_id, ", ".join(sorted(allowed)) or "no fields")
        return updated

    def delete_story(self, story_id: str) -> None:
        self._require_story(story_id)
        del self._stories[story_id]
        logger.info("Deleted story '%s'", story_id)

    def create_scene(self, story_id: str, scene_id: str, **fields: object) -> SceneDef:
        story = self._require_story(story_id)
        if scene_id in story.scenes:
            raise DuplicateIdError("A scene with this ID already exists")
        fields.pop("id", None)
        scene = SceneDef(id=scene_id, **fields)
        story.scenes[scene_id] = scene
        story.updated_at = self._clock()
        logger.info("Created scene '%s' in story '%s'", scene_id, story_id)
        return scene

    def update_scene(self, story_id: str, scene_id: str, **changes: object) -> SceneDef:
        story = self._require_story(story_id)
        scene = story.scenes.get(scene_id)
        if scene is None:
            raise NotFoundError("Scene not found")
        changes.pop("id", None)
        updated = dataclasses.replace(scene, **changes)
        story.scenes[scene_id] = updated
        story.updated_at = self._clock()
        logger.info("Updated scene '%s' in story '%s'", scene_id, story_id)
        return updated

    def delete_scene(self, story_id: str, scene_id: str) -> None:
        story = self._require_story(story_id)
        if scene_id not in story.scenes:
            raise NotFoundError("Scene not found")
        del story.scenes[scene_id]
        story.updated_at = self._clock()
        logger.info("Deleted scene '%s' from story '%s'", scene_id, story_id)

    def update_scene_order(self, story_id: str, scene_order: Sequence[str]) -> StoryDef:
        """Persist the author's display order; traversal and layout ignore it."""
        story = self._require_story(story_id)
        story.scene_order = list(scene_order)
        story.updated_at = self._clock()
        return story

    @staticmethod
    def scene_count(story: StoryDef) -> int:
        return len(story.scenes)

    def _require_story(self, story_id: str) -> StoryDef:
        story = self._stories.get(story_id)
        if story is None:
            raise NotFoundError("Story not found")
        return story
