from datetime import datetime, timedelta, timezone

import pytest

from storygraph.data.errors import DuplicateIdError, NotFoundError
from storygraph.data.repositories import InMemoryStoryStore, StoryRepository
from storygraph.domain.defs import ChoiceDef
from tests.helpers.story_builders import scene, story


class _Clock:
    def __init__(self) -> None:
        self._now = datetime(2100, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self._now += timedelta(minutes=1)
        return self._now


def _make_store() -> InMemoryStoryStore:
    return InMemoryStoryStore([story(scene("start"))], clock=_Clock())


def test_seeded_stories_are_copied() -> None:
    source = story(scene("start"))
    store = InMemoryStoryStore([source])

    store.create_scene("test-story", "extra")

    assert "extra" not in source.scenes
    assert "extra" in store.get_story("test-story").scenes


def test_list_stories_most_recent_first() -> None:
    store = _make_store()
    store.create_story("Second Tale", "Author")
    store.create_story("Third Tale", "Author")

    assert [item.id for item in store.list_stories()] == ["third-tale", "second-tale", "test-story"]

    store.create_scene("second-tale", "start")
    assert store.list_stories()[0].id == "second-tale"


def test_create_story_derives_id_and_rejects_duplicates() -> None:
    store = _make_store()

    created = store.create_story("The Lost City!", "Author", id="ignored")

    assert created.id == "the-lost-city-"
    assert created.scenes == {}
    assert created.config.start_scene == "start"
    with pytest.raises(DuplicateIdError):
        store.create_story("The Lost City?", "Someone")


def test_update_story_keeps_id() -> None:
    store = _make_store()

    updated = store.update_story("test-story", title="Renamed", id="hijack")

    assert updated.id == "test-story"
    assert updated.title == "Renamed"
    assert store.get_story("hijack") is None
    with pytest.raises(NotFoundError):
        store.update_story("missing", title="x")


def test_delete_story() -> None:
    store = _make_store()
    store.delete_story("test-story")

    assert store.get_story("test-story") is None
    with pytest.raises(NotFoundError):
        store.delete_story("test-story")


def test_scene_crud_enforces_ids() -> None:
    store = _make_store()

    created = store.create_scene("test-story", "hall", id="wrong", title="Hall")
    assert created.id == "hall"
    with pytest.raises(DuplicateIdError):
        store.create_scene("test-story", "hall")

    updated = store.update_scene(
        "test-story", "hall", id="other", choices=[ChoiceDef(id="c", text="Out", next_scene="end")]
    )
    assert updated.id == "hall"
    assert store.get_story("test-story").scenes["hall"].choices[0].next_scene == "end"

    store.delete_scene("test-story", "hall")
    assert "hall" not in store.get_story("test-story").scenes
    with pytest.raises(NotFoundError):
        store.update_scene("test-story", "hall", title="x")
    with pytest.raises(NotFoundError):
        store.delete_scene("test-story", "hall")
    with pytest.raises(NotFoundError):
        store.create_scene("missing", "hall")


def test_mutations_bump_updated_at() -> None:
    store = _make_store()
    before = store.get_story("test-story").updated_at

    store.update_scene_order("test-story", ["start"])

    current = store.get_story("test-story")
    assert current.updated_at > before
    assert current.scene_order == ["start"]


def test_store_accepts_repository_definitions() -> None:
    store = InMemoryStoryStore(StoryRepository().all())

    assert {item.id for item in store.list_stories()} == {"digital-whispers", "crown-of-destiny"}
    assert store.scene_count(store.get_story("digital-whispers")) == 9
