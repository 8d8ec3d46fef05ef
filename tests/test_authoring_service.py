import pytest

from storygraph.data.errors import DuplicateIdError, NotFoundError
from storygraph.data.repositories import InMemoryStoryStore
from storygraph.domain.defs import ChoiceDef
from storygraph.services.authoring_service import (
    DEFAULT_SCENE_CONTENT,
    AuthoringService,
    effective_scene_order,
    validate_next_scene,
    validate_scene_id,
)
from storygraph.services.errors import ValidationError
from tests.helpers.story_builders import choice, scene, story


def _make_service() -> tuple[AuthoringService, InMemoryStoryStore]:
    store = InMemoryStoryStore(
        [story(scene("start", choice("go", "hall")), scene("hall"), scene("cellar"))]
    )
    return AuthoringService(store), store


def test_validate_scene_id_messages() -> None:
    source = story(scene("start"))

    assert validate_scene_id(source, "") == "Scene ID is required"
    assert "lowercase" in validate_scene_id(source, "Bad Id")
    assert validate_scene_id(source, "start") == "This scene ID already exists"
    assert validate_scene_id(source, "start", editing_scene_id="start") is None
    assert validate_scene_id(source, "new_scene-2") is None
    assert "lowercase" in validate_scene_id(source, "intro\n")


def test_validate_next_scene_accepts_end() -> None:
    source = story(scene("start"))

    assert validate_next_scene(source, "end") is None
    assert validate_next_scene(source, "start") is None
    assert validate_next_scene(source, "") == "Next scene ID is required"
    assert validate_next_scene(source, "nowhere") == "This scene does not exist"


def test_create_scene_uses_draft_defaults() -> None:
    service, store = _make_service()

    created = service.create_scene("test-story", "attic")

    assert created.title == "Scene attic"
    assert created.content == DEFAULT_SCENE_CONTENT
    assert created.choices == []
    assert "attic" in store.get_story("test-story").scenes


def test_create_scene_rejects_bad_and_duplicate_ids() -> None:
    service, _ = _make_service()

    with pytest.raises(ValidationError) as excinfo:
        service.create_scene("test-story", "Attic Room")
    assert excinfo.value.field == "scene_id"
    with pytest.raises(ValidationError):
        service.create_scene("test-story", "attic\n")
    with pytest.raises(DuplicateIdError):
        service.create_scene("test-story", "hall")
    with pytest.raises(NotFoundError):
        service.create_scene("missing", "attic")


def test_update_scene_rejects_dangling_choice() -> None:
    service, store = _make_service()

    with pytest.raises(ValidationError) as excinfo:
        service.update_scene(
            "test-story",
            "hall",
            choices=[ChoiceDef(id="a", text="Up", next_scene="cellar"), ChoiceDef(id="b", text="?", next_scene="void")],
        )
    assert excinfo.value.field == "choices[1].next_scene"
    assert store.get_story("test-story").scenes["hall"].choices == []

    updated = service.update_scene(
        "test-story", "hall", choices=[service.new_choice("Leave", "end")], content="A hall."
    )
    assert updated.choices[0].id == "choice-1"
    assert updated.content == "A hall."


def test_update_scene_checks_next_scene_and_existence() -> None:
    service, _ = _make_service()

    with pytest.raises(ValidationError):
        service.update_scene("test-story", "cellar", next_scene="void")
    with pytest.raises(NotFoundError):
        service.update_scene("test-story", "void", title="x")
    assert service.update_scene("test-story", "cellar", next_scene="end").next_scene == "end"


def test_delete_scene_prunes_display_order() -> None:
    service, store = _make_service()
    service.reorder_scenes("test-story", ["cellar", "start", "hall"])

    updated = service.delete_scene("test-story", "start")

    assert updated.scene_order == ["cellar", "hall"]
    assert "start" not in store.get_story("test-story").scenes


def test_move_scene_reorders_like_drag_and_drop() -> None:
    service, _ = _make_service()

    updated = service.move_scene("test-story", "cellar", 0)
    assert updated.scene_order == ["cellar", "start", "hall"]

    updated = service.move_scene("test-story", "cellar", 10)
    assert updated.scene_order == ["start", "hall", "cellar"]
    with pytest.raises(NotFoundError):
        service.move_scene("test-story", "void", 0)


def test_effective_scene_order_appends_unsorted_scenes() -> None:
    source = story(scene("start"), scene("b"), scene("c"))
    source.scene_order = ["c", "gone"]

    assert effective_scene_order(source) == ["c", "start", "b"]


def test_create_story_and_check() -> None:
    service, store = _make_service()

    created = service.create_story("New Draft", "Author")

    assert created.id == "new-draft"
    assert created.tags == ["New"]
    codes = {issue.code for issue in service.check_story("new-draft")}
    assert "MISSING_START_SCENE" in codes
    with pytest.raises(ValidationError):
        service.create_story("   ", "Author")
    assert store.get_story("new-draft") is not None
