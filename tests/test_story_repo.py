import json
from pathlib import Path

import pytest

from storygraph.data.errors import DataLoadError, DataReferenceError, DataValidationError
from storygraph.data.repositories import StoryRepository


def _write_story(base: Path, payload: dict, name: str | None = None) -> None:
    stories_dir = base / "stories"
    stories_dir.mkdir(parents=True, exist_ok=True)
    file_name = f"{name or payload['id']}.json"
    (stories_dir / file_name).write_text(json.dumps(payload), encoding="utf-8")


def _minimal_payload(**overrides: object) -> dict:
    payload = {
        "id": "tiny",
        "title": "Tiny",
        "author": "Tester",
        "config": {"startScene": "start"},
        "scenes": {
            "start": {
                "id": "start",
                "title": "Start",
                "content": "Hello",
                "choices": [{"id": "go", "text": "Go", "nextScene": "end"}],
            }
        },
    }
    payload.update(overrides)
    return payload


def test_story_repository_loads_bundled_stories() -> None:
    repo = StoryRepository()
    story = repo.get("digital-whispers")

    assert story.title == "Digital Whispers"
    assert story.config.start_scene == "start"
    assert story.config.default_variables["trust"].display_name == "Trust"
    assert len(story.scenes["start"].choices) == 2
    assert story.scenes["start"].choices[0].consequences.variables == {"knowledge": 1}
    assert [item.id for item in repo.all()] == ["crown-of-destiny", "digital-whispers"]


def test_linear_scenes_keep_next_scene() -> None:
    story = StoryRepository().get("crown-of-destiny")

    acceptance = story.scenes["crown_acceptance"]
    assert acceptance.choices == []
    assert acceptance.next_scene == "coronation_reflection"


def test_parses_conditions_variants_and_endings(tmp_path: Path) -> None:
    payload = _minimal_payload(
        config={
            "startScene": "start",
            "endings": [{"id": "win", "name": "Win", "conditions": {"variables": {"gold": {"min": 3}}}}],
        }
    )
    payload["scenes"]["start"]["contentVariables"] = {
        "greeting": {"defaultText": "Hi", "conditions": [{"variables": {"gold": {"max": 0}}, "text": "Poor"}]}
    }
    payload["scenes"]["start"]["choices"][0]["conditions"] = {
        "requiredVariables": {"gold": {"min": 1}},
        "requiredAchievements": ["rich"],
    }
    _write_story(tmp_path, payload)

    story = StoryRepository(tmp_path).get("tiny")

    assert story.config.endings[0].conditions.required_variables["gold"].min == 3
    variant = story.scenes["start"].content_variables["greeting"]
    assert variant.default_text == "Hi"
    assert variant.conditions[0].variables["gold"].max == 0
    gate = story.scenes["start"].choices[0].conditions
    assert gate.required_achievements == ["rich"]


def test_missing_directory_raises_load_error(tmp_path: Path) -> None:
    with pytest.raises(DataLoadError):
        StoryRepository(tmp_path).all()


def test_invalid_json_raises_load_error(tmp_path: Path) -> None:
    stories_dir = tmp_path / "stories"
    stories_dir.mkdir()
    (stories_dir / "broken.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(DataLoadError):
        StoryRepository(tmp_path).all()


def test_choice_without_next_scene_is_rejected(tmp_path: Path) -> None:
    payload = _minimal_payload()
    del payload["scenes"]["start"]["choices"][0]["nextScene"]
    _write_story(tmp_path, payload)

    with pytest.raises(DataValidationError, match="nextScene"):
        StoryRepository(tmp_path).all()


def test_boolean_delta_is_rejected(tmp_path: Path) -> None:
    payload = _minimal_payload()
    payload["scenes"]["start"]["choices"][0]["consequences"] = {"variables": {"trust": True}}
    _write_story(tmp_path, payload)

    with pytest.raises(DataValidationError, match="integer"):
        StoryRepository(tmp_path).all()


def test_scene_id_must_match_key(tmp_path: Path) -> None:
    payload = _minimal_payload()
    payload["scenes"]["start"]["id"] = "other"
    _write_story(tmp_path, payload)

    with pytest.raises(DataReferenceError):
        StoryRepository(tmp_path).all()


def test_file_name_must_match_story_id(tmp_path: Path) -> None:
    _write_story(tmp_path, _minimal_payload(), name="renamed")

    with pytest.raises(DataReferenceError):
        StoryRepository(tmp_path).all()
