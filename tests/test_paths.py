from pathlib import Path

from storygraph.data import paths


def test_get_definitions_path_base_path(tmp_path: Path) -> None:
    assert paths.get_definitions_path(tmp_path) == tmp_path


def test_get_definitions_path_source_repo_exists(monkeypatch) -> None:
    monkeypatch.delenv("STORYGRAPH_DEFINITIONS", raising=False)
    definitions_path = paths.get_definitions_path()
    assert definitions_path.name == "definitions"
    assert (definitions_path / "stories").is_dir()


def test_get_definitions_path_env_override(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("STORYGRAPH_DEFINITIONS", str(tmp_path))
    assert paths.get_definitions_path() == tmp_path
    assert paths.get_stories_path() == tmp_path / "stories"
