import json
from pathlib import Path

from storygraph.presentation.cli.config import default_config, load_config, save_config


def test_load_config_defaults_when_missing(tmp_path: Path) -> None:
    assert load_config(tmp_path / "missing.json") == default_config()


def test_load_config_defaults_on_garbage(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("not json", encoding="utf-8")
    assert load_config(path) == default_config()

    path.write_text("[1, 2]", encoding="utf-8")
    assert load_config(path) == default_config()


def test_load_config_normalizes_values(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"transition_delay_ms": -5, "show_hidden_variables": "yes", "log_level": "debug"}),
        encoding="utf-8",
    )

    config = load_config(path)

    assert config == {"transition_delay_ms": 500, "show_hidden_variables": False, "log_level": "DEBUG"}


def test_save_config_round_trips(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.json"

    save_config({"transition_delay_ms": 0, "show_hidden_variables": True, "log_level": "INFO"}, path)

    assert load_config(path) == {"transition_delay_ms": 0, "show_hidden_variables": True, "log_level": "INFO"}
