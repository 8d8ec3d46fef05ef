"""Helpers for resolving data file locations."""
from __future__ import annotations

import os
from pathlib import Path

_DEFINITIONS_ENV = "STORYGRAPH_DEFINITIONS"


def get_repo_root() -> Path:
    """Return the repository root."""
    return Path(__file__).resolve().parents[3]


def get_definitions_path(base_path: Path | str | None = None) -> Path:
    """Return the directory containing JSON definition files.

    An explicit ``base_path`` wins, then the STORYGRAPH_DEFINITIONS
    environment variable, then the repository's bundled definitions.
    """
    if base_path is not None:
        return Path(base_path)
    override = os.environ.get(_DEFINITIONS_ENV)
    if override:
        return Path(override)
    return get_repo_root() / "data" / "definitions"


def get_stories_path(base_path: Path | str | None = None) -> Path:
    return get_definitions_path(base_path) / "stories"
