"""Data layer utilities for loading story definitions."""

from .errors import (
    DataLoadError,
    DataReferenceError,
    DataValidationError,
    DuplicateIdError,
    NotFoundError,
)
from .paths import get_definitions_path, get_repo_root, get_stories_path

__all__ = [
    "DataLoadError",
    "DataReferenceError",
    "DataValidationError",
    "DuplicateIdError",
    "NotFoundError",
    "get_definitions_path",
    "get_repo_root",
    "get_stories_path",
]
