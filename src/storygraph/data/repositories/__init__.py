"""Repository exports."""

from .memory_store import InMemoryStoryStore, StoryStore
from .story_repo import StoryRepository

__all__ = [
    "InMemoryStoryStore",
    "StoryRepository",
    "StoryStore",
]
