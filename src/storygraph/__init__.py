"""Branching interactive-fiction engine: story model, playthroughs and graph layout."""

__version__ = "0.1.0"
