"""Shared type aliases for the core and domain layers."""
from typing import Final, Literal

SceneId = str

END_SCENE_ID: Final = "end"
CONTINUE_CHOICE_ID: Final = "continue"

Severity = Literal["ERROR", "WARN"]

__all__ = ["CONTINUE_CHOICE_ID", "END_SCENE_ID", "SceneId", "Severity"]
