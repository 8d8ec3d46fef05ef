"""Domain definition exports."""

from .story_def import (
    AchievementDef,
    AtmosphereDef,
    ChoiceDef,
    ConditionsDef,
    ConsequencesDef,
    ContentConditionDef,
    ContentVariableDef,
    EndingDef,
    SceneDef,
    StoryConfigDef,
    StoryDef,
    StoryMetadataDef,
    StoryStatsDef,
    StoryVariableDef,
    VariableRange,
)

__all__ = [
    "AchievementDef",
    "AtmosphereDef",
    "ChoiceDef",
    "ConditionsDef",
    "ConsequencesDef",
    "ContentConditionDef",
    "ContentVariableDef",
    "EndingDef",
    "SceneDef",
    "StoryConfigDef",
    "StoryDef",
    "StoryMetadataDef",
    "StoryStatsDef",
    "StoryVariableDef",
    "VariableRange",
]
