from __future__ import annotations

from typing import Dict, Iterable

from storygraph.domain.defs import (
    ChoiceDef,
    ConditionsDef,
    ConsequencesDef,
    SceneDef,
    StoryConfigDef,
    StoryDef,
    StoryVariableDef,
)


def choice(
    choice_id: str,
    next_scene: str,
    *,
    text: str | None = None,
    deltas: Dict[str, int] | None = None,
    achievements: Iterable[str] = (),
    conditions: ConditionsDef | None = None,
) -> ChoiceDef:
    consequences = None
    if deltas or achievements:
        consequences = ConsequencesDef(variables=dict(deltas or {}), achievements=list(achievements))
    return ChoiceDef(
        id=choice_id,
        text=text or f"Go to {next_scene}",
        next_scene=next_scene,
        consequences=consequences,
        conditions=conditions,
    )


def scene(
    scene_id: str,
    *choices: ChoiceDef,
    next_scene: str | None = None,
    content: str | None = None,
    conditions: ConditionsDef | None = None,
) -> SceneDef:
    return SceneDef(
        id=scene_id,
        title=scene_id.replace("_", " ").title(),
        content=content if content is not None else f"Content of {scene_id}",
        choices=list(choices),
        next_scene=next_scene,
        conditions=conditions,
    )


def story(
    *scenes: SceneDef,
    start: str = "start",
    variables: Dict[str, int] | None = None,
    story_id: str = "test-story",
) -> StoryDef:
    return StoryDef(
        id=story_id,
        title="Test Story",
        author="Tester",
        config=StoryConfigDef(
            start_scene=start,
            default_variables={
                name: StoryVariableDef(value=value, display_name=name.title())
                for name, value in (variables or {}).items()
            },
        ),
        scenes={item.id: item for item in scenes},
    )
