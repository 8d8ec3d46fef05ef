"""Playthrough state machine: progression, history and variable accumulation."""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, List

from storygraph.core.logging import get_logger
from storygraph.core.types import CONTINUE_CHOICE_ID
from storygraph.domain.conditions import (
    conditions_met,
    resolve_ending,
    resolve_scene_content,
)
from storygraph.domain.defs import ChoiceDef, EndingDef, SceneDef, StoryDef, StoryVariableDef
from storygraph.domain.state import PlaythroughState
from storygraph.domain.story_graph import is_terminal, resolve_outgoing
from storygraph.services.errors import (
    ChoiceLockedError,
    InvalidChoiceError,
    PlaythroughCompleteError,
    SceneNotFoundError,
    TransitionInProgressError,
)

logger = get_logger(__name__)


@dataclass(slots=True)
class ChoiceView:
    id: str
    text: str
    next_scene: str


@dataclass(slots=True)
class VariableView:
    name: str
    display_name: str
    value: int
    min: int | None = None
    max: int | None = None


@dataclass(slots=True)
class SceneView:
    """Data returned to the presentation layer for rendering a scene."""

    scene_id: str
    title: str
    text: str
    choices: List[ChoiceView]
    continue_target: str | None
    variables: List[VariableView]
    progress: float
    can_go_back: bool
    mood: str | None = None


@dataclass(slots=True)
class EndView:
    """Terminal view: either a completed playthrough or a broken reference."""

    story_id: str
    ending: EndingDef | None = None
    missing_scene_id: str | None = None
    error_message: str | None = None

    @property
    def is_error(self) -> bool:
        return self.missing_scene_id is not None


@dataclass(slots=True)
class AdvanceResult:
    """Outcome of an accepted advance call."""

    target_id: str
    committed: bool
    completed: bool = False
    ending: EndingDef | None = None
    variable_changes: Dict[str, int] = field(default_factory=dict)
    unlocked_achievements: List[str] = field(default_factory=list)


class PlaythroughService:
    """Drives a reader through one story.

    With ``deferred_transitions`` enabled, ``advance`` and ``retreat`` only
    stage the move and raise the ``transitioning`` flag; the host commits it
    with ``complete_transition`` once its own transition has finished.
    """

    def __init__(self, story: StoryDef, *, deferred_transitions: bool = False) -> None:
        self._story = story
        self._deferred = deferred_transitions

    @property
    def story(self) -> StoryDef:
        return self._story

    def start(self) -> PlaythroughState:
        """Create a fresh state positioned at the story's start scene."""
        start_scene = self._story.config.start_scene
        state = PlaythroughState(
            story_id=self._story.id,
            current_scene=start_scene,
            history=[start_scene],
            variables=copy.deepcopy(self._story.config.default_variables),
        )
        logger.debug("Started playthrough of '%s' at '%s'", self._story.id, start_scene)
        return state

    def advance(self, state: PlaythroughState, choice_id: str, target_id: str) -> AdvanceResult:
        """Apply the selected choice and move (or stage a move) to ``target_id``."""
        self._guard_entry(state)
        scene = self.current_content(state)
        choice = self._match_edge(state, scene, choice_id, target_id)

        result = AdvanceResult(target_id=target_id, committed=False)
        if choice is not None and choice.consequences is not None:
            result.variable_changes = self._apply_variable_deltas(state, choice.consequences.variables)
            result.unlocked_achievements = self._unlock_achievements(
                state, choice.consequences.achievements
            )

        if self._deferred:
            state.transitioning = True
            state.pending_kind = "advance"
            state.pending_target = target_id
            return result

        self._commit_advance(state, target_id)
        result.committed = True
        result.completed = state.completed
        result.ending = self.ending_for(state)
        return result

    def retreat(self, state: PlaythroughState) -> bool:
        """Step back along the history; returns False when nothing moved."""
        if state.transitioning:
            raise TransitionInProgressError("A transition is already in progress.")
        if state.completed or len(state.history) <= 1:
            return False
        if self._deferred:
            state.transitioning = True
            state.pending_kind = "retreat"
            state.pending_target = state.history[-2]
            return True
        self._commit_retreat(state)
        return True

    def complete_transition(self, state: PlaythroughState) -> bool:
        """Commit a staged advance or retreat. Returns False if none was pending."""
        if not state.transitioning:
            return False
        kind = state.pending_kind
        target_id = state.pending_target
        state.transitioning = False
        state.pending_kind = None
        state.pending_target = None
        if kind == "retreat":
            self._commit_retreat(state)
        elif target_id is not None:
            self._commit_advance(state, target_id)
        return True

    def current_content(self, state: PlaythroughState) -> SceneDef:
        """Return the scene the reader is on.

        Raises SceneNotFoundError when the id has no scene in the story and
        PlaythroughCompleteError once the end sentinel has been reached.
        """
        if state.completed:
            raise PlaythroughCompleteError(f"Playthrough of '{state.story_id}' is complete.")
        scene = self._story.scenes.get(state.current_scene)
        if scene is None:
            raise SceneNotFoundError(state.current_scene)
        return scene

    def current_view(
        self, state: PlaythroughState, *, include_hidden: bool = False
    ) -> SceneView | EndView:
        """Build a render-ready view, degrading to an EndView instead of raising."""
        if state.completed:
            return EndView(story_id=state.story_id, ending=self.ending_for(state))
        try:
            scene = self.current_content(state)
        except SceneNotFoundError as exc:
            logger.warning("Playthrough of '%s' hit a missing scene: %s", state.story_id, exc)
            return EndView(
                story_id=state.story_id,
                missing_scene_id=exc.scene_id,
                error_message=str(exc),
            )
        choices = [
            ChoiceView(id=choice.id, text=choice.text, next_scene=choice.next_scene)
            for choice in self.available_choices(state, scene)
        ]
        continue_target = scene.next_scene if not scene.choices else None
        return SceneView(
            scene_id=scene.id,
            title=scene.title,
            text=resolve_scene_content(scene, state.variables),
            choices=choices,
            continue_target=continue_target,
            variables=self.visible_variables(state, include_hidden=include_hidden),
            progress=self.progress(state),
            can_go_back=len(state.history) > 1,
            mood=scene.atmosphere.mood if scene.atmosphere else None,
        )

    def progress(self, state: PlaythroughState) -> float:
        """Coarse completion fraction: visited entries over total scenes."""
        total = len(self._story.scenes)
        if total == 0:
            return 0.0
        return len(state.history) / total

    def available_choices(
        self, state: PlaythroughState, scene: SceneDef | None = None
    ) -> List[ChoiceDef]:
        """Return the choices whose own and target-scene conditions are met."""
        scene = scene or self.current_content(state)
        return [choice for choice in scene.choices if self._choice_unlocked(state, choice)]

    def visible_variables(
        self, state: PlaythroughState, *, include_hidden: bool = False
    ) -> List[VariableView]:
        views: List[VariableView] = []
        for name, variable in state.variables.items():
            if variable.hidden and not include_hidden:
                continue
            views.append(
                VariableView(
                    name=name,
                    display_name=variable.display_name or name,
                    value=variable.value,
                    min=variable.min,
                    max=variable.max,
                )
            )
        return views

    def ending_for(self, state: PlaythroughState) -> EndingDef | None:
        if not state.completed:
            return None
        return resolve_ending(self._story.config.endings, state.variables, state.achievements)

    def _guard_entry(self, state: PlaythroughState) -> None:
        if state.transitioning:
            raise TransitionInProgressError("A transition is already in progress.")
        if state.completed:
            raise PlaythroughCompleteError(f"Playthrough of '{state.story_id}' is complete.")

    def _match_edge(
        self, state: PlaythroughState, scene: SceneDef, choice_id: str, target_id: str
    ) -> ChoiceDef | None:
        if not scene.choices:
            edges = resolve_outgoing(scene)
            if choice_id != CONTINUE_CHOICE_ID or not edges or edges[0].target_id != target_id:
                raise InvalidChoiceError(
                    f"Scene '{scene.id}' cannot continue to '{target_id}'."
                )
            return None
        choice = next((candidate for candidate in scene.choices if candidate.id == choice_id), None)
        if choice is None:
            raise InvalidChoiceError(f"Scene '{scene.id}' has no choice '{choice_id}'.")
        if choice.next_scene != target_id:
            raise InvalidChoiceError(
                f"Choice '{choice_id}' in scene '{scene.id}' leads to '{choice.next_scene}', "
                f"not '{target_id}'."
            )
        if not self._choice_unlocked(state, choice):
            raise ChoiceLockedError(f"Choice '{choice_id}' in scene '{scene.id}' is locked.")
        return choice

    def _choice_unlocked(self, state: PlaythroughState, choice: ChoiceDef) -> bool:
        if not conditions_met(choice.conditions, state.variables, state.achievements):
            return False
        if is_terminal(choice.next_scene):
            return True
        target = self._story.scenes.get(choice.next_scene)
        if target is None:
            return True
        return conditions_met(target.conditions, state.variables, state.achievements)

    @staticmethod
    def _apply_variable_deltas(state: PlaythroughState, deltas: Dict[str, int]) -> Dict[str, int]:
        changes: Dict[str, int] = {}
        for name, delta in deltas.items():
            variable = state.variables.get(name)
            if variable is None:
                # Undeclared variables are created on first use.
                variable = StoryVariableDef(value=0)
                state.variables[name] = variable
            variable.value += delta
            changes[name] = variable.value
        return changes

    @staticmethod
    def _unlock_achievements(state: PlaythroughState, achievements: List[str]) -> List[str]:
        unlocked: List[str] = []
        for achievement in achievements:
            if achievement not in state.achievements:
                state.achievements.append(achievement)
                unlocked.append(achievement)
        return unlocked

    def _commit_advance(self, state: PlaythroughState, target_id: str) -> None:
        state.current_scene = target_id
        state.history.append(target_id)
        if is_terminal(target_id):
            state.completed = True
            ending = self.ending_for(state)
            state.ending_id = ending.id if ending else None
            logger.debug("Playthrough of '%s' completed (ending=%s)", state.story_id, state.ending_id)
            return
        logger.debug("Advanced '%s' to '%s'", state.story_id, target_id)

    @staticmethod
    def _commit_retreat(state: PlaythroughState) -> None:
        if len(state.history) <= 1:
            return
        state.history.pop()
        state.current_scene = state.history[-1]
        logger.debug("Retreated '%s' to '%s'", state.story_id, state.current_scene)
