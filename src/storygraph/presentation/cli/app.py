"""Console-driven reader and author tools for storygraph."""
from __future__ import annotations

import argparse
import time
from pathlib import Path
from typing import Callable, Literal, Sequence

from storygraph.core.logging import get_logger, setup_logging
from storygraph.core.types import CONTINUE_CHOICE_ID
from storygraph.data.repositories import InMemoryStoryStore, StoryRepository
from storygraph.domain.defs import StoryDef
from storygraph.domain.state import PlaythroughState
from storygraph.presentation.cli import render
from storygraph.presentation.cli.config import load_config
from storygraph.services import (
    EndView,
    PlaythroughService,
    SceneView,
    build_story_layout,
)
from storygraph.services.story_graph_validator import format_issue, has_errors, validate_story

logger = get_logger(__name__)

ReaderAction = Literal["choice", "back", "quit", "invalid"]
InputFn = Callable[[str], str]
SleepFn = Callable[[float], None]


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments and run the requested command."""
    args = _build_parser().parse_args(argv)
    config = load_config(Path(args.config) if args.config else None)
    setup_logging(str(config["log_level"]))
    store = InMemoryStoryStore(StoryRepository(args.definitions).all())

    if args.command == "layout":
        return _layout_command(store, args.story_id, args.selected)
    if args.command == "check":
        return _check_command(store, args.story_id)
    if args.command == "list":
        _list_command(store)
        return 0

    delay_ms = int(config["transition_delay_ms"])
    include_hidden = bool(config["show_hidden_variables"])
    if args.command == "play":
        story = store.get_story(args.story_id)
        if story is None:
            print(f"Story '{args.story_id}' not found.")
            return 1
        _play_story(story, delay_ms, include_hidden=include_hidden)
        return 0

    print("=== StoryGraph Reader ===")
    while True:
        story = _story_menu_loop(store)
        if story is None:
            break
        _play_story(story, delay_ms, include_hidden=include_hidden)
    print("Goodbye!")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storygraph", description="Play and inspect branching stories.")
    parser.add_argument("--definitions", help="Directory holding story definitions.")
    parser.add_argument("--config", help="Path to a reader config file.")
    commands = parser.add_subparsers(dest="command")
    commands.add_parser("list", help="List stories, most recently updated first.")
    play = commands.add_parser("play", help="Play a story.")
    play.add_argument("story_id")
    layout = commands.add_parser("layout", help="Print the story graph layout.")
    layout.add_argument("story_id")
    layout.add_argument("--selected", help="Scene id to highlight.")
    check = commands.add_parser("check", help="Validate a story graph.")
    check.add_argument("story_id")
    return parser


def _list_command(store: InMemoryStoryStore) -> None:
    render.render_heading("Stories")
    for story in store.list_stories():
        print(f"{story.id}: {story.title} by {story.author} ({store.scene_count(story)} scenes)")


def _layout_command(store: InMemoryStoryStore, story_id: str, selected: str | None) -> int:
    story = store.get_story(story_id)
    if story is None:
        print(f"Story '{story_id}' not found.")
        return 1
    render.render_layout(build_story_layout(story, selected))
    return 0


def _check_command(store: InMemoryStoryStore, story_id: str) -> int:
    story = store.get_story(story_id)
    if story is None:
        print(f"Story '{story_id}' not found.")
        return 1
    issues = validate_story(story)
    if not issues:
        print(f"Story '{story_id}' has no issues.")
        return 0
    render.render_bullet_lines(format_issue(issue) for issue in issues)
    return 1 if has_errors(issues) else 0


def _story_menu_loop(store: InMemoryStoryStore, input_fn: InputFn = input) -> StoryDef | None:
    stories = store.list_stories()
    while True:
        render.render_menu("Stories", [story.title for story in stories] + ["Quit"])
        raw = input_fn("Select a story: ").strip()
        if raw.isdigit():
            index = int(raw) - 1
            if 0 <= index < len(stories):
                return stories[index]
            if index == len(stories):
                return None
        print(f"Invalid selection. Please enter a number from 1 to {len(stories) + 1}.")


def _play_story(
    story: StoryDef,
    delay_ms: int,
    *,
    include_hidden: bool = False,
    input_fn: InputFn = input,
    sleep_fn: SleepFn = time.sleep,
) -> PlaythroughState:
    """Run one playthrough until the end, an error state, or the reader quits."""
    service = PlaythroughService(story, deferred_transitions=True)
    state = service.start()
    logger.info("Playing story '%s'", story.id)
    while True:
        view = service.current_view(state, include_hidden=include_hidden)
        if isinstance(view, EndView):
            render.render_end(view)
            return state
        render.render_scene(view)
        action, index = _parse_reader_input(input_fn("> "), view)
        if action == "quit":
            return state
        if action == "invalid":
            print("Invalid selection.")
            continue
        if action == "back":
            if not service.retreat(state):
                print("You are at the beginning.")
                continue
        else:
            choice_id, target = _reader_edges(view)[index]
            service.advance(state, choice_id, target)
        sleep_fn(delay_ms / 1000)
        service.complete_transition(state)


def _parse_reader_input(raw: str, view: SceneView) -> tuple[ReaderAction, int]:
    value = raw.strip().lower()
    if value == "q":
        return "quit", -1
    if value == "b":
        return ("back", -1) if view.can_go_back else ("invalid", -1)
    if not value.isdigit():
        return "invalid", -1
    index = int(value) - 1
    if 0 <= index < len(_reader_edges(view)):
        return "choice", index
    return "invalid", -1


def _reader_edges(view: SceneView) -> list[tuple[str, str]]:
    """Selectable (choice id, target) pairs in menu order."""
    edges = [(choice.id, choice.next_scene) for choice in view.choices]
    if view.continue_target is not None:
        edges.append((CONTINUE_CHOICE_ID, view.continue_target))
    return edges

