"""Shared CLI rendering helpers."""
from __future__ import annotations

import os
import textwrap
from typing import Iterable, Sequence

from storygraph.services.layout_service import StoryLayout
from storygraph.services.playthrough_service import EndView, SceneView, VariableView

_TEXT_WIDTH = 78
_PROGRESS_WIDTH = 20


def debug_enabled() -> bool:
    """Return True only when STORYGRAPH_DEBUG is explicitly set to '1'."""
    return os.getenv("STORYGRAPH_DEBUG") == "1"


def wrap_paragraphs(text: str, width: int = _TEXT_WIDTH) -> list[str]:
    """Wrap text on word boundaries, keeping blank-line paragraph breaks."""
    lines: list[str] = []
    for paragraph in text.split("\n\n"):
        if lines:
            lines.append("")
        lines.extend(
            textwrap.wrap(paragraph, width=width, break_long_words=False, break_on_hyphens=False)
            or [""]
        )
    return lines


def render_heading(title: str) -> None:
    """Print a consistent section heading."""
    print(f"\n=== {title} ===")


def progress_bar(fraction: float, width: int = _PROGRESS_WIDTH) -> str:
    filled = round(min(max(fraction, 0.0), 1.0) * width)
    return "[" + "#" * filled + "-" * (width - filled) + f"] {fraction:.0%}"


def render_variables(variables: Sequence[VariableView]) -> None:
    if not variables:
        return
    parts = []
    for variable in variables:
        bounds = ""
        if variable.min is not None or variable.max is not None:
            low = "" if variable.min is None else str(variable.min)
            high = "" if variable.max is None else str(variable.max)
            bounds = f" ({low}..{high})"
        parts.append(f"{variable.display_name}: {variable.value}{bounds}")
    print(" | ".join(parts))


def render_scene(view: SceneView) -> None:
    """Render the current scene with its numbered options."""
    render_heading(view.title or view.scene_id)
    if debug_enabled():
        print(f"[{view.scene_id}]")
    for line in wrap_paragraphs(view.text):
        print(line)
    print()
    print(progress_bar(view.progress))
    render_variables(view.variables)
    options = [choice.text for choice in view.choices]
    if view.continue_target is not None:
        options.append("Continue")
    render_menu("Choices", options)
    extras = []
    if view.can_go_back:
        extras.append("b = back")
    extras.append("q = quit")
    print(", ".join(extras))


def render_end(view: EndView) -> None:
    if view.is_error:
        render_heading("Story Error")
        print(view.error_message)
        return
    render_heading("The End")
    if view.ending is not None:
        print(view.ending.name)
        if view.ending.description:
            for line in wrap_paragraphs(view.ending.description):
                print(line)


def render_layout(layout: StoryLayout) -> None:
    render_heading("Nodes")
    for node in layout.nodes:
        marker = "*" if node.selected else " "
        print(f"{marker} {node.id:<24} level={node.level:<3} x={node.x:>7.1f} y={node.y:>7.1f}")
    render_heading("Edges")
    for edge in layout.edges:
        label = f"  [{edge.label}]" if edge.label else ""
        print(f"{edge.source} -> {edge.target}{label}")


def render_menu(title: str, options: Sequence[str]) -> None:
    """Display a menu section with numbered options."""
    render_heading(title)
    for idx, label in enumerate(options, start=1):
        print(f"{idx}. {label}")


def render_bullet_lines(lines: Iterable[str]) -> None:
    """Print bullet-prefixed lines."""
    for line in lines:
        print(f"- {line}")
