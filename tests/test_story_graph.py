from storygraph.domain.story_graph import OutgoingEdge, is_terminal, resolve_outgoing, slugify_title
from tests.helpers.story_builders import choice, scene


def test_resolve_outgoing_prefers_choices() -> None:
    node = scene("start", choice("a", "one"), choice("b", "end"), next_scene="ignored")

    assert resolve_outgoing(node) == [OutgoingEdge("a", "one"), OutgoingEdge("b", "end")]


def test_resolve_outgoing_falls_back_to_next_scene() -> None:
    assert resolve_outgoing(scene("linear", next_scene="after")) == [OutgoingEdge(None, "after")]


def test_resolve_outgoing_dead_end_and_missing_scene() -> None:
    assert resolve_outgoing(scene("dead_end")) == []
    assert resolve_outgoing(None) == []


def test_is_terminal_only_for_end_sentinel() -> None:
    assert is_terminal("end")
    assert not is_terminal("End")
    assert not is_terminal("ending")
    assert not is_terminal(None)


def test_slugify_title_collapses_runs() -> None:
    assert slugify_title("Digital Whispers") == "digital-whispers"
    assert slugify_title("Crown  of -- Destiny!") == "crown-of-destiny-"
    assert slugify_title("Chapter 2: The Return") == "chapter-2-the-return"
