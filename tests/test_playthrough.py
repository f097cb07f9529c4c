import pathlib
import sys

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from vn_core.builder import parse_text
from vn_core.graph import get_character, get_scene, get_start_node, resolve_next
from vn_core.playthrough import (
    advance_game, available_choices, continue_game, current_node, start_game,
)
from vn_core.script_edits import create_demo_script


def test_walk_demo_route_b():
    demo = create_demo_script()
    state = start_game(demo)
    assert state.current_node_id == "demo-n0"
    assert state.history == ["demo-n0"]

    for _ in range(4):
        state = continue_game(demo, state)
    assert state.current_node_id == "demo-n4"
    labels = [c.label for c in available_choices(demo, state)]
    assert labels == ["立刻去找警察", "独自追查真相"]

    state = advance_game(demo, state, "demo-n8")
    node = current_node(demo, state)
    assert get_scene(demo, node.scene_id).name == "幽暗森林"
    assert get_character(demo, node.speaker).name == "旁白"
    assert not state.is_ended


def test_end_node_finishes():
    demo = create_demo_script()
    state = advance_game(demo, start_game(demo), "demo-n7")
    assert state.is_ended
    assert continue_game(demo, state) == state


def test_dangling_edge_is_an_implicit_end():
    s = parse_text("? 问题\n> 选A")
    state = start_game(s)
    choice = available_choices(s, state)[0]
    state = advance_game(s, state, choice.next)
    assert state.is_ended
    assert current_node(s, state) is None


def test_resolve_next_by_node_type():
    s = parse_text("A：x\n? 问\n> a\nEND")
    dialogue, choice, end = s.nodes
    assert resolve_next(dialogue) == choice.id
    assert resolve_next(choice) is None
    assert resolve_next(end) is None
    assert get_start_node(s) is dialogue
