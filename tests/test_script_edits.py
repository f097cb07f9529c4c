import pathlib
import sys

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from vn_core.builder import parse_text
from vn_core.script_edits import (
    NEW_NODE_TEXT, add_character, add_choice, add_choice_branch, add_node, add_scene,
    create_demo_script, remove_choice, set_choice_label, set_title,
    delete_character, delete_node, delete_scene, new_script, set_choice_target,
    update_character, update_node, update_scene,
)
from vn_core.validator import validate_script


def test_add_node_after_splices_chain():
    demo = create_demo_script()
    s = add_node(demo, "demo-n0")
    inserted = s.nodes[1]
    assert inserted.text == NEW_NODE_TEXT
    assert s.nodes[0].next == inserted.id
    assert inserted.next == "demo-n1"
    # input untouched
    assert demo.nodes[0].next == "demo-n1"
    assert len(demo.nodes) == 16


def test_add_node_appends_when_anchor_missing():
    s = add_node(create_demo_script(), "nope")
    assert s.nodes[-1].text == NEW_NODE_TEXT
    assert s.nodes[-1].next is None


def test_delete_node_clears_incoming_edges():
    s = delete_node(create_demo_script(), "demo-n5")
    assert all(n.id != "demo-n5" for n in s.nodes)
    choice = next(n for n in s.nodes if n.id == "demo-n4")
    assert [c.next for c in choice.choices] == ["demo-n8"]
    assert validate_script(s) == []


def test_delete_start_node_moves_start():
    s = delete_node(create_demo_script(), "demo-n0")
    assert s.start_node_id == "demo-n1"


def test_choice_targets():
    s = parse_text("? 去哪\n> 左\n> 右\n左边\n右边")
    choice, left, right = s.nodes
    s = set_choice_target(s, choice.id, 0, left.id)
    s = set_choice_target(s, choice.id, 1, right.id)
    s = set_choice_target(s, choice.id, 5, right.id)
    assert [c.next for c in s.nodes[0].choices] == [left.id, right.id]
    assert validate_script(s) == []

    s = add_choice(s, choice.id, "回头")
    assert [c.label for c in s.nodes[0].choices] == ["左", "右", "回头"]


def test_update_node_patch():
    s = update_node(create_demo_script(), "demo-n1", text="改写", speaker=None)
    node = s.nodes[1]
    assert node.text == "改写"
    assert node.speaker is None
    assert node.next == "demo-n2"


def test_character_and_scene_crud():
    s = add_character(new_script(), "爱丽丝", "#ec4899")
    alice = s.characters[-1]
    assert alice.id.startswith("char-")
    s = update_character(s, alice.id, color="#000000")
    assert s.characters[-1].color == "#000000"
    s = delete_character(s, alice.id)
    assert [c.name for c in s.characters] == ["旁白"]

    s = add_scene(s, "森林")
    forest = s.scenes[-1]
    s = update_scene(s, forest.id, name="黑森林")
    assert s.scenes[-1].name == "黑森林"
    s = delete_scene(s, forest.id)
    assert [sc.id for sc in s.scenes] == ["scene-default"]


def test_new_script_is_valid():
    s = new_script()
    assert validate_script(s) == []
    assert s.nodes[0].id == s.start_node_id


def test_branching_a_dialogue_node():
    s = parse_text("A：去哪？\nA：回家")
    ask, home = s.nodes
    s = add_choice_branch(s, ask.id)
    choice, branch = s.nodes[0], s.nodes[1]
    assert choice.type == "choice"
    assert choice.next is None
    assert [(c.label, c.next) for c in choice.choices] == [("选项 1", branch.id)]
    assert branch.text == NEW_NODE_TEXT
    assert branch.next is None
    assert s.nodes[2].id == home.id

    s = add_choice_branch(s, ask.id)
    assert [c.label for c in s.nodes[0].choices] == ["选项 1", "选项 2"]
    assert validate_script(s) == []


def test_choice_label_and_removal():
    s = parse_text("? 去哪\n> 左\n> 右")
    node_id = s.nodes[0].id
    s = set_choice_label(s, node_id, 1, "向右")
    assert [c.label for c in s.nodes[0].choices] == ["左", "向右"]

    s = remove_choice(s, node_id, 0)
    assert [c.label for c in s.nodes[0].choices] == ["向右"]
    s = remove_choice(s, node_id, 0)
    assert s.nodes[0].type == "dialogue"
    assert s.nodes[0].choices == []


def test_set_title_bumps_timestamp():
    demo = create_demo_script()
    s = set_title(demo, "新标题")
    assert s.title == "新标题"
    assert demo.title == "记忆碎片"
    assert s.updated_at >= demo.updated_at
