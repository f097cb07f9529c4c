import pathlib
import sys

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from vn_core.builder import parse_text
from vn_core.script_edits import create_demo_script
from vn_core.validator import validate_script


def test_demo_is_clean():
    assert validate_script(create_demo_script()) == []


def test_dangling_next_is_reported_once():
    s = parse_text("A：x\nB：y")
    s.nodes[1].next = "missing-id"
    errors = validate_script(s)
    assert len(errors) == 1
    assert s.nodes[1].id in errors[0]
    assert "missing-id" in errors[0]


def test_unresolved_choice_targets():
    s = parse_text("? 问题\n> 选A\n> 选B")
    errors = validate_script(s)
    assert len(errors) == 2
    assert "选A" in errors[0]
    assert "选B" in errors[1]


def test_missing_start_node():
    s = parse_text("")
    errors = validate_script(s)
    assert len(errors) == 1

    demo = create_demo_script()
    demo.start_node_id = "nope"
    assert validate_script(demo) == ['开始节点 "nope" 不存在']
