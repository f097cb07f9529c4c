import pathlib
import sys

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

import pytest

from vn_core import session as session_mod
from vn_core.channel import TextChannel
from vn_core.script_edits import create_demo_script, set_title
from vn_core.serializer import script_to_text
from vn_core.session import EditorSession


class FakeClock:
    def __init__(self):
        self.t = 0.0

    def __call__(self):
        return self.t


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def editor(clock):
    return EditorSession(create_demo_script(), debounce_ms=350, clock=clock)


def test_initial_text_is_serialized_script(editor):
    assert editor.text == script_to_text(editor.script)
    assert editor.diagnostics == []
    assert not editor.pending


def test_rebuild_waits_for_debounce(editor, clock):
    before = editor.script
    editor.edit("# 新故事\n\nA：x\nB：y")
    assert editor.pending
    clock.t = 0.2
    assert editor.poll() is False
    assert editor.script is before

    clock.t = 0.35
    assert editor.poll() is True
    assert editor.script.title == "新故事"
    assert [n.text for n in editor.script.nodes] == ["x", "y"]
    assert not editor.pending


def test_new_edit_restarts_the_wait(editor, clock):
    editor.edit("A：1")
    clock.t = 0.3
    editor.edit("A：2")
    clock.t = 0.4
    assert editor.poll() is False
    clock.t = 0.65
    assert editor.poll() is True
    assert editor.script.nodes[0].text == "2"


def test_typed_text_is_not_replaced_by_its_serialization(editor):
    typed = "# 故事\n// 作者备注\nA：x\n\n\nB：y"
    editor.edit(typed)
    editor.flush()
    assert editor.text == typed
    assert len(editor.script.nodes) == 2


def test_guard_is_single_shot(editor):
    editor.edit("# 故事\n// 备注\nA：x")
    editor.flush()
    demo = create_demo_script()
    editor.load_script(demo)
    assert editor.text == script_to_text(demo)


def test_structured_edit_resyncs_text(editor):
    editor.apply(set_title, "改过的标题")
    assert editor.script.title == "改过的标题"
    assert editor.text.split("\n")[0] == "# 改过的标题"


def test_failed_rebuild_keeps_last_graph(editor, monkeypatch):
    good = editor.script

    def boom(text, previous=None):
        raise RuntimeError("内部错误")

    monkeypatch.setattr(session_mod, "parse_text", boom)
    editor.edit("A：x")
    assert editor.flush() is False
    assert editor.script is good
    assert editor.error == "内部错误"
    assert editor.text == "A：x"

    monkeypatch.undo()
    assert editor.flush() is True
    assert editor.error == ""


def test_channel_append_and_replace(clock):
    channel = TextChannel()
    editor = EditorSession(create_demo_script(), channel=channel, clock=clock)
    original_text = editor.text

    channel.append("\n\n新角色：新的一句")
    assert editor.text == original_text + "\n\n新角色：新的一句"
    assert editor.pending
    clock.t = 1.0
    assert editor.poll() is True
    assert editor.script.nodes[-1].text == "新的一句"
    assert "新角色" in [c.name for c in editor.script.characters]

    channel.replace("# 重写\n\n旁白")
    editor.flush()
    assert editor.text == "# 重写\n\n旁白"
    assert editor.script.title == "重写"

    editor.close()
    channel.replace("不会被收到")
    assert editor.text == "# 重写\n\n旁白"


def test_listeners_and_diagnostics(editor):
    seen = []
    editor.on_script_changed(seen.append)
    editor.edit("? 问题\n> 选A")
    editor.flush()
    assert seen == [editor.script]
    assert len(editor.diagnostics) == 1


def test_tokens_follow_text_without_debounce(editor):
    editor.edit("A：x\n> y")
    assert [t.type for t in editor.tokens] == ["dialogue", "choice_option"]


def test_failing_listener_does_not_leave_resync_skipped(editor):
    def boom(script):
        raise RuntimeError("listener failed")

    editor.on_script_changed(boom)
    editor.edit("A：typed")
    with pytest.raises(RuntimeError):
        editor.flush()
    assert editor.text == "A：typed"

    editor._listeners.clear()
    demo = create_demo_script()
    editor.load_script(demo)
    assert editor.text == script_to_text(demo)
