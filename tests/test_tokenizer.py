import pathlib
import sys

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from vn_core.tokenizer import classify_line, split_speaker, tokenize


def test_one_token_per_line_with_indices():
    tokens = tokenize("A：x\n\n// note\nB：y\n")
    assert [t.type for t in tokens] == ["dialogue", "empty", "comment", "dialogue", "empty"]
    assert [t.line_index for t in tokens] == [0, 1, 2, 3, 4]
    assert tokenize("") == [classify_line("", 0)]


def test_speaker_prefix_boundary():
    t = classify_line("Bob: hi")
    assert (t.type, t.speaker, t.text) == ("dialogue", "Bob", "hi")

    long_line = "This is a really long label here: text"
    t = classify_line(long_line)
    assert t.type == "dialogue"
    assert t.speaker is None
    assert t.text == long_line


def test_fullwidth_colon_and_cjk_names():
    t = classify_line("  爱丽丝：（颤抖着）这是什么？ ")
    assert t.speaker == "爱丽丝"
    assert t.text == "（颤抖着）这是什么？"


def test_prefix_with_space_is_narration():
    t = classify_line("a b: c")
    assert t.speaker is None
    assert t.text == "a b: c"


def test_leading_colon_is_narration():
    assert split_speaker("：开头就是冒号") == (None, "：开头就是冒号")


def test_markers_take_precedence_over_speaker():
    assert classify_line("# Bob: hi").type == "scene"
    assert classify_line("# Bob: hi").text == "Bob: hi"
    assert classify_line("> 选A").text == "选A"
    assert classify_line("// Bob: hi").text == "// Bob: hi"


def test_scene_option_and_prompt():
    scene = classify_line("#   第一章 ")
    assert (scene.type, scene.text) == ("scene", "第一章")

    option = classify_line(">立刻去找警察")
    assert (option.type, option.text) == ("choice_option", "立刻去找警察")

    prompt = classify_line("? 问题")
    assert (prompt.type, prompt.text, prompt.speaker) == ("choice_prompt", "问题", None)


def test_choice_prompt_with_speaker():
    t = classify_line("? 爱丽丝：我应该怎么做？")
    assert t.type == "choice_prompt"
    assert t.speaker == "爱丽丝"
    assert t.text == "我应该怎么做？"


def test_end_keyword():
    assert classify_line("END 结局 A").text == "结局 A"
    assert classify_line("end").type == "end"
    assert classify_line("end").text == ""
    assert classify_line("END结局").text == "结局"

    t = classify_line("ENDING soon")
    assert t.type == "dialogue"
    assert t.text == "ENDING soon"


def test_comment_keeps_prefix():
    t = classify_line("   // 这是注释  ")
    assert (t.type, t.text) == ("comment", "// 这是注释")


def test_tokenize_is_pure():
    text = "# S\nA：x\n? Q\n> a"
    assert tokenize(text) == tokenize(text)
