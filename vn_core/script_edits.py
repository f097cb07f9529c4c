# -*- coding: utf-8 -*-
"""
Structured (non-text) edits of a Script, as done from the node/character panels.
Every function returns a new Script with updatedAt bumped; inputs are left untouched.
"""
from typing import Any, Optional

from vn_core.data_models import (
    DEFAULT_BG, DEFAULT_SCENE_NAME, DEFAULT_TITLE,
    Character, Choice, Scene, Script, ScriptNode, new_id, now_ms,
)

NEW_NODE_TEXT = "新对话..."
NARRATOR_NAME = "旁白"


def _touch(script: Script) -> Script:
    s = script.model_copy(deep=True)
    s.updated_at = now_ms()
    return s


def _index_of(items, item_id: str) -> int:
    for i, it in enumerate(items):
        if it.id == item_id:
            return i
    return -1


def set_title(script: Script, title: str) -> Script:
    s = _touch(script)
    s.title = title
    return s


def add_node(script: Script, after_node_id: Optional[str] = None) -> Script:
    """
    Insert a fresh dialogue node. When inserted after an existing node it takes
    over that node's ``next`` and the previous node now points at it.
    """
    s = _touch(script)
    node = ScriptNode(
        id=new_id("node"),
        type="dialogue",
        scene_id=s.scenes[0].id if s.scenes else None,
        speaker=s.characters[0].id if s.characters else None,
        text=NEW_NODE_TEXT,
    )
    idx = _index_of(s.nodes, after_node_id) if after_node_id else -1
    if idx >= 0:
        prev = s.nodes[idx]
        node.next = prev.next
        prev.next = node.id
        s.nodes.insert(idx + 1, node)
    else:
        s.nodes.append(node)
    if not s.start_node_id:
        s.start_node_id = node.id
    return s


def update_node(script: Script, node_id: str, **patch: Any) -> Script:
    s = _touch(script)
    idx = _index_of(s.nodes, node_id)
    if idx >= 0:
        data = s.nodes[idx].model_dump()
        data.update(patch)
        s.nodes[idx] = ScriptNode.model_validate(data)
    return s


def set_choice_target(script: Script, node_id: str, index: int, target: str) -> Script:
    s = _touch(script)
    idx = _index_of(s.nodes, node_id)
    if idx >= 0:
        choices = s.nodes[idx].choices or []
        if 0 <= index < len(choices):
            choices[index].next = target
    return s


def add_choice(script: Script, node_id: str, label: str, target: str = "") -> Script:
    s = _touch(script)
    idx = _index_of(s.nodes, node_id)
    if idx >= 0 and s.nodes[idx].type == "choice":
        node = s.nodes[idx]
        node.choices = (node.choices or []) + [Choice(label=label, next=target)]
    return s


def add_choice_branch(script: Script, node_id: str) -> Script:
    """
    Turn a node into a choice (if it is not one yet) and give it one more
    option leading to a freshly inserted dialogue node.
    """
    s = add_node(script, node_id)
    idx = _index_of(s.nodes, node_id)
    if idx < 0:
        return s
    node, branch = s.nodes[idx], s.nodes[idx + 1]
    branch.next = None
    node.type = "choice"
    node.next = None
    return add_choice(s, node_id, f"选项 {len(node.choices or []) + 1}", branch.id)


def set_choice_label(script: Script, node_id: str, index: int, label: str) -> Script:
    s = _touch(script)
    idx = _index_of(s.nodes, node_id)
    if idx >= 0:
        choices = s.nodes[idx].choices or []
        if 0 <= index < len(choices):
            choices[index].label = label
    return s


def remove_choice(script: Script, node_id: str, index: int) -> Script:
    """Drop one option; a choice left without options becomes a dialogue node."""
    s = _touch(script)
    idx = _index_of(s.nodes, node_id)
    if idx >= 0:
        node = s.nodes[idx]
        node.choices = [c for i, c in enumerate(node.choices or []) if i != index]
        if not node.choices:
            node.type = "dialogue"
    return s


def delete_node(script: Script, node_id: str) -> Script:
    """Remove a node and every edge that pointed at it."""
    s = _touch(script)
    nodes = []
    for n in s.nodes:
        if n.id == node_id:
            continue
        if n.next == node_id:
            n.next = None
        if n.choices:
            n.choices = [c for c in n.choices if c.next != node_id]
        nodes.append(n)
    s.nodes = nodes
    if s.start_node_id == node_id:
        s.start_node_id = nodes[0].id if nodes else ""
    return s


def add_character(script: Script, name: str, color: str) -> Script:
    s = _touch(script)
    s.characters.append(Character(id=new_id("char"), name=name, color=color))
    return s


def update_character(script: Script, char_id: str, **patch: Any) -> Script:
    s = _touch(script)
    idx = _index_of(s.characters, char_id)
    if idx >= 0:
        s.characters[idx] = s.characters[idx].model_copy(update=patch)
    return s


def delete_character(script: Script, char_id: str) -> Script:
    s = _touch(script)
    s.characters = [c for c in s.characters if c.id != char_id]
    return s


def add_scene(script: Script, name: str, background: str = DEFAULT_BG) -> Script:
    s = _touch(script)
    s.scenes.append(Scene(id=new_id("scene"), name=name, background=background))
    return s


def update_scene(script: Script, scene_id: str, **patch: Any) -> Script:
    s = _touch(script)
    idx = _index_of(s.scenes, scene_id)
    if idx >= 0:
        s.scenes[idx] = s.scenes[idx].model_copy(update=patch)
    return s


def delete_scene(script: Script, scene_id: str) -> Script:
    s = _touch(script)
    s.scenes = [sc for sc in s.scenes if sc.id != scene_id]
    return s


def new_script() -> Script:
    ts = now_ms()
    node_id = new_id("node")
    return Script(
        id=new_id(),
        title=DEFAULT_TITLE,
        characters=[Character(id="char-narrator", name=NARRATOR_NAME, color="#6366f1")],
        scenes=[Scene(id="scene-default", name=DEFAULT_SCENE_NAME, background=DEFAULT_BG)],
        nodes=[ScriptNode(
            id=node_id, type="dialogue", scene_id="scene-default",
            speaker="char-narrator", text="故事从这里开始...",
        )],
        start_node_id=node_id,
        created_at=ts,
        updated_at=ts,
    )


def is_blank_placeholder(script: Script) -> bool:
    return script.title == DEFAULT_TITLE and len(script.nodes) <= 1


# ===================== Demo =====================

def _say(nid, scene, speaker, text, nxt):
    return ScriptNode(id=nid, type="dialogue", scene_id=scene, speaker=speaker, text=text, next=nxt)


def _end(nid, scene, text):
    return ScriptNode(id=nid, type="end", scene_id=scene, text=text)


def create_demo_script() -> Script:
    ts = now_ms()
    scenes = [
        Scene(id="scene-night", name="深夜书房", background=DEFAULT_BG),
        Scene(id="scene-dawn", name="黎明窗前",
              background="linear-gradient(135deg, #f093fb 0%, #f5576c 50%, #4facfe 100%)"),
        Scene(id="scene-forest", name="幽暗森林",
              background="linear-gradient(135deg, #134e5e 0%, #71b280 100%)"),
        Scene(id="scene-end", name="真相之地",
              background="linear-gradient(135deg, #0c0c0c 0%, #1a1a3e 50%, #000 100%)"),
    ]
    characters = [
        Character(id="char-narrator", name=NARRATOR_NAME, color="#6366f1"),
        Character(id="char-alice", name="爱丽丝", color="#ec4899"),
        Character(id="char-shadow", name="影子", color="#8b5cf6"),
    ]
    nodes = [
        _say("demo-n0", "scene-night", "char-narrator",
             "深夜，书房中蜡烛无风自灭。爱丽丝发现桌上多了一封陌生的信件。", "demo-n1"),
        _say("demo-n1", "scene-night", "char-alice", "（颤抖着打开信封）这……这是什么？", "demo-n2"),
        _say("demo-n2", "scene-night", "char-narrator", "信纸上只写了一行字——「你的记忆是假的。」", "demo-n3"),
        _say("demo-n3", "scene-night", "char-alice", "谁……谁写的？这不可能是真的。", "demo-n4"),
        ScriptNode(
            id="demo-n4", type="choice", scene_id="scene-night", speaker="char-alice",
            text="我应该怎么做？",
            choices=[Choice(label="立刻去找警察", next="demo-n5"),
                     Choice(label="独自追查真相", next="demo-n8")],
        ),
        # route A
        _say("demo-n5", "scene-dawn", "char-narrator",
             "天刚破晓，爱丽丝赶到警察局。然而警官看了看信纸，轻描淡写地说——", "demo-n6"),
        _say("demo-n6", "scene-dawn", "char-narrator",
             "「女士，这只是一个玩笑。」爱丽丝望着窗外渐亮的天空，心里明白——有些真相，体制帮不了你。", "demo-n7"),
        _end("demo-n7", "scene-dawn", "结局 A：爱丽丝选择相信体制，却永远带着那个疑问入眠。"),
        # route B
        _say("demo-n8", "scene-forest", "char-narrator", "爱丽丝循着信封上的墨迹气味，走进了城郊的幽暗森林。", "demo-n9"),
        _say("demo-n9", "scene-forest", "char-narrator", "树影深处，一个与爱丽丝一模一样的身影站在那里。", "demo-n10"),
        _say("demo-n10", "scene-forest", "char-shadow", "终于来了。我等你很久了……另一个我。", "demo-n11"),
        ScriptNode(
            id="demo-n11", type="choice", scene_id="scene-forest", speaker="char-alice",
            text="你……你是谁？",
            choices=[Choice(label="「我相信你，告诉我真相。」", next="demo-n12"),
                     Choice(label="「你是幻觉，我不会上当。」", next="demo-n14")],
        ),
        _say("demo-n12", "scene-end", "char-shadow",
             "我是你被抹去的那部分记忆。我们原本是一个人——在那场事故之后，他们把我们分开了。", "demo-n13"),
        _end("demo-n13", "scene-end", "结局 B：爱丽丝与影子合而为一，找回了完整的自己。真相，有时比遗忘更沉重。"),
        _say("demo-n14", "scene-forest", "char-shadow", "（叹气）好吧。等你想起来的那天……记得回来找我。", "demo-n15"),
        _end("demo-n15", "scene-forest", "结局 C：爱丽丝独自走出森林，那个影子消散在晨雾里。遗忘，也是一种选择。"),
    ]
    return Script(
        id="demo-script",
        title="记忆碎片",
        characters=characters,
        scenes=scenes,
        nodes=nodes,
        start_node_id="demo-n0",
        created_at=ts,
        updated_at=ts,
    )
