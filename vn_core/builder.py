import logging
from typing import Dict, Iterable, List, Optional, Sequence

from vn_core.data_models import (
    DEFAULT_BG, DEFAULT_SCENE_NAME, DEFAULT_TITLE, END_PLACEHOLDER, PRESET_COLORS,
    Character, Choice, Scene, Script, ScriptNode, new_id, now_ms,
)
from vn_core.tokenizer import (
    CHOICE_OPTION, CHOICE_PROMPT, COMMENT, DIALOGUE, EMPTY, END, SCENE,
    LineToken, tokenize,
)

logger = logging.getLogger(__name__)


class BuildError(Exception):
    pass


def _collect_speakers(tokens: Iterable[LineToken]) -> List[str]:
    names: List[str] = []
    for t in tokens:
        if t.type in (DIALOGUE, CHOICE_PROMPT) and t.speaker and t.speaker not in names:
            names.append(t.speaker)
    return names


def _resolve_characters(names: Sequence[str], previous: Optional[Script]):
    """
    Reuse characters of the previous script by name (same id and color),
    mint the rest with the next preset color. Characters no longer spoken
    by anyone are left out of the result.
    """
    existing = list(previous.characters) if previous else []
    by_name: Dict[str, Character] = {c.name: c for c in existing}
    color_idx = len(existing)
    minted: List[Character] = []
    for name in names:
        if name in by_name:
            continue
        c = Character(
            id=new_id("char"),
            name=name,
            color=PRESET_COLORS[color_idx % len(PRESET_COLORS)],
        )
        color_idx += 1
        by_name[name] = c
        minted.append(c)

    wanted = set(names)
    kept = [c.model_copy() for c in existing if c.name in wanted]
    characters = kept + minted
    return characters, {c.name: c for c in characters}


class _SceneTable:
    """Name -> Scene lookup seeded from the previous script; new scenes are minted lazily."""

    def __init__(self, previous: Optional[Script]):
        self.scenes: List[Scene] = [s.model_copy() for s in previous.scenes] if previous else []
        self._by_name: Dict[str, Scene] = {s.name: s for s in self.scenes}

    def get_or_create(self, name: str) -> Scene:
        scene = self._by_name.get(name)
        if scene is None:
            scene = Scene(id=new_id("scene"), name=name, background=DEFAULT_BG)
            self._by_name[name] = scene
            self.scenes.append(scene)
        return scene

    def default(self) -> Scene:
        if self.scenes:
            return self.scenes[0]
        return self.get_or_create(DEFAULT_SCENE_NAME)


def _chain_dialogue(nodes: List[ScriptNode]) -> None:
    # only dialogue nodes continue to their sequence successor
    for i in range(len(nodes) - 1):
        if nodes[i].type == DIALOGUE:
            nodes[i].next = nodes[i + 1].id


def build_script(
    tokens: Sequence[LineToken],
    title: str = DEFAULT_TITLE,
    previous: Optional[Script] = None,
) -> Script:
    """
    Assemble a Script graph from tokens. ``previous`` only supplies identity
    continuity (script id, createdAt, character and scene ids by name); it is
    never modified.
    """
    characters, char_by_name = _resolve_characters(_collect_speakers(tokens), previous)
    scene_table = _SceneTable(previous)

    nodes: List[ScriptNode] = []
    current_scene_id = scene_table.default().id
    pending_choice: Optional[ScriptNode] = None

    def speaker_id(name: Optional[str]) -> Optional[str]:
        char = char_by_name.get(name) if name else None
        return char.id if char else None

    for token in tokens:
        kind = token.type
        if kind in (EMPTY, COMMENT):
            continue

        if kind == CHOICE_OPTION:
            if pending_choice is not None:
                pending_choice.choices.append(Choice(label=token.text, next=""))
            else:
                logger.debug("Dropped option without prompt at line %d", token.line_index)
            continue

        pending_choice = None

        if kind == SCENE:
            current_scene_id = scene_table.get_or_create(token.text).id
        elif kind == DIALOGUE:
            nodes.append(ScriptNode(
                id=new_id("node"),
                type="dialogue",
                scene_id=current_scene_id,
                speaker=speaker_id(token.speaker),
                text=token.text,
            ))
        elif kind == CHOICE_PROMPT:
            pending_choice = ScriptNode(
                id=new_id("node"),
                type="choice",
                scene_id=current_scene_id,
                speaker=speaker_id(token.speaker),
                text=token.text,
                choices=[],
            )
            nodes.append(pending_choice)
        elif kind == END:
            nodes.append(ScriptNode(
                id=new_id("node"),
                type="end",
                scene_id=current_scene_id,
                text=token.text or END_PLACEHOLDER,
            ))
        else:
            raise BuildError(f"Unknown token type {kind!r} at line {token.line_index + 1}")

    _chain_dialogue(nodes)

    ts = now_ms()
    return Script(
        id=previous.id if previous else new_id(),
        title=title,
        characters=characters,
        scenes=scene_table.scenes,
        nodes=nodes,
        start_node_id=nodes[0].id if nodes else "",
        created_at=previous.created_at if previous else ts,
        updated_at=ts,
    )


def split_title(tokens: Sequence[LineToken], fallback: str = DEFAULT_TITLE):
    """
    The first scene heading of a document is its title, not a scene.
    Returns (title, remaining tokens).
    """
    for i, t in enumerate(tokens):
        if t.type == SCENE:
            return t.text, list(tokens[:i]) + list(tokens[i + 1:])
    return fallback, list(tokens)


def parse_text(text: str, previous: Optional[Script] = None) -> Script:
    fallback = previous.title if previous else DEFAULT_TITLE
    title, body = split_title(tokenize(text), fallback)
    return build_script(body, title, previous)
