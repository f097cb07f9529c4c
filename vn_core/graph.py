"""Read-only lookups over a built Script, used by the play-through renderer."""
from typing import Optional

from vn_core.data_models import Character, Scene, Script, ScriptNode


def get_node(script: Script, node_id: Optional[str]) -> Optional[ScriptNode]:
    return next((n for n in script.nodes if n.id == node_id), None)


def get_character(script: Script, char_id: Optional[str]) -> Optional[Character]:
    return next((c for c in script.characters if c.id == char_id), None)


def get_scene(script: Script, scene_id: Optional[str]) -> Optional[Scene]:
    return next((s for s in script.scenes if s.id == scene_id), None)


def get_start_node(script: Script) -> Optional[ScriptNode]:
    return get_node(script, script.start_node_id)


def resolve_next(node: ScriptNode) -> Optional[str]:
    # choice nodes are walked through choices[i].next; end nodes stop
    if node.type == "dialogue":
        return node.next or None
    return None
