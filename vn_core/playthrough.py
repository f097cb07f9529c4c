from typing import List, Optional

from vn_core.data_models import Choice, GameState, Script, ScriptNode
from vn_core.graph import get_node, get_start_node, resolve_next


def start_game(script: Script) -> GameState:
    start = script.start_node_id
    node = get_start_node(script)
    return GameState(
        current_node_id=start,
        history=[start],
        is_ended=node is None or node.type == "end",
    )


def advance_game(script: Script, state: GameState, next_node_id: Optional[str]) -> GameState:
    """Move the cursor; an unknown target counts as the end of the story."""
    node = get_node(script, next_node_id)
    return GameState(
        current_node_id=next_node_id,
        history=state.history + [next_node_id or ""],
        is_ended=node is None or node.type == "end",
    )


def current_node(script: Script, state: GameState) -> Optional[ScriptNode]:
    return get_node(script, state.current_node_id)


def continue_game(script: Script, state: GameState) -> GameState:
    """Follow a dialogue node's continuation."""
    node = current_node(script, state)
    if node is None or state.is_ended:
        return state
    return advance_game(script, state, resolve_next(node))


def available_choices(script: Script, state: GameState) -> List[Choice]:
    node = current_node(script, state)
    if node is None or node.type != "choice":
        return []
    return list(node.choices or [])
