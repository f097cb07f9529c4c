from typing import List, Optional

from vn_core.data_models import DEFAULT_SCENE_NAME, Script


def script_to_text(script: Script) -> str:
    """Render a Script back into editable text (inverse of builder.parse_text)."""
    char_by_id = {c.id: c for c in script.characters}
    scene_by_id = {s.id: s for s in script.scenes}

    lines: List[str] = [f"# {script.title}", ""]
    last_scene_id: Optional[str] = None

    for node in script.nodes:
        if node.scene_id and node.scene_id != last_scene_id:
            scene = scene_by_id.get(node.scene_id)
            if scene and scene.name != DEFAULT_SCENE_NAME:
                lines.append(f"# {scene.name}")
            last_scene_id = node.scene_id

        char = char_by_id.get(node.speaker) if node.speaker else None
        if node.type == "dialogue":
            lines.append(f"{char.name}：{node.text}" if char else node.text)
        elif node.type == "choice":
            lines.append(f"? {char.name}：{node.text}" if char else f"? {node.text}")
            for c in node.choices or []:
                lines.append(f"> {c.label}")
            lines.append("")
        elif node.type == "end":
            lines.append(f"END {node.text}")

    return "\n".join(lines)
