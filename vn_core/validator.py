from typing import List

from vn_core.data_models import Script


def validate_script(script: Script) -> List[str]:
    """
    Referential integrity check. Returns one message per dangling edge;
    never raises and never repairs.
    """
    errors: List[str] = []
    node_ids = {n.id for n in script.nodes}

    if script.start_node_id not in node_ids:
        errors.append(f'开始节点 "{script.start_node_id}" 不存在')

    for node in script.nodes:
        if node.next and node.next not in node_ids:
            errors.append(f'节点 "{node.id}" 的 next 指向不存在的节点 "{node.next}"')
        for choice in node.choices or []:
            if choice.next not in node_ids:
                errors.append(
                    f'节点 "{node.id}" 选项 "{choice.label}" 指向不存在的节点 "{choice.next}"'
                )
    return errors
