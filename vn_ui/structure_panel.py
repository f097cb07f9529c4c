import random

import streamlit as st

from vn_core.data_models import DEFAULT_BG, PRESET_COLORS
from vn_core.graph import get_character, get_node
from vn_core.script_edits import (
    add_character, add_choice_branch, add_node, add_scene, delete_character, delete_node,
    delete_scene, remove_choice, set_choice_label, set_title, update_character,
    update_node, update_scene,
)

NODE_TYPE_LABEL = {"dialogue": "对话", "choice": "选项", "end": "结局"}
NODE_TYPES = list(NODE_TYPE_LABEL)


def _node_label(script, node) -> str:
    char = get_character(script, node.speaker)
    who = f"{char.name}：" if char else ""
    start = "▶ " if node.id == script.start_node_id else ""
    return f"{start}[{NODE_TYPE_LABEL[node.type]}] {who}{node.text[:30] or '(空)'}"


def render_structure_panel():
    editor = st.session_state.editor
    script = editor.script

    with st.form(key="title_form"):
        title = st.text_input("故事标题", value=script.title)
        if st.form_submit_button("💾 更新标题") and title.strip() and title != script.title:
            editor.apply(set_title, title.strip())

    col_list, col_node = st.columns([2, 3])
    with col_list:
        _render_node_list(editor)
    with col_node:
        _render_node_editor(editor)

    st.markdown("---")
    col_char, col_scene = st.columns(2)
    with col_char:
        _render_characters(editor)
    with col_scene:
        _render_scenes(editor)


# ===================== nodes =====================

def _render_node_list(editor):
    script = editor.script
    st.subheader("🧩 节点列表")
    ids = [n.id for n in script.nodes]
    selected = st.session_state.get("selected_node_id")
    if selected not in ids:
        selected = ids[0] if ids else None

    if ids:
        selected = st.radio(
            "节点",
            ids,
            index=ids.index(selected),
            format_func=lambda nid: _node_label(script, get_node(script, nid)),
            label_visibility="collapsed",
        )
    st.session_state.selected_node_id = selected

    col_add, col_del = st.columns(2)
    with col_add:
        if st.button("➕ 添加节点"):
            after = selected
            editor.apply(add_node, after)
            if after:
                idx = [n.id for n in editor.script.nodes].index(after)
                st.session_state.selected_node_id = editor.script.nodes[idx + 1].id
            else:
                st.session_state.selected_node_id = editor.script.nodes[-1].id
            st.rerun()
    with col_del:
        can_delete = selected is not None and selected != script.start_node_id
        if st.button("🗑️ 删除节点", disabled=not can_delete):
            editor.apply(delete_node, selected)
            st.session_state.selected_node_id = None
            st.rerun()


def _render_node_editor(editor):
    script = editor.script
    node = get_node(script, st.session_state.get("selected_node_id"))
    if node is None:
        st.caption("选择一个节点开始编辑")
        return

    st.subheader("✏️ 节点")
    st.caption(node.id)

    scene_ids = [""] + [sc.id for sc in script.scenes]
    scene_names = {"": "— 无场景 —", **{sc.id: sc.name for sc in script.scenes}}
    char_ids = [""] + [c.id for c in script.characters]
    char_names = {"": "— 无旁白 —", **{c.id: c.name for c in script.characters}}
    other_ids = [""] + [n.id for n in script.nodes if n.id != node.id]
    other_names = {"": "— 故事结束 —"}
    other_names.update({n.id: _node_label(script, n) for n in script.nodes})

    with st.form(key=f"node_form_{node.id}"):
        node_type = st.selectbox(
            "节点类型", NODE_TYPES, index=NODE_TYPES.index(node.type),
            format_func=lambda t: NODE_TYPE_LABEL[t],
        )
        scene_id = st.selectbox(
            "场景", scene_ids,
            index=scene_ids.index(node.scene_id) if node.scene_id in scene_ids else 0,
            format_func=lambda x: scene_names.get(x, x),
        )
        speaker = st.selectbox(
            "说话角色", char_ids,
            index=char_ids.index(node.speaker) if node.speaker in char_ids else 0,
            format_func=lambda x: char_names.get(x, x),
        )
        text = st.text_area("结局描述" if node.type == "end" else "对话内容", value=node.text, height=120)
        nxt = st.selectbox(
            "下一节点", other_ids,
            index=other_ids.index(node.next) if node.next in other_ids else 0,
            format_func=lambda x: other_names.get(x, x),
            disabled=node.type != "dialogue",
        )
        if st.form_submit_button("💾 保存节点"):
            patch = {
                "type": node_type,
                "scene_id": scene_id or None,
                "speaker": None if node_type == "end" else (speaker or None),
                "text": text,
            }
            if node_type == "dialogue":
                patch["next"] = nxt or None
            editor.apply(update_node, node.id, **patch)
            st.rerun()

    if node.type == "choice":
        st.markdown("**选项列表**")
        for idx, choice in enumerate(node.choices or []):
            if st.button(f"✕ {choice.label}", key=f"rm_choice_{node.id}_{idx}"):
                editor.apply(remove_choice, node.id, idx)
                st.rerun()
        if node.choices:
            with st.form(key=f"choice_labels_{node.id}"):
                labels = [
                    st.text_input(f"选项 {idx + 1}", value=choice.label)
                    for idx, choice in enumerate(node.choices)
                ]
                if st.form_submit_button("💾 保存选项文字"):
                    for idx, (label, choice) in enumerate(zip(labels, node.choices)):
                        if label.strip() and label != choice.label:
                            editor.apply(set_choice_label, node.id, idx, label.strip())
                    st.rerun()
        else:
            st.caption("点击「添加选项」创建分支")

    if node.type in ("dialogue", "choice"):
        button = "➕ 添加选项" if node.type == "choice" else "➕ 转换为选项节点"
        if st.button(button, key=f"branch_{node.id}"):
            editor.apply(add_choice_branch, node.id)
            st.rerun()


# ===================== characters & scenes =====================

def _render_characters(editor):
    st.subheader("🎨 角色")
    for char in editor.script.characters:
        col_name, col_color, col_del = st.columns([3, 1, 1])
        with col_name:
            name = st.text_input("名字", value=char.name, key=f"char_name_{char.id}", label_visibility="collapsed")
            if name.strip() and name != char.name:
                editor.apply(update_character, char.id, name=name.strip())
        with col_color:
            color = st.color_picker("颜色", value=char.color, key=f"color_{char.id}", label_visibility="collapsed")
            if color != char.color:
                editor.apply(update_character, char.id, color=color)
        with col_del:
            if st.button("🗑️", key=f"del_char_{char.id}"):
                editor.apply(delete_character, char.id)
                st.rerun()

    with st.form(key="add_char_form", clear_on_submit=True):
        new_name = st.text_input("新角色名字")
        if st.form_submit_button("➕ 添加角色") and new_name.strip():
            editor.apply(add_character, new_name.strip(), random.choice(PRESET_COLORS))
            st.rerun()


def _render_scenes(editor):
    st.subheader("🏞️ 场景")
    for scene in editor.script.scenes:
        with st.expander(scene.name, expanded=False):
            with st.form(key=f"scene_form_{scene.id}"):
                name = st.text_input("名称", value=scene.name, key=f"scene_name_{scene.id}")
                background = st.text_input("背景（CSS）", value=scene.background, key=f"scene_bg_{scene.id}")
                if st.form_submit_button("💾 保存") and name.strip():
                    editor.apply(update_scene, scene.id, name=name.strip(), background=background or DEFAULT_BG)
                    st.rerun()
            if st.button("🗑️ 删除场景", key=f"del_scene_{scene.id}"):
                editor.apply(delete_scene, scene.id)
                st.rerun()

    with st.form(key="add_scene_form", clear_on_submit=True):
        new_name = st.text_input("新场景名称")
        if st.form_submit_button("➕ 添加场景") and new_name.strip():
            editor.apply(add_scene, new_name.strip())
            st.rerun()
