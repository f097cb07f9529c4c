import streamlit as st

from vn_core.graph import get_character
from vn_core.script_edits import set_choice_target
from vn_core.tokenizer import (
    CHOICE_OPTION, CHOICE_PROMPT, COMMENT, EMPTY, END, SCENE, LineToken,
)

SYNTAX_HELP = """# 故事标题

// 这是注释行，会被忽略
// 使用 # 切换场景，角色名：台词，? 选项，> 选项文字，END 结局

# 第一章：开始

旁白：深夜，书房中蜡烛摇曳。

爱丽丝：（颤抖着打开信封）这……这是什么？

信纸上写着：「你的记忆是假的。」

? 爱丽丝：我应该怎么做？
> 立刻去找警察
> 独自调查

# 选择警察

警察局的走廊很长。

END 无论如何，真相即将揭晓。
"""


def _esc(s: str) -> str:
    return s.replace("[", "\\[").replace("]", "\\]").replace("*", "\\*").replace("_", "\\_")


def _highlight_line(t: LineToken) -> str:
    if t.type == EMPTY:
        return ""
    if t.type == SCENE:
        return f":blue[**# {_esc(t.text)}**]"
    if t.type == END:
        return f":red[**END {_esc(t.text)}**]"
    if t.type == COMMENT:
        return f":gray[*{_esc(t.text)}*]"
    if t.type == CHOICE_OPTION:
        return f":orange[\\> {_esc(t.text)}]"
    prefix = f"**{_esc(t.speaker)}**：" if t.speaker else ""
    if t.type == CHOICE_PROMPT:
        return f":orange[? {prefix}{_esc(t.text)}]"
    return f"{prefix}{_esc(t.text)}" if t.speaker else f":gray[{_esc(t.text)}]"


def _on_text_change():
    editor = st.session_state.editor
    editor.edit(st.session_state.script_text)
    # streamlit already coalesces keystrokes into one rerun
    editor.flush()


def render_editor_panel():
    editor = st.session_state.editor
    editor.poll()

    col_info, col_help = st.columns([4, 1])
    with col_info:
        st.caption(f"{len(editor.script.nodes)} 个节点 · 《{editor.script.title}》")
    with col_help:
        if st.button("帮助", help="插入语法示例"):
            editor.replace_text(SYNTAX_HELP)
            editor.flush()

    if editor.error:
        st.error(f"⚠ {editor.error}")

    st.session_state.script_text = editor.text
    col_src, col_view = st.columns(2)
    with col_src:
        st.text_area("剧本文本", key="script_text", height=560, on_change=_on_text_change)
        st.caption("# 场景 · 角色：台词 · ? 选项提示 · > 选项A · END 结局")
    with col_view:
        st.markdown("  \n".join(_highlight_line(t) for t in editor.tokens))

    if editor.diagnostics:
        with st.expander(f"🔎 完整性检查（{len(editor.diagnostics)}）", expanded=False):
            for msg in editor.diagnostics:
                st.write(f"- {msg}")

    _render_choice_targets(editor)


def _render_choice_targets(editor):
    script = editor.script
    choice_nodes = [n for n in script.nodes if n.type == "choice" and n.choices]
    if not choice_nodes:
        return
    st.subheader("🔀 选项跳转")
    ids = [""] + [n.id for n in script.nodes]
    names = {"": "（未连接）"}
    for i, n in enumerate(script.nodes, 1):
        char = get_character(script, n.speaker)
        who = f"{char.name}：" if char else ""
        names[n.id] = f"#{i} [{n.type}] {who}{n.text[:24]}"

    for node in choice_nodes:
        st.markdown(f"**? {node.text}**")
        for idx, choice in enumerate(node.choices):
            current = choice.next if choice.next in ids else ""
            target = st.selectbox(
                f"> {choice.label}",
                ids,
                index=ids.index(current),
                format_func=lambda x: names.get(x, x),
                key=f"target_{node.id}_{idx}_{current}",
            )
            if target != current:
                editor.apply(set_choice_target, node.id, idx, target)
