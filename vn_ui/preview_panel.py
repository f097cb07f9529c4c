import streamlit as st

from vn_core.graph import get_character, get_scene
from vn_core.playthrough import (
    advance_game, available_choices, continue_game, current_node, start_game,
)


def render_preview_panel():
    st.header("▶️ 试玩")
    script = st.session_state.editor.script

    col1, col2 = st.columns(2)
    with col1:
        if st.button("🎬 从头开始"):
            st.session_state.game_state = start_game(script)
    with col2:
        if st.button("⏹ 结束试玩"):
            st.session_state.game_state = None

    state = st.session_state.game_state
    if state is None:
        st.caption("点击「从头开始」预览当前剧本。")
        return

    node = current_node(script, state)
    if node is None:
        st.info("— 故事结束 —")
        return

    scene = get_scene(script, node.scene_id)
    char = get_character(script, node.speaker)
    if scene:
        st.caption(f"📍 {scene.name}")
    if char:
        st.markdown(f"<span style='color:{char.color};font-weight:600'>{char.name}</span>", unsafe_allow_html=True)
    st.write(node.text)

    if node.type == "end":
        st.success("🏁 结局")
    elif node.type == "choice":
        choices = available_choices(script, state)
        if not choices:
            st.info("（没有选项）")
        for i, c in enumerate(choices):
            if st.button(c.label, key=f"play_choice_{node.id}_{i}"):
                st.session_state.game_state = advance_game(script, state, c.next)
                st.rerun()
    elif st.button("继续 ▶"):
        st.session_state.game_state = continue_game(script, state)
        st.rerun()

    st.caption(f"已访问 {len(state.history)} 个节点")
