import streamlit as st

from vn_core.ai_assist import generate_script_text, rewrite_script_text
from vn_core.gemini_helpers import AssistError


def render_ai_panel(model):
    st.header("✨ AI 辅助")
    editor = st.session_state.editor
    channel = st.session_state.channel

    if model is None:
        st.info("请先在侧边栏填写 GEMINI_API_KEY。")

    mode = st.radio("功能", ["生成剧情", "润色扩写"], horizontal=True)

    if mode == "生成剧情":
        prompt = st.text_area("故事提示", height=120, placeholder="例如：爱丽丝在森林里遇到一位神秘的旅人……")
        if st.button("✨ 生成并追加", disabled=model is None):
            with st.spinner("生成中..."):
                try:
                    generate_script_text(model, prompt, editor.script, channel)
                except AssistError as e:
                    st.error(str(e))
                else:
                    editor.flush()
                    st.success("已追加到编辑器")
    else:
        instruction = st.text_input("额外要求（可选）")
        st.caption("润色会替换当前整个剧本文本。")
        confirm = st.checkbox("我确认替换全文")
        if st.button("🪄 润色", disabled=model is None or not confirm):
            with st.spinner("润色中..."):
                try:
                    rewrite_script_text(model, editor.script, channel, instruction)
                except AssistError as e:
                    st.error(str(e))
                else:
                    editor.flush()
                    st.success("润色完成")
