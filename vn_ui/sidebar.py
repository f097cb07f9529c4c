import streamlit as st

from vn_core.env_loader import (
    StudioSettings, get_key_info, reset_caches_and_rerun, set_runtime_key,
    validate_key_format, write_dotenv_key,
)
from vn_core.project_io import (
    ProjectError, ScriptImportError, duplicate_project, export_file_name,
    export_script_json, export_zip, import_project, load_projects, open_project,
    parse_script_json, remove_project, save_current_script, start_new_project,
    upsert_project,
)


def _open(script):
    st.session_state.editor.load_script(script)
    st.session_state.game_state = None


def render_sidebar(settings: StudioSettings) -> str:
    st.sidebar.title("⚙️ 设置")
    store = st.session_state.store
    editor = st.session_state.editor

    # ============ 🔐 API Key ============
    with st.sidebar.expander("🔐 API Key (GEMINI_API_KEY)", expanded=not settings.api_key):
        st.caption(f"当前：{get_key_info(settings.api_key)}")
        new_key = st.text_input(
            "输入新的 key（点击下方按钮后才生效）",
            type="password",
            placeholder="粘贴 GEMINI_API_KEY…",
            key="api_key_entry_sidebar",
        )
        colK1, colK2 = st.columns(2)
        with colK1:
            if st.button("⚡ 仅本次运行"):
                if not validate_key_format(new_key):
                    st.warning("Key 为空或格式不对。")
                else:
                    set_runtime_key(new_key)
                    reset_caches_and_rerun()
        with colK2:
            if st.button("💾 写入 .env"):
                if not validate_key_format(new_key):
                    st.warning("Key 为空或格式不对。")
                elif write_dotenv_key(new_key):
                    reset_caches_and_rerun()
                else:
                    st.error("无法写入 .env，请检查文件权限。")

    model_name = st.sidebar.selectbox("Model", ["gemini-2.5-flash", "gemini-2.5-pro"])
    custom_model = st.sidebar.text_input("自定义模型", value="", help=f"默认：{settings.model_name}")
    model_name = custom_model or model_name

    # ============ 📁 项目 ============
    st.sidebar.markdown("---")
    st.sidebar.subheader("📁 项目")

    projects = load_projects(store)
    labels = [f"{p.title} · {len(p.nodes)} 节点" for p in projects]
    pick = st.sidebar.selectbox("项目列表", ["(选择)"] + labels)
    picked = projects[labels.index(pick)] if pick != "(选择)" else None

    col1, col2, col3 = st.sidebar.columns(3)
    with col1:
        if st.button("📂 打开", disabled=picked is None):
            _open(open_project(store, editor.script, picked))
            st.sidebar.success(f"已打开：{picked.title}")
    with col2:
        if st.button("📄 复制", disabled=picked is None):
            copy = duplicate_project(store, picked.id)
            if copy:
                st.sidebar.success(f"已复制：{copy.title}")
    with col3:
        if st.button("🗑️ 删除", disabled=picked is None):
            try:
                still_open = remove_project(store, picked.id, editor.script)
            except ProjectError as e:
                st.sidebar.warning(str(e))
            else:
                if still_open.id != editor.script.id:
                    _open(still_open)
                st.sidebar.success("已删除。")

    if st.sidebar.button("💾 保存当前剧本", type="primary"):
        saved = save_current_script(store, editor.script)
        upsert_project(store, saved)
        editor.load_script(saved)
        st.sidebar.success(f"已保存：{saved.title}")

    if st.sidebar.button("🆕 新建剧本"):
        _open(start_new_project(store, editor.script))

    uploaded = st.sidebar.file_uploader("导入 JSON", type=["json"])
    if uploaded is not None and st.sidebar.button("📥 导入"):
        try:
            script = import_project(store, parse_script_json(uploaded.getvalue()))
        except ScriptImportError as e:
            st.sidebar.error(f"导入失败：{e}")
        else:
            _open(script)
            st.sidebar.success(f"已导入：{script.title}")

    st.sidebar.download_button(
        "⬇️ 导出 JSON",
        data=export_script_json(editor.script).encode("utf-8"),
        file_name=export_file_name(editor.script, "json"),
        mime="application/json",
    )
    st.sidebar.download_button(
        "📦 导出 ZIP",
        data=export_zip(editor.script),
        file_name=export_file_name(editor.script, "zip"),
    )

    return model_name
