import streamlit as st

from vn_core.channel import TextChannel
from vn_core.env_loader import configure_logging, init_model, load_settings, quiet_logs
from vn_core.graph import get_node
from vn_core.project_io import JsonFileStore, load_current_script
from vn_core.session import EditorSession

from vn_ui.sidebar import render_sidebar
from vn_ui.editor_panel import render_editor_panel
from vn_ui.structure_panel import render_structure_panel
from vn_ui.ai_panel import render_ai_panel
from vn_ui.preview_panel import render_preview_panel

quiet_logs()
settings = load_settings()
configure_logging(settings.log_level)
st.set_page_config(page_title="VN Script Studio", page_icon="🎭", layout="wide")


def _drop_stale_playthrough(script):
    state = st.session_state.get("game_state")
    if state is not None and get_node(script, state.current_node_id) is None:
        st.session_state.game_state = None


# Session init
if "store" not in st.session_state:
    st.session_state.store = JsonFileStore(settings.data_dir)
if "channel" not in st.session_state:
    st.session_state.channel = TextChannel()
if "editor" not in st.session_state:
    st.session_state.editor = EditorSession(
        load_current_script(st.session_state.store),
        channel=st.session_state.channel,
        debounce_ms=settings.debounce_ms,
    )
    st.session_state.editor.on_script_changed(_drop_stale_playthrough)
if "game_state" not in st.session_state:
    st.session_state.game_state = None

model_name = render_sidebar(settings)
api_key = settings.api_key
model = init_model(api_key, model_name) if api_key else None

st.title("🎭 VN Script Studio — 分支剧本编辑器")

tab_edit, tab_nodes, tab_ai, tab_play = st.tabs(["✍️ 剧本", "🧩 节点与角色", "✨ AI 辅助", "▶️ 试玩"])
with tab_edit:
    render_editor_panel()
with tab_nodes:
    render_structure_panel()
with tab_ai:
    render_ai_panel(model)
with tab_play:
    render_preview_panel()
