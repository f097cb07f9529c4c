import logging
import os
from pathlib import Path

import streamlit as st
from dotenv import find_dotenv, load_dotenv, set_key
from pydantic import BaseModel

from vn_core.project_io import DATA_DIR
from vn_core.session import DEFAULT_DEBOUNCE_MS


class StudioSettings(BaseModel):
    api_key: str = ""
    model_name: str = "gemini-2.5-flash"
    data_dir: Path = DATA_DIR
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    log_level: str = "INFO"


def quiet_logs():
    os.environ.setdefault("GRPC_VERBOSITY", "ERROR")
    os.environ.setdefault("GRPC_CPP_ENABLE_STACKTRACE", "0")
    os.environ.setdefault("GRPC_ALTS_ENABLED", "0")
    try:
        import absl.logging as absl_logging
        absl_logging.set_verbosity(absl_logging.ERROR)
    except ImportError:
        pass


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_env() -> str:
    # Always reload .env so a key written from the sidebar is picked up
    load_dotenv(override=True)
    return os.getenv("GEMINI_API_KEY", "") or os.getenv("GOOGLE_API_KEY", "")


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def load_settings() -> StudioSettings:
    api_key = load_env()
    return StudioSettings(
        api_key=api_key,
        model_name=os.getenv("VN_STUDIO_MODEL", "") or "gemini-2.5-flash",
        data_dir=Path(os.getenv("VN_STUDIO_DATA_DIR", "") or DATA_DIR),
        debounce_ms=_int_env("VN_STUDIO_DEBOUNCE_MS", DEFAULT_DEBOUNCE_MS),
        log_level=os.getenv("VN_STUDIO_LOG_LEVEL", "") or "INFO",
    )


def get_key_info(key: str) -> str:
    if not key:
        return "未设置 key"
    return f"key_len={len(key)} | key_hash={abs(hash(key)) % 100000}"


def validate_key_format(k: str) -> bool:
    return bool(k and k.strip() and " " not in k)


def set_runtime_key(new_key: str):
    """Override the key for the running process only (.env is left alone)."""
    os.environ["GEMINI_API_KEY"] = new_key
    os.environ["GOOGLE_API_KEY"] = new_key


def write_dotenv_key(new_key: str) -> bool:
    try:
        env_path = find_dotenv(usecwd=True)
        if not env_path:
            env_path = os.path.join(os.getcwd(), ".env")
            open(env_path, "a", encoding="utf-8").close()
        set_key(env_path, "GEMINI_API_KEY", new_key)
        set_runtime_key(new_key)
        return True
    except OSError as e:
        logging.getLogger(__name__).warning("Could not write .env: %s", e)
        return False


def reset_caches_and_rerun():
    st.cache_resource.clear()
    st.cache_data.clear()
    st.rerun()


@st.cache_resource(show_spinner=False)
def init_model(api_key: str, model_name: str):
    if not api_key:
        return None
    try:
        import google.generativeai as genai
    except ImportError as e:
        raise RuntimeError(f"未安装 google-generativeai: {e}")
    genai.configure(api_key=api_key)
    return genai.GenerativeModel(model_name)
