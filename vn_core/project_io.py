# -*- coding: utf-8 -*-
import io
import json
import logging
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from pydantic import ValidationError

from vn_core.data_models import Script, now_ms
from vn_core.script_edits import create_demo_script, is_blank_placeholder, new_script
from vn_core.serializer import script_to_text
from vn_core.text_utils import _safe_name

logger = logging.getLogger(__name__)

APP_DIR = Path(__file__).resolve().parents[1]
DATA_DIR = APP_DIR / "projects"

CURRENT_SCRIPT_KEY = "current_script"
PROJECTS_KEY = "projects"


class ScriptImportError(Exception):
    pass


class ProjectError(Exception):
    pass


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    def __init__(self):
        self._data: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """One ``<key>.json`` file per key under ``root``."""

    def __init__(self, root: Union[str, Path] = DATA_DIR):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.root / f"{_safe_name(key)}.json"

    def get(self, key: str) -> Optional[Any]:
        f = self._path(key)
        if not f.exists():
            return None
        with f.open("r", encoding="utf-8") as fp:
            return json.load(fp)

    def set(self, key: str, value: Any) -> None:
        f = self._path(key)
        with f.open("w", encoding="utf-8") as fp:
            json.dump(value, fp, ensure_ascii=False, indent=2)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


# ===================== (de)serialization =====================

def parse_script_data(data: Any) -> Script:
    if not isinstance(data, dict):
        raise ScriptImportError("文件内容不是有效的剧本对象")
    try:
        return Script.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()))
        raise ScriptImportError(f"剧本结构无效：{where or '?'} {first.get('msg', '')}".strip()) from e


def parse_script_json(raw: Union[str, bytes]) -> Script:
    """Strict import of a foreign file: all or nothing."""
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ScriptImportError(f"无法解析 JSON：{e}") from e
    return parse_script_data(data)


def export_script_json(script: Script) -> str:
    return json.dumps(script.to_json_dict(), ensure_ascii=False, indent=2)


def export_zip(script: Script) -> bytes:
    mem = io.BytesIO()
    with zipfile.ZipFile(mem, "w", zipfile.ZIP_DEFLATED) as z:
        z.writestr("script.json", export_script_json(script))
        z.writestr("script.txt", script_to_text(script))
    mem.seek(0)
    return mem.read()


def export_file_name(script: Script, ext: str = "json") -> str:
    return f"{_safe_name(script.title) or script.id}.{ext}"


# ===================== current script =====================

def load_current_script(store: KeyValueStore) -> Script:
    try:
        raw = store.get(CURRENT_SCRIPT_KEY)
        if raw:
            script = parse_script_data(raw)
            # an untouched blank script is upgraded to the demo
            if not is_blank_placeholder(script):
                return script
    except (ScriptImportError, ValueError, OSError) as e:
        logger.warning("Stored current script unreadable, using demo: %s", e)
    return create_demo_script()


def save_current_script(store: KeyValueStore, script: Script) -> Script:
    updated = script.model_copy(update={"updated_at": now_ms()})
    store.set(CURRENT_SCRIPT_KEY, updated.to_json_dict())
    return updated


def clear_current_script(store: KeyValueStore) -> None:
    store.delete(CURRENT_SCRIPT_KEY)


# ===================== projects list =====================

def _save_projects(store: KeyValueStore, projects: List[Script]) -> List[Script]:
    store.set(PROJECTS_KEY, [p.to_json_dict() for p in projects])
    return projects


def load_projects(store: KeyValueStore) -> List[Script]:
    """
    Read the projects list. Only a missing key seeds (and writes) the demo; an
    unreadable list or entry is logged and skipped, never written back over.
    """
    try:
        raw = store.get(PROJECTS_KEY)
    except (ValueError, OSError) as e:
        logger.warning("Projects list unreadable, showing demo only: %s", e)
        return [create_demo_script()]
    if raw is None:
        return _save_projects(store, [create_demo_script()])
    if not isinstance(raw, list):
        logger.warning("Projects list is not a list (%s), showing demo only", type(raw).__name__)
        return [create_demo_script()]

    projects = []
    for i, entry in enumerate(raw):
        try:
            projects.append(parse_script_data(entry))
        except ScriptImportError as e:
            logger.warning("Skipping unreadable project #%d: %s", i, e)
    return projects


def upsert_project(store: KeyValueStore, script: Script) -> List[Script]:
    projects = load_projects(store)
    if any(p.id == script.id for p in projects):
        projects = [script if p.id == script.id else p for p in projects]
    else:
        projects = [script] + projects
    return _save_projects(store, projects)


def delete_project(store: KeyValueStore, script_id: str) -> List[Script]:
    projects = load_projects(store)
    if len(projects) <= 1:
        raise ProjectError("至少保留一个项目")
    return _save_projects(store, [p for p in projects if p.id != script_id])


def import_project(store: KeyValueStore, script: Script) -> Script:
    projects = load_projects(store)
    if any(p.id == script.id for p in projects):
        script = script.model_copy(update={
            "id": f"imported-{now_ms()}",
            "title": script.title + "（导入）",
        })
    _save_projects(store, [script] + projects)
    logger.info("Imported project id=%s", script.id)
    return script


def duplicate_project(store: KeyValueStore, script_id: str) -> Optional[Script]:
    projects = load_projects(store)
    src = next((p for p in projects if p.id == script_id), None)
    if src is None:
        return None
    ts = now_ms()
    copy = src.model_copy(deep=True, update={
        "id": f"copy-{ts}",
        "title": src.title + "（副本）",
        "created_at": ts,
        "updated_at": ts,
    })
    _save_projects(store, [copy] + projects)
    return copy


# ===================== switching the open script =====================

def _stash(store: KeyValueStore, current: Script) -> Script:
    stashed = current.model_copy(update={"updated_at": now_ms()})
    upsert_project(store, stashed)
    return stashed


def open_project(store: KeyValueStore, current: Script, target: Script) -> Script:
    """Save the open script into the list, then hand back the script to open."""
    stashed = _stash(store, current)
    # reopening the open script keeps its unsaved edits
    return stashed if target.id == current.id else target


def start_new_project(store: KeyValueStore, current: Script) -> Script:
    _stash(store, current)
    clear_current_script(store)
    fresh = new_script()
    upsert_project(store, fresh)
    return fresh


def remove_project(store: KeyValueStore, script_id: str, current: Script) -> Script:
    """
    Delete a project and return the script that should be open afterwards:
    ``current`` unless it was the one deleted, else the first remaining project.
    """
    remaining = delete_project(store, script_id)
    if current.id != script_id:
        return current
    return remaining[0]
