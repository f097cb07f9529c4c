import time
import uuid
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

PRESET_COLORS = [
    "#6366f1", "#8b5cf6", "#ec4899", "#ef4444",
    "#f97316", "#eab308", "#22c55e", "#14b8a6", "#3b82f6",
]

DEFAULT_BG = "linear-gradient(135deg, #1a1a2e 0%, #16213e 50%, #0f3460 100%)"
DEFAULT_SCENE_NAME = "默认场景"
DEFAULT_TITLE = "未命名故事"
END_PLACEHOLDER = "故事结束"

NodeType = Literal["dialogue", "choice", "end"]


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id(prefix: str = "") -> str:
    token = uuid.uuid4().hex[:12]
    return f"{prefix}-{token}" if prefix else token


class _Model(BaseModel):
    # JSON keys are camelCase, attributes snake_case
    model_config = ConfigDict(populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Character(_Model):
    id: str
    name: str
    color: str


class Scene(_Model):
    id: str
    name: str
    background: str


class Choice(_Model):
    label: str
    next: str


class ScriptNode(_Model):
    id: str
    type: NodeType
    scene_id: Optional[str] = Field(default=None, alias="sceneId")
    speaker: Optional[str] = None          # Character.id
    text: str
    next: Optional[str] = None             # dialogue only
    choices: Optional[List[Choice]] = None  # choice only


class Script(_Model):
    id: str
    title: str
    characters: List[Character]
    scenes: List[Scene]
    nodes: List[ScriptNode]
    start_node_id: str = Field(alias="startNodeId")
    created_at: int = Field(alias="createdAt")
    updated_at: int = Field(alias="updatedAt")


class GameState(_Model):
    current_node_id: Optional[str] = Field(default=None, alias="currentNodeId")
    history: List[str] = Field(default_factory=list)
    is_ended: bool = Field(default=False, alias="isEnded")
