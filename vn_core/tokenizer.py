"""
Line tokenizer for the script text syntax.

    # 场景名            scene heading, switches the scene of later nodes
    角色名：台词        dialogue with a speaker (ASCII ':' works too)
    旁白内容            narration (dialogue without a speaker)
    ? 提示语            opens a choice node
    > 选项文字          option of the most recent choice node
    END 结局描述        end node
    // 注释             comment, ignored by the builder
    (blank line)        ignored by the builder

Every line yields exactly one token; lines that fit no rule become narration.
"""
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

SCENE = "scene"
DIALOGUE = "dialogue"
CHOICE_PROMPT = "choice_prompt"
CHOICE_OPTION = "choice_option"
END = "end"
COMMENT = "comment"
EMPTY = "empty"

END_PAT = re.compile(r"^END\b", re.IGNORECASE | re.ASCII)
END_PREFIX_PAT = re.compile(r"^END\s*", re.IGNORECASE)
COLON_PAT = re.compile(r"[：:]")
SPEAKER_NAME_PAT = re.compile(r"^[\u4e00-\u9fa5a-zA-Z0-9_·]{1,15}$")
MAX_SPEAKER_PREFIX = 20


@dataclass(frozen=True)
class LineToken:
    line_index: int  # 0-based source line
    type: str
    text: str
    speaker: Optional[str] = None


def split_speaker(line: str) -> Tuple[Optional[str], str]:
    """
    Split "名字：内容" into (speaker, text). Returns (None, line) when the
    prefix before the first colon is empty, too long, or not a plain name
    (timestamps, URLs, sentences containing spaces...).
    """
    m = COLON_PAT.search(line)
    if m and 0 < m.start() < MAX_SPEAKER_PREFIX:
        speaker = line[:m.start()].strip()
        if SPEAKER_NAME_PAT.match(speaker):
            return speaker, line[m.end():].strip()
    return None, line


def classify_line(line: str, line_index: int = 0) -> LineToken:
    trimmed = line.strip()

    if not trimmed:
        return LineToken(line_index, EMPTY, "")
    if trimmed.startswith("//"):
        return LineToken(line_index, COMMENT, trimmed)
    if trimmed.startswith("#"):
        return LineToken(line_index, SCENE, trimmed[1:].strip())
    if trimmed.startswith(">"):
        return LineToken(line_index, CHOICE_OPTION, trimmed[1:].strip())
    if trimmed.startswith("?"):
        speaker, text = split_speaker(trimmed[1:].strip())
        return LineToken(line_index, CHOICE_PROMPT, text, speaker)
    if END_PAT.match(trimmed):
        return LineToken(line_index, END, END_PREFIX_PAT.sub("", trimmed, count=1).strip())

    speaker, text = split_speaker(trimmed)
    return LineToken(line_index, DIALOGUE, text, speaker)


def tokenize(text: str) -> List[LineToken]:
    return [classify_line(line, i) for i, line in enumerate((text or "").split("\n"))]
