import logging
import time
from typing import Callable, List, Optional

from vn_core.builder import parse_text
from vn_core.channel import APPEND, TextChannel, TextUpdate
from vn_core.data_models import Script
from vn_core.serializer import script_to_text
from vn_core.tokenizer import LineToken, tokenize
from vn_core.validator import validate_script

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 350


class EditorSession:
    """
    Keeps the editable text and the script graph in sync.

    Text edits are rebuilt into a graph after ``debounce_ms`` of quiet (see
    ``poll``). Graph changes that did not come from the text (loading a project,
    panel edits) re-derive the text with the serializer. A rebuild marks its own
    commit with a one-shot flag so the typed text is not replaced by its
    serialization.
    """

    def __init__(
        self,
        script: Script,
        channel: Optional[TextChannel] = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.script = script
        self.text = script_to_text(script)
        self.error = ""
        self.diagnostics: List[str] = validate_script(script)
        self.debounce_s = max(0, debounce_ms) / 1000.0
        self._clock = clock
        self._deadline: Optional[float] = None
        self._skip_resync = False
        self._listeners: List[Callable[[Script], None]] = []
        self._unsubscribe = channel.subscribe(self._on_text_update) if channel else None

    # ---------- text side ----------

    @property
    def tokens(self) -> List[LineToken]:
        # highlighting runs on every keystroke, no debounce
        return tokenize(self.text)

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    def edit(self, text: str) -> None:
        self.text = text
        self._deadline = self._clock() + self.debounce_s

    def append_text(self, text: str) -> None:
        self.edit(self.text + text)

    def replace_text(self, text: str) -> None:
        self.edit(text)

    def _on_text_update(self, update: TextUpdate) -> None:
        if update.kind == APPEND:
            self.append_text(update.text)
        else:
            self.replace_text(update.text)

    def poll(self) -> bool:
        """Rebuild if the debounce window has passed. Returns True when a new graph was accepted."""
        if self._deadline is None or self._clock() < self._deadline:
            return False
        return self.flush()

    def flush(self) -> bool:
        self._deadline = None
        try:
            built = parse_text(self.text, self.script)
        except Exception as e:
            self.error = str(e) or "解析错误"
            logger.warning("Rebuild failed, keeping last graph: %s", self.error)
            return False
        self.error = ""
        self._skip_resync = True
        self._commit(built)
        return True

    # ---------- graph side ----------

    def on_script_changed(self, callback: Callable[[Script], None]) -> None:
        self._listeners.append(callback)

    def load_script(self, script: Script) -> None:
        self.error = ""
        self._commit(script)

    def apply(self, edit_fn: Callable[..., Script], *args, **kwargs) -> Script:
        """Run a structured edit (see script_edits) against the current graph."""
        self._commit(edit_fn(self.script, *args, **kwargs))
        return self.script

    def _commit(self, script: Script) -> None:
        # consume the one-shot flag before any listener runs
        resync = not self._skip_resync
        self._skip_resync = False
        self.script = script
        self.diagnostics = validate_script(script)
        if resync:
            self.text = script_to_text(script)
            self._deadline = None
        for cb in list(self._listeners):
            cb(script)

    def close(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
