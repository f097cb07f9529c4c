import logging
from dataclasses import dataclass
from typing import Callable, List, Literal

logger = logging.getLogger(__name__)

APPEND = "append"
REPLACE = "replace"


@dataclass(frozen=True)
class TextUpdate:
    kind: Literal["append", "replace"]
    text: str


Listener = Callable[[TextUpdate], None]


class TextChannel:
    """
    Text updates from collaborators (AI generation, imports...) to the editing
    surface. Owned by the host app and handed to both sides explicitly.
    """

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, update: TextUpdate) -> None:
        logger.debug("Text update kind=%s len=%d", update.kind, len(update.text))
        for listener in list(self._listeners):
            listener(update)

    def append(self, text: str) -> None:
        self.publish(TextUpdate(APPEND, text))

    def replace(self, text: str) -> None:
        self.publish(TextUpdate(REPLACE, text))
