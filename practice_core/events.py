"""Session event emission"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Literal

logger = logging.getLogger(__name__)

EventKind = Literal[
    "state_changed",
    "message_appended",
    "turn_received",
    "speech_cancelled",
    "scored",
    "completion_failed",
]


@dataclass
class SessionEvent:
    kind: EventKind
    payload: dict = field(default_factory=dict)


Listener = Callable[[SessionEvent], None]


class EventEmitter:
    """Fan-out of session events to listeners

    A failing listener is logged and skipped; it never breaks the session.
    """

    def __init__(self):
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def emit(self, kind: EventKind, **payload) -> None:
        event = SessionEvent(kind=kind, payload=payload)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener failed on %s event", kind)
