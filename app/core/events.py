import logging
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

SESSION_ENDED = "session-ended"


class SessionEvents:
    """Synchronous publish/subscribe channel shared by the stores of one client"""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[], None]]] = {}

    def subscribe(self, event: str, handler: Callable[[], None]) -> None:
        self._subscribers.setdefault(event, []).append(handler)

    def emit(self, event: str) -> None:
        for handler in list(self._subscribers.get(event, [])):
            try:
                handler()
            except Exception as e:
                logger.error(f"Handler for {event} failed: {str(e)}")
