# A tiny pub/sub event bus to keep layers decoupled.
# Besides callbacks, subscribers may hold a queue that is drained once per
# frame, so world changes reach a display as an ordered changelist.
from collections import deque
from itertools import count
from typing import Callable, Deque, Dict, List

class EventBus:
    def __init__(self) -> None:
        self._subs: Dict[str, List[Callable]] = {}
        self._queues: Dict[int, Deque] = {}
        self._ids = count(1)

    def on(self, topic: str, fn: Callable):
        self._subs.setdefault(topic, []).append(fn)

    def emit(self, topic: str, *args, **kwargs):
        for fn in self._subs.get(topic, []):
            fn(*args, **kwargs)

    def subscribe(self) -> int:
        sub_id = next(self._ids)
        self._queues[sub_id] = deque()
        return sub_id

    def unsubscribe(self, sub_id: int) -> None:
        self._queues.pop(sub_id, None)

    def post(self, event) -> None:
        for q in self._queues.values():
            q.append(event)

    def get(self, sub_id: int) -> list:
        """Return and clear everything posted since the last call, in order."""
        q = self._queues.get(sub_id)
        if q is None:
            return []
        events = list(q)
        q.clear()
        return events
