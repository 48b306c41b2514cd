"""User-facing status messages raised while scanning."""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

LOGGER = logging.getLogger("contentcatalog.status")


@dataclass(slots=True, frozen=True)
class StatusMessage:
    text: str
    priority: int = 1
    duration: int = 180


class StatusQueue:
    """Bounded priority queue of status messages.

    Higher priorities are pulled first; equal priorities come out in push
    order. When full, the oldest lowest-priority message is dropped.
    """

    def __init__(self, max_messages: int = 64) -> None:
        self._max = max(1, int(max_messages))
        self._heap: List[Tuple[int, int, StatusMessage]] = []
        self._seq = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    @property
    def messages(self) -> List[StatusMessage]:
        return [item[2] for item in sorted(self._heap)]

    def push(self, text: str, priority: int = 1, duration: int = 180, flush: bool = True) -> None:
        message = StatusMessage(text=text.rstrip("\n"), priority=int(priority), duration=int(duration))
        LOGGER.info("%s", message.text)
        if flush:
            self._heap.clear()
        heapq.heappush(self._heap, (-message.priority, next(self._seq), message))
        if len(self._heap) > self._max:
            victim = max(self._heap, key=lambda item: (item[0], -item[1]))
            self._heap.remove(victim)
            heapq.heapify(self._heap)

    def pull(self) -> Optional[StatusMessage]:
        if not self._heap:
            return None
        return heapq.heappop(self._heap)[2]

    def clear(self) -> None:
        self._heap.clear()


__all__ = ["StatusMessage", "StatusQueue"]
