"""
In-process change feed for notes.

Every committed note mutation is published here, per board, as a
``NoteChange``. Consumers hold an explicit ``Subscription`` and tear it down
with a single ``close()``.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Dict, List

from stagenotes.schemas.note import NoteOut

logger = logging.getLogger(__name__)


class ChangeType(str, enum.Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class NoteChange:
    """A note snapshot: the new value for INSERT/UPDATE, the old one for DELETE."""
    type: ChangeType
    note: NoteOut


_CLOSED = object()


class Subscription:
    """
    One consumer's queue of changes for one board.

    Iterate it with ``async for``. ``close()`` stops delivery at once, drops
    anything still queued and ends the iteration.
    """

    def __init__(self, feed: "NoteChangeFeed", board_id: str):
        self.board_id = board_id
        self.closed = False
        self._feed = feed
        self._queue: asyncio.Queue = asyncio.Queue()

    def deliver(self, change: NoteChange) -> None:
        if not self.closed:
            self._queue.put_nowait(change)

    def pending(self) -> int:
        return self._queue.qsize()

    def __aiter__(self):
        return self

    async def __anext__(self) -> NoteChange:
        if self.closed:
            raise StopAsyncIteration
        change = await self._queue.get()
        if change is _CLOSED or self.closed:
            raise StopAsyncIteration
        return change

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._feed._remove(self)
        while not self._queue.empty():
            self._queue.get_nowait()
        # wake a consumer blocked in __anext__
        self._queue.put_nowait(_CLOSED)


class NoteChangeFeed:
    def __init__(self):
        # Maps board_id to its open subscriptions
        self.subscriptions: Dict[str, List[Subscription]] = {}

    def subscribe(self, board_id: str) -> Subscription:
        subscription = Subscription(self, board_id)
        self.subscriptions.setdefault(board_id, []).append(subscription)
        logger.debug(f"Subscribed to board {board_id} ({len(self.subscriptions[board_id])} open)")
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        board_id = subscription.board_id
        if board_id in self.subscriptions:
            if subscription in self.subscriptions[board_id]:
                self.subscriptions[board_id].remove(subscription)
            if not self.subscriptions[board_id]:
                del self.subscriptions[board_id]

    def publish(self, board_id: str, change: NoteChange) -> int:
        """Hand ``change`` to every open subscription of the board; returns how many."""
        subscribers = list(self.subscriptions.get(board_id, []))
        for subscription in subscribers:
            subscription.deliver(change)
        return len(subscribers)
