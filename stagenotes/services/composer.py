"""
Note submission flow.

A composer is the thing an attendee types into. Each one owns its own
``RateLimiter``; the registry hands out one composer per device, board and
composer variant so unrelated clients never throttle each other.
"""

import logging
from collections import OrderedDict
from typing import Dict, Optional, Tuple

from stagenotes.errors import RateLimitedError, ValidationError
from stagenotes.schemas.note import NoteOut
from stagenotes.services.board_store import BoardStore
from stagenotes.utils.content_filter import contains_profanity
from stagenotes.utils.rate_limit import RateLimiter

logger = logging.getLogger(__name__)


class NoteComposer:
    def __init__(self, limiter: RateLimiter):
        self.limiter = limiter

    async def submit(
        self,
        store: BoardStore,
        board_id: str,
        text: str,
        note_type: str,
        author: Optional[str] = None,
    ) -> NoteOut:
        """Filter, throttle, then create. Only a successful create counts as an action."""
        if contains_profanity(text or ""):
            raise ValidationError("Text contains unwanted words")

        if not self.limiter.can_perform_action():
            wait_ms = self.limiter.get_time_until_next_action()
            logger.info(f"Throttled note on board {board_id}, {wait_ms:.0f} ms left")
            raise RateLimitedError(wait_ms)

        note = await store.create_note(board_id, text, note_type, author)
        self.limiter.record_action()
        return note


class ComposerRegistry:
    """
    Composers keyed by (device_id, board_id, variant).

    ``intervals`` maps each known variant ("desktop", "mobile") to its
    minimum interval in milliseconds.
    """

    def __init__(self, intervals: Dict[str, int], max_entries: int = 5000):
        self.intervals = intervals
        self.max_entries = max_entries
        self._composers: "OrderedDict[Tuple[str, str, str], NoteComposer]" = OrderedDict()

    def composer_for(self, device_id: str, board_id: str, variant: str = "desktop") -> NoteComposer:
        if variant not in self.intervals:
            raise ValidationError(f"Unknown composer '{variant}'")

        key = (device_id, board_id, variant)
        composer = self._composers.get(key)
        if composer is None:
            composer = NoteComposer(RateLimiter(self.intervals[variant]))
            self._composers[key] = composer
            self._prune()
        else:
            self._composers.move_to_end(key)
        return composer

    def _prune(self) -> None:
        # Composers whose limiter has expired hold no state worth keeping
        if len(self._composers) <= self.max_entries:
            return
        for key in list(self._composers):
            if len(self._composers) <= self.max_entries:
                break
            if self._composers[key].limiter.can_perform_action():
                del self._composers[key]
        # Everything still throttled: drop the least recently used
        while len(self._composers) > self.max_entries:
            self._composers.popitem(last=False)

    def __len__(self) -> int:
        return len(self._composers)
