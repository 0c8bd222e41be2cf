"""
Board view — one live viewing session of a board.

Holds the reconciled note list, the change subscription that feeds it and
the vote guard for the viewing device. Once closed it never changes again.
"""

from typing import AsyncIterator, Iterable, Optional, Set

from stagenotes.models.note import NoteType
from stagenotes.schemas.board import BoardOut
from stagenotes.schemas.note import NoteOut
from stagenotes.services.board_store import BoardStore
from stagenotes.services.change_feed import NoteChange, NoteChangeFeed, Subscription
from stagenotes.services.reconciler import NoteReconciler, SortMode


class BoardView:
    def __init__(self, board: BoardOut, subscription: Subscription, device_id: Optional[str]):
        self.board = board
        self.subscription = subscription
        self.device_id = device_id
        self.reconciler = NoteReconciler()
        self.voted: Set[str] = set()
        self.voting: Set[str] = set()

    @property
    def closed(self) -> bool:
        return self.subscription.closed

    def load(self, notes: Iterable[NoteOut], voted_ids: Iterable[str] = ()) -> None:
        self.reconciler.load(notes)
        self.voted = set(voted_ids)

    def apply(self, change: NoteChange) -> None:
        if not self.closed:
            self.reconciler.apply(change)

    async def changes(self) -> AsyncIterator[NoteChange]:
        """Apply each incoming change to the view, then yield it."""
        async for change in self.subscription:
            if self.closed:
                break
            self.apply(change)
            yield change

    def has_note(self, note_id: str) -> bool:
        return any(n.id == note_id for n in self.reconciler.notes)

    # ── Voting ──

    def can_vote(self, note_id: str) -> bool:
        return note_id not in self.voted and note_id not in self.voting

    def begin_vote(self, note_id: str) -> bool:
        """Claim the vote control for ``note_id``; False if already voted or in flight."""
        if self.closed or not self.can_vote(note_id):
            return False
        self.voting.add(note_id)
        return True

    def finish_vote(self, note_id: str, votes: int) -> None:
        self.voting.discard(note_id)
        if self.closed:
            return
        self.voted.add(note_id)
        self.reconciler.apply_vote(note_id, votes)

    def abort_vote(self, note_id: str) -> None:
        self.voting.discard(note_id)

    def close(self) -> None:
        self.subscription.close()

    def snapshot(self, note_filter: Optional[NoteType] = None, sort: SortMode = SortMode.Popular) -> dict:
        return {
            "type": "notes",
            "board": self.board.model_dump(mode="json"),
            "filter": note_filter.value if note_filter else "All",
            "sort": sort.value,
            "total": len(self.reconciler.notes),
            "notes": [n.model_dump(mode="json") for n in self.reconciler.view(note_filter, sort)],
            "voted": sorted(self.voted),
        }


async def open_board_view(
    store: BoardStore,
    feed: NoteChangeFeed,
    code: str,
    device_id: Optional[str],
) -> BoardView:
    """
    Look the board up, subscribe, then seed from a bulk read.

    Subscribing first means nothing committed during the read is missed;
    anything delivered twice is absorbed by the reconciler.
    """
    board = await store.get_board_by_code(code)
    subscription = feed.subscribe(board.id)
    try:
        notes = await store.list_notes(board.id)
        voted_ids = await store.voted_note_ids(board.id, device_id) if device_id else set()
    except Exception:
        subscription.close()
        raise

    view = BoardView(board, subscription, device_id)
    view.load(notes, voted_ids)
    return view
