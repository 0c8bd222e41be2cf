"""
Note Feed Reconciler — the locally cached note list of one board view.

Change events can arrive twice or out of order across clients, so every
merge is keyed on the note id and is idempotent.
"""

import enum
from typing import Iterable, List, Optional

from stagenotes.models.note import NoteType
from stagenotes.schemas.note import NoteOut
from stagenotes.services.change_feed import ChangeType, NoteChange


class SortMode(str, enum.Enum):
    Popular = "Popular"
    Recent = "Recent"


def _popular_key(note: NoteOut):
    return (note.votes, note.created_at)


def _recent_key(note: NoteOut):
    return note.created_at


def visible_notes(
    notes: Iterable[NoteOut],
    note_filter: Optional[NoteType] = None,
    sort: SortMode = SortMode.Popular,
) -> List[NoteOut]:
    """Filter by category (``None`` keeps all) and sort, newest first on ties."""
    shown = [n for n in notes if note_filter is None or n.type == note_filter]
    key = _popular_key if sort == SortMode.Popular else _recent_key
    return sorted(shown, key=key, reverse=True)


def parse_filter(value: Optional[str]) -> Optional[NoteType]:
    """``"All"`` / empty → no filter; anything else must be a note type."""
    if not value or value == "All":
        return None
    return NoteType(value)


class NoteReconciler:
    def __init__(self, notes: Iterable[NoteOut] = ()):
        self.notes: List[NoteOut] = list(notes)

    def load(self, notes: Iterable[NoteOut]) -> None:
        self.notes = list(notes)

    def _index(self, note_id: str) -> Optional[int]:
        for i, note in enumerate(self.notes):
            if note.id == note_id:
                return i
        return None

    def apply(self, change: NoteChange) -> None:
        note = change.note
        index = self._index(note.id)

        if change.type == ChangeType.INSERT:
            if index is None:
                self.notes.insert(0, note)
        elif change.type == ChangeType.UPDATE:
            if index is not None:
                self.notes[index] = note
        elif change.type == ChangeType.DELETE:
            if index is not None:
                del self.notes[index]

    def apply_vote(self, note_id: str, votes: int) -> None:
        """Overwrite with the server-confirmed count; never increment locally."""
        index = self._index(note_id)
        if index is not None:
            self.notes[index] = self.notes[index].model_copy(update={"votes": votes})

    def view(self, note_filter: Optional[NoteType] = None, sort: SortMode = SortMode.Popular) -> List[NoteOut]:
        return visible_notes(self.notes, note_filter, sort)
