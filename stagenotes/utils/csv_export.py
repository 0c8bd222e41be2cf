"""CSV rendering for a board's notes."""

from typing import Iterable, List

from stagenotes.config import settings
from stagenotes.schemas.note import NoteOut

CSV_HEADERS = ["Text", "Type", "Votes", "Date"]


def export_sort_key(note: NoteOut):
    """Most votes first, newest first among equals."""
    return (-note.votes, -note.created_at.timestamp())


def notes_to_csv(notes: Iterable[NoteOut], date_format: str = None) -> str:
    """
    Render notes as CSV, one row per note in the order given.

    The text column is always quoted with embedded quotes doubled; the other
    columns never contain a comma or quote.
    """
    date_format = date_format or settings.EXPORT_DATE_FORMAT
    rows: List[str] = [",".join(CSV_HEADERS)]
    for note in notes:
        text = note.text.replace('"', '""')
        rows.append(",".join([
            f'"{text}"',
            note.type.value,
            str(note.votes),
            note.created_at.strftime(date_format),
        ]))
    return "\n".join(rows)
