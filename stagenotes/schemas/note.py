"""Note and vote Pydantic schemas."""

from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel

from stagenotes.models.note import NoteType


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back naive; they were written as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class NoteCreate(BaseModel):
    """Fields sent by a composer.

    ``type`` stays a plain string so an unknown category is reported by the
    store as a validation error rather than by FastAPI's request parsing.
    """
    board_id: str
    text: str
    type: str
    author: Optional[str] = None
    composer: str = "desktop"


class NoteOut(BaseModel):
    id: str
    board_id: str
    text: str
    type: NoteType
    author: Optional[str] = None
    votes: int
    created_at: UtcDatetime

    model_config = {"from_attributes": True}


class VoteOut(BaseModel):
    note_id: str
    votes: int


class VotedOut(BaseModel):
    note_id: str
    voted: bool
