"""Note model — a single Question or Idea attached to a board."""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from stagenotes.database import Base
from stagenotes.models.board import _new_id, _utcnow

MAX_TEXT_LENGTH = 240
MAX_AUTHOR_LENGTH = 50


class NoteType(str, enum.Enum):
    Question = "Question"
    Idea = "Idea"


class Note(Base):
    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    board_id: Mapped[str] = mapped_column(
        ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True
    )
    text: Mapped[str] = mapped_column(String(MAX_TEXT_LENGTH), nullable=False)
    type: Mapped[NoteType] = mapped_column(Enum(NoteType), nullable=False)
    author: Mapped[Optional[str]] = mapped_column(String(MAX_AUTHOR_LENGTH))
    # Only ever changed through BoardStore.cast_vote.
    votes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
