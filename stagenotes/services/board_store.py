"""
Board store — boards, notes and votes on top of async SQLAlchemy.

This is the only code that touches the database. Every committed note
mutation is published to the change feed so open board views can follow
along.
"""

import logging
from contextlib import contextmanager
from typing import List, Optional, Set

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stagenotes.config import settings
from stagenotes.errors import ExternalStoreError, LockedError, NotFoundError, ValidationError
from stagenotes.models.board import Board
from stagenotes.models.note import MAX_AUTHOR_LENGTH, MAX_TEXT_LENGTH, Note, NoteType
from stagenotes.models.vote import Vote
from stagenotes.schemas.board import BoardOut
from stagenotes.schemas.note import NoteOut
from stagenotes.services.change_feed import ChangeType, NoteChange, NoteChangeFeed
from stagenotes.utils.board_code import generate_board_code, is_valid_board_code, normalize_board_code
from stagenotes.utils.csv_export import export_sort_key, notes_to_csv

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 100


@contextmanager
def _store_errors(action: str):
    """Turn database failures into ExternalStoreError, logging the cause."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Error {action}: {e}")
        raise ExternalStoreError(f"Error {action}") from e


class BoardStore:
    def __init__(self, db: AsyncSession, feed: NoteChangeFeed):
        self.db = db
        self.feed = feed

    # ═══════════════════════════════════════════════════════════════
    #  Boards
    # ═══════════════════════════════════════════════════════════════

    async def create_board(self, title: str) -> BoardOut:
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title is required")
        if len(title) > MAX_TITLE_LENGTH:
            raise ValidationError(f"Title must be at most {MAX_TITLE_LENGTH} characters")

        # Codes are random, so a collision with an existing board is possible
        for attempt in range(1, settings.BOARD_CODE_ATTEMPTS + 1):
            board = Board(title=title, code=generate_board_code())
            self.db.add(board)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                logger.info(f"Board code {board.code} already taken (attempt {attempt})")
                continue
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(f"Error creating board: {e}")
                raise ExternalStoreError("Error creating board") from e
            logger.info(f"Created board {board.code} ({board.id})")
            return BoardOut.model_validate(board)

        raise ExternalStoreError("Could not allocate a unique board code")

    async def _get_board(self, board_id: str) -> Board:
        with _store_errors("loading board"):
            result = await self.db.execute(select(Board).where(Board.id == board_id))
            board = result.scalar_one_or_none()
        if not board:
            raise NotFoundError("Board not found")
        return board

    async def get_board_by_code(self, code: str) -> BoardOut:
        code = normalize_board_code(code)
        if not code:
            raise ValidationError("Code is required")
        if not is_valid_board_code(code):
            raise ValidationError("Invalid board code")

        with _store_errors("loading board"):
            result = await self.db.execute(select(Board).where(Board.code == code))
            board = result.scalar_one_or_none()
        if not board:
            raise NotFoundError("Board not found")
        return BoardOut.model_validate(board)

    async def set_board_locked(self, board_id: str, locked: bool) -> BoardOut:
        board = await self._get_board(board_id)
        with _store_errors("locking board"):
            board.locked = locked
            await self.db.commit()
        logger.info(f"Board {board.code} {'locked' if locked else 'unlocked'}")
        return BoardOut.model_validate(board)

    async def toggle_board_lock(self, board_id: str) -> BoardOut:
        board = await self._get_board(board_id)
        return await self.set_board_locked(board_id, not board.locked)

    # ═══════════════════════════════════════════════════════════════
    #  Notes
    # ═══════════════════════════════════════════════════════════════

    async def create_note(
        self,
        board_id: str,
        text: str,
        note_type: str,
        author: Optional[str] = None,
    ) -> NoteOut:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Text is required")
        if len(text) > MAX_TEXT_LENGTH:
            raise ValidationError(f"Text must be at most {MAX_TEXT_LENGTH} characters")
        try:
            note_type = NoteType(note_type)
        except ValueError:
            raise ValidationError("Invalid type")
        author = (author or "").strip() or None
        if author and len(author) > MAX_AUTHOR_LENGTH:
            raise ValidationError(f"Name must be at most {MAX_AUTHOR_LENGTH} characters")

        board = await self._get_board(board_id)
        if board.locked:
            logger.info(f"Rejected note for locked board {board.code}")
            raise LockedError()

        with _store_errors("creating note"):
            note = Note(board_id=board_id, text=text, type=note_type, author=author)
            self.db.add(note)
            await self.db.commit()
            await self.db.refresh(note)

        out = NoteOut.model_validate(note)
        self.feed.publish(board_id, NoteChange(ChangeType.INSERT, out))
        return out

    async def list_notes(self, board_id: str) -> List[NoteOut]:
        """All notes of a board, newest first."""
        with _store_errors("fetching notes"):
            result = await self.db.execute(
                select(Note)
                .where(Note.board_id == board_id)
                .order_by(Note.created_at.desc())
            )
            return [NoteOut.model_validate(n) for n in result.scalars().all()]

    async def delete_note(self, note_id: str) -> NoteOut:
        with _store_errors("deleting note"):
            result = await self.db.execute(select(Note).where(Note.id == note_id))
            note = result.scalar_one_or_none()
            if not note:
                raise NotFoundError("Note not found")
            out = NoteOut.model_validate(note)

            await self.db.execute(delete(Vote).where(Vote.note_id == note_id))
            await self.db.delete(note)
            await self.db.commit()

        self.feed.publish(out.board_id, NoteChange(ChangeType.DELETE, out))
        return out

    # ═══════════════════════════════════════════════════════════════
    #  Votes
    # ═══════════════════════════════════════════════════════════════

    async def cast_vote(self, note_id: str, device_id: str) -> int:
        """
        Record one vote and return the note's new count.

        The vote row and the increment share one transaction. A second vote
        from the same device hits the (note_id, device_id) unique constraint
        and leaves the count as it was.
        """
        if not note_id or not device_id:
            raise ValidationError("Missing parameters")

        with _store_errors("casting vote"):
            result = await self.db.execute(select(Note.id).where(Note.id == note_id))
            if result.scalar_one_or_none() is None:
                raise NotFoundError("Note not found")

            self.db.add(Vote(note_id=note_id, device_id=device_id))
            try:
                await self.db.flush()
            except IntegrityError:
                await self.db.rollback()
                logger.info(f"Duplicate vote on note {note_id} ignored")
                result = await self.db.execute(select(Note.votes).where(Note.id == note_id))
                return result.scalar_one()

            await self.db.execute(
                update(Note)
                .where(Note.id == note_id)
                .values(votes=Note.votes + 1)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()

            result = await self.db.execute(select(Note).where(Note.id == note_id))
            note = result.scalar_one()
            await self.db.refresh(note)

        out = NoteOut.model_validate(note)
        self.feed.publish(out.board_id, NoteChange(ChangeType.UPDATE, out))
        return out.votes

    async def has_voted(self, note_id: str, device_id: str) -> bool:
        with _store_errors("checking vote"):
            result = await self.db.execute(
                select(Vote.id).where(Vote.note_id == note_id, Vote.device_id == device_id)
            )
            return result.scalar_one_or_none() is not None

    async def voted_note_ids(self, board_id: str, device_id: str) -> Set[str]:
        """Ids of the board's notes this device has already voted for."""
        with _store_errors("checking votes"):
            result = await self.db.execute(
                select(Vote.note_id)
                .join(Note, Note.id == Vote.note_id)
                .where(Note.board_id == board_id, Vote.device_id == device_id)
            )
            return set(result.scalars().all())

    # ═══════════════════════════════════════════════════════════════
    #  Export
    # ═══════════════════════════════════════════════════════════════

    async def export_notes_as_csv(self, board_id: str) -> str:
        notes = await self.list_notes(board_id)
        if not notes:
            raise NotFoundError("No notes found")
        return notes_to_csv(sorted(notes, key=export_sort_key))
