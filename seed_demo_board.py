"""
Seed a demo board for manual testing.

    python seed_demo_board.py

Creates board DEM234 with a handful of notes and votes. Running it again
leaves an already seeded board alone.
"""

import asyncio
import random

from sqlalchemy import select

import stagenotes.models  # noqa: F401
from stagenotes.database import Base, async_session, engine
from stagenotes.errors import BoardError
from stagenotes.models.board import Board
from stagenotes.services.board_store import BoardStore
from stagenotes.services.change_feed import NoteChangeFeed

DEMO_CODE = "DEM234"
DEMO_TITLE = "Demo presentation - Product launch Q&A"

DEMO_NOTES = [
    ("When will the new version be released?", "Question", "Sarah"),
    ("Could we add a dark mode?", "Idea", "Mike"),
    ("How will pricing work for small teams?", "Question", "Tom"),
    ("A mobile app would make this much easier to use on the go", "Idea", "Anna"),
    ("Is there an API for integrations?", "Question", "Dev Team"),
    ("Add keyboard shortcuts for power users", "Idea", None),
]


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        store = BoardStore(db, NoteChangeFeed())

        result = await db.execute(select(Board).where(Board.code == DEMO_CODE))
        board = result.scalar_one_or_none()
        if board is None:
            board = Board(code=DEMO_CODE, title=DEMO_TITLE)
            db.add(board)
            await db.commit()
            print(f"Created demo board {DEMO_CODE}")
        elif await store.list_notes(board.id):
            print(f"Demo board {DEMO_CODE} already has notes")
            return

        for text, note_type, author in DEMO_NOTES:
            note = await store.create_note(board.id, text, note_type, author)
            # 2-5 votes per note from distinct demo devices
            for i in range(random.randint(2, 5)):
                await store.cast_vote(note.id, f"demo-device-{i}-{note.id[:8]}")

        print(f"Created {len(DEMO_NOTES)} demo notes")

    print(f"Board URL:     http://127.0.0.1:8000/b/{DEMO_CODE}")
    print(f"Presenter URL: http://127.0.0.1:8000/b/{DEMO_CODE}?presenter=1")


async def main():
    try:
        await seed()
    except BoardError as e:
        print(f"Seeding failed: {e.detail}")
        raise SystemExit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
