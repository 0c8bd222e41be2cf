"""Tests for a live board view over the store and change feed."""

import asyncio

import pytest

from stagenotes.errors import NotFoundError
from stagenotes.models.note import NoteType
from stagenotes.services.board_view import open_board_view
from stagenotes.services.change_feed import ChangeType, NoteChange
from stagenotes.services.reconciler import SortMode


async def next_change(view):
    changes = view.changes()
    try:
        return await asyncio.wait_for(changes.__anext__(), timeout=1)
    finally:
        await changes.aclose()


@pytest.mark.asyncio
async def test_open_seeds_notes_and_votes(store, feed):
    board = await store.create_board("Talk")
    a = await store.create_note(board.id, "A", "Idea")
    await store.create_note(board.id, "B", "Question")
    await store.cast_vote(a.id, "device-1")

    view = await open_board_view(store, feed, board.code.lower(), "device-1")

    assert view.board.id == board.id
    assert len(view.reconciler.notes) == 2
    assert view.voted == {a.id}
    assert feed.subscriptions[board.id] == [view.subscription]
    view.close()


@pytest.mark.asyncio
async def test_open_unknown_board_leaves_no_subscription(store, feed):
    with pytest.raises(NotFoundError):
        await open_board_view(store, feed, "ZZZZZZ", "device-1")
    assert feed.subscriptions == {}


@pytest.mark.asyncio
async def test_follows_store_changes(store, feed):
    board = await store.create_board("Talk")
    view = await open_board_view(store, feed, board.code, "device-1")

    note = await store.create_note(board.id, "Live note", "Idea")
    change = await next_change(view)
    assert change.type == ChangeType.INSERT
    assert view.reconciler.notes == [note]

    await store.cast_vote(note.id, "device-2")
    await next_change(view)
    assert view.reconciler.notes[0].votes == 1

    await store.delete_note(note.id)
    await next_change(view)
    assert view.reconciler.notes == []
    view.close()


@pytest.mark.asyncio
async def test_vote_guard(store, feed):
    board = await store.create_board("Talk")
    note = await store.create_note(board.id, "Vote", "Idea")
    view = await open_board_view(store, feed, board.code, "device-1")

    assert view.begin_vote(note.id) is True
    # in flight: a second click is refused
    assert view.begin_vote(note.id) is False

    votes = await store.cast_vote(note.id, view.device_id)
    view.finish_vote(note.id, votes)
    assert view.reconciler.notes[0].votes == 1
    assert view.begin_vote(note.id) is False

    other = await store.create_note(board.id, "Other", "Idea")
    view.apply(NoteChange(ChangeType.INSERT, other))
    assert view.begin_vote(other.id) is True
    view.abort_vote(other.id)
    assert view.begin_vote(other.id) is True
    view.close()


@pytest.mark.asyncio
async def test_no_mutation_after_close(store, feed):
    board = await store.create_board("Talk")
    note = await store.create_note(board.id, "Before", "Idea")
    view = await open_board_view(store, feed, board.code, "device-1")
    view.close()

    view.apply(NoteChange(ChangeType.DELETE, note))
    view.finish_vote(note.id, 42)
    await store.create_note(board.id, "After", "Idea")

    assert [n.id for n in view.reconciler.notes] == [note.id]
    assert view.reconciler.notes[0].votes == 0
    assert view.begin_vote(note.id) is False
    assert [c async for c in view.changes()] == []


@pytest.mark.asyncio
async def test_snapshot(store, feed):
    board = await store.create_board("Talk")
    await store.create_note(board.id, "Q", "Question")
    idea = await store.create_note(board.id, "I", "Idea")
    view = await open_board_view(store, feed, board.code, "device-1")

    snapshot = view.snapshot(NoteType.Idea, SortMode.Recent)
    assert snapshot["type"] == "notes"
    assert snapshot["board"]["code"] == board.code
    assert snapshot["filter"] == "Idea"
    assert snapshot["sort"] == "Recent"
    assert snapshot["total"] == 2
    assert [n["id"] for n in snapshot["notes"]] == [idea.id]
    assert view.snapshot()["filter"] == "All"
    view.close()


@pytest.mark.asyncio
async def test_anonymous_view_is_read_only_state(store, feed):
    board = await store.create_board("Talk")
    note = await store.create_note(board.id, "Seen", "Idea")
    await store.cast_vote(note.id, "device-1")

    view = await open_board_view(store, feed, board.code, None)

    assert view.device_id is None
    assert view.voted == set()
    assert view.has_note(note.id) is True
    assert view.has_note("note-on-another-board") is False
    view.close()
