"""Boards router — create, join, lock, export, and the live WebSocket feed."""

import asyncio
import contextlib
import json
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from fastapi.responses import Response

from stagenotes.database import async_session
from stagenotes.errors import BoardError, NotFoundError, ValidationError
from stagenotes.schemas.board import BoardCreate, BoardOut, LockUpdate
from stagenotes.schemas.note import NoteOut
from stagenotes.services.board_store import BoardStore
from stagenotes.services.board_view import BoardView, open_board_view
from stagenotes.services.reconciler import SortMode, parse_filter
from stagenotes.routers.deps import get_store
from stagenotes.utils.device_id import DEVICE_ID_KEY

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/boards", tags=["boards"])


# ═══════════════════════════════════════════════════════════════
#  JSON API
# ═══════════════════════════════════════════════════════════════

@router.post("", response_model=BoardOut, status_code=status.HTTP_201_CREATED)
async def create_board(payload: BoardCreate, store: BoardStore = Depends(get_store)):
    return await store.create_board(payload.title)


@router.get("/{code}", response_model=BoardOut)
async def get_board(code: str, store: BoardStore = Depends(get_store)):
    return await store.get_board_by_code(code)


@router.put("/{board_id}/lock", response_model=BoardOut)
async def set_lock(board_id: str, payload: LockUpdate, store: BoardStore = Depends(get_store)):
    return await store.set_board_locked(board_id, payload.locked)


@router.post("/{board_id}/toggle-lock", response_model=BoardOut)
async def toggle_lock(board_id: str, store: BoardStore = Depends(get_store)):
    return await store.toggle_board_lock(board_id)


@router.get("/{board_id}/notes", response_model=List[NoteOut])
async def list_notes(board_id: str, store: BoardStore = Depends(get_store)):
    return await store.list_notes(board_id)


@router.get("/{board_id}/export.csv")
async def export_csv(board_id: str, code: Optional[str] = None, store: BoardStore = Depends(get_store)):
    csv_text = await store.export_notes_as_csv(board_id)
    filename = f"board-{code or board_id}-{date.today().isoformat()}.csv"
    return Response(
        content=csv_text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ═══════════════════════════════════════════════════════════════
#  WS /api/boards/ws/{code} → live, reconciled board view
# ═══════════════════════════════════════════════════════════════

async def _forward_changes(websocket: WebSocket, view: BoardView, state: dict):
    async for _change in view.changes():
        await websocket.send_json(view.snapshot(state["filter"], state["sort"]))


async def _stop_pump(pump: asyncio.Task, board_code: str):
    """Cancel the change forwarder and collect whatever it ended with."""
    pump.cancel()
    try:
        with contextlib.suppress(asyncio.CancelledError):
            await pump
    except Exception as e:
        logger.warning(f"Change forwarding for board {board_code} failed: {e}")


async def _cast_vote(websocket: WebSocket, view: BoardView, note_id: str, state: dict):
    # No device cookie: read-only viewer
    if view.device_id is None:
        raise ValidationError("Device not identified, reload the page to vote")
    if not view.has_note(note_id):
        raise NotFoundError("Note not found")
    if not view.begin_vote(note_id):
        await websocket.send_json({"type": "error", "detail": "You have already voted"})
        return
    try:
        async with async_session() as db:
            votes = await BoardStore(db, websocket.app.state.change_feed).cast_vote(note_id, view.device_id)
    except BoardError:
        view.abort_vote(note_id)
        raise
    view.finish_vote(note_id, votes)
    await websocket.send_json(view.snapshot(state["filter"], state["sort"]))


async def _handle_message(websocket: WebSocket, view: BoardView, message: dict, state: dict):
    action = message.get("action")
    if action == "view":
        try:
            state["filter"] = parse_filter(message.get("filter"))
            state["sort"] = SortMode(message.get("sort") or state["sort"].value)
        except ValueError:
            raise ValidationError("Unknown filter or sort")
        await websocket.send_json(view.snapshot(state["filter"], state["sort"]))
    elif action == "vote":
        await _cast_vote(websocket, view, str(message.get("note_id") or ""), state)
    else:
        raise ValidationError(f"Unknown action '{action}'")


@router.websocket("/ws/{code}")
async def board_feed(websocket: WebSocket, code: str):
    """
    Stream the board's notes.

    A snapshot is sent on connect and after every change; the client may
    switch filter/sort or vote over the same socket.
    """
    feed = websocket.app.state.change_feed
    device_id = websocket.cookies.get(DEVICE_ID_KEY)
    await websocket.accept()

    try:
        async with async_session() as db:
            view = await open_board_view(BoardStore(db, feed), feed, code, device_id)
    except BoardError as e:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.detail)
        return

    logger.debug(f"Viewer connected to board {view.board.code}")
    state = {"filter": None, "sort": SortMode.Popular}
    await websocket.send_json(view.snapshot(state["filter"], state["sort"]))
    pump = asyncio.create_task(_forward_changes(websocket, view, state))

    try:
        while True:
            text = await websocket.receive_text()
            try:
                message = json.loads(text)
            except ValueError:
                message = None
            if not isinstance(message, dict):
                await websocket.send_json({"type": "error", "detail": "Malformed message"})
                continue
            try:
                await _handle_message(websocket, view, message, state)
            except BoardError as e:
                await websocket.send_json({"type": "error", "detail": e.detail})
    except WebSocketDisconnect:
        logger.debug(f"Viewer disconnected from board {view.board.code}")
    finally:
        view.close()
        await _stop_pump(pump, view.board.code)
