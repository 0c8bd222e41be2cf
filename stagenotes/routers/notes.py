"""Notes router — submit, delete, and vote on notes."""

from fastapi import APIRouter, Depends, status

from stagenotes.schemas.note import NoteCreate, NoteOut, VotedOut, VoteOut
from stagenotes.services.board_store import BoardStore
from stagenotes.services.composer import ComposerRegistry
from stagenotes.routers.deps import get_composers, get_device_id, get_store

router = APIRouter(prefix="/api/notes", tags=["notes"])


@router.post("", response_model=NoteOut, status_code=status.HTTP_201_CREATED)
async def submit_note(
    payload: NoteCreate,
    device_id: str = Depends(get_device_id),
    composers: ComposerRegistry = Depends(get_composers),
    store: BoardStore = Depends(get_store),
):
    """Post a note through this device's composer for the board."""
    composer = composers.composer_for(device_id, payload.board_id, payload.composer)
    return await composer.submit(store, payload.board_id, payload.text, payload.type, payload.author)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(note_id: str, store: BoardStore = Depends(get_store)):
    await store.delete_note(note_id)


@router.post("/{note_id}/vote", response_model=VoteOut)
async def vote_note(
    note_id: str,
    device_id: str = Depends(get_device_id),
    store: BoardStore = Depends(get_store),
):
    """Upvote once per device; repeating returns the unchanged count."""
    votes = await store.cast_vote(note_id, device_id)
    return VoteOut(note_id=note_id, votes=votes)


@router.get("/{note_id}/voted", response_model=VotedOut)
async def has_voted(
    note_id: str,
    device_id: str = Depends(get_device_id),
    store: BoardStore = Depends(get_store),
):
    return VotedOut(note_id=note_id, voted=await store.has_voted(note_id, device_id))
