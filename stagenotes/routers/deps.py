"""Shared FastAPI dependencies — store, composers and the device id."""

from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from stagenotes.database import get_db
from stagenotes.services.board_store import BoardStore
from stagenotes.services.change_feed import NoteChangeFeed
from stagenotes.services.composer import ComposerRegistry
from stagenotes.utils.device_id import CookieStorage, DeviceIdentity


def get_feed(request: Request) -> NoteChangeFeed:
    return request.app.state.change_feed


def get_composers(request: Request) -> ComposerRegistry:
    return request.app.state.composers


def get_store(
    feed: NoteChangeFeed = Depends(get_feed),
    db: AsyncSession = Depends(get_db),
) -> BoardStore:
    return BoardStore(db, feed)


def get_device_id(request: Request, response: Response) -> str:
    """
    Return this browser's device id, issuing the cookie on first contact.

    Only works for endpoints that let FastAPI build the response; pages that
    return a response themselves call ``CookieStorage.apply`` directly.
    """
    storage = CookieStorage(request.cookies)
    device_id = DeviceIdentity(storage).get()
    storage.apply(response)
    return device_id
