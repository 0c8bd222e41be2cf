"""
Anonymous device identity.

Each browser gets a random UUID, kept in a long-lived cookie. It is the only
thing that ties votes to a client, so it is never derived from anything
guessable.
"""

import uuid
from typing import Dict, Iterator, Mapping, MutableMapping, Optional

from starlette.responses import Response

from stagenotes.config import settings

DEVICE_ID_KEY = "stagenotes-device-id"


class DeviceIdentity:
    """Get-or-create a device id in ``storage``.

    Without storage (scripts, server-side callers) every ``get()`` returns a
    fresh id, since nothing can be remembered.
    """

    def __init__(self, storage: Optional[MutableMapping[str, str]] = None):
        self.storage = storage

    def get(self) -> str:
        if self.storage is None:
            return str(uuid.uuid4())

        device_id = self.storage.get(DEVICE_ID_KEY)
        if not device_id:
            device_id = str(uuid.uuid4())
            self.storage[DEVICE_ID_KEY] = device_id
        return device_id

    def reset(self) -> None:
        if self.storage is not None:
            self.storage.pop(DEVICE_ID_KEY, None)


class CookieStorage(MutableMapping):
    """
    A mapping over the request's cookies that remembers what changed.

    Writes and deletes are replayed onto the outgoing response with
    ``apply()``; reads see the pending changes straight away.
    """

    def __init__(self, cookies: Mapping[str, str]):
        self._values: Dict[str, str] = dict(cookies)
        self._set: Dict[str, str] = {}
        self._deleted = set()

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._values[key] = value
        self._set[key] = value
        self._deleted.discard(key)

    def __delitem__(self, key: str) -> None:
        del self._values[key]
        self._set.pop(key, None)
        self._deleted.add(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def apply(self, response: Response) -> Response:
        for key, value in self._set.items():
            response.set_cookie(
                key=key,
                value=value,
                max_age=settings.DEVICE_COOKIE_MAX_AGE,
                httponly=True,
                samesite="lax",
            )
        for key in self._deleted:
            response.delete_cookie(key)
        return response
