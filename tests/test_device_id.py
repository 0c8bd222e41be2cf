"""Tests for the anonymous device identity."""

import re

from starlette.responses import Response

from stagenotes.utils.device_id import DEVICE_ID_KEY, CookieStorage, DeviceIdentity

UUID4_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")


class RecordingStorage(dict):
    """dict that remembers every write."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.writes = []

    def __setitem__(self, key, value):
        self.writes.append((key, value))
        super().__setitem__(key, value)


class TestDeviceIdentity:

    def test_creates_and_stores_new_id(self):
        storage = RecordingStorage()
        device_id = DeviceIdentity(storage).get()

        assert UUID4_RE.match(device_id)
        assert storage.writes == [(DEVICE_ID_KEY, device_id)]

    def test_returns_existing_id_without_rewriting(self):
        storage = RecordingStorage({DEVICE_ID_KEY: "existing-device-id"})
        identity = DeviceIdentity(storage)

        assert identity.get() == "existing-device-id"
        assert identity.get() == "existing-device-id"
        assert storage.writes == []

    def test_stable_until_reset(self):
        storage = {}
        identity = DeviceIdentity(storage)
        first = identity.get()
        assert identity.get() == first

        identity.reset()
        assert DEVICE_ID_KEY not in storage
        assert identity.get() != first

    def test_without_storage_every_call_is_fresh(self):
        identity = DeviceIdentity()
        first, second = identity.get(), identity.get()

        assert UUID4_RE.match(first)
        assert UUID4_RE.match(second)
        assert first != second

    def test_reset_without_storage_is_noop(self):
        DeviceIdentity().reset()

    def test_reset_when_nothing_stored(self):
        storage = {}
        DeviceIdentity(storage).reset()
        assert storage == {}


class TestCookieStorage:

    def test_reads_request_cookies(self):
        storage = CookieStorage({DEVICE_ID_KEY: "abc"})
        assert DeviceIdentity(storage).get() == "abc"

    def test_new_id_is_written_to_response(self):
        storage = CookieStorage({})
        device_id = DeviceIdentity(storage).get()
        response = storage.apply(Response())

        header = response.headers["set-cookie"]
        assert f"{DEVICE_ID_KEY}={device_id}" in header
        assert "httponly" in header.lower()

    def test_existing_id_sets_no_cookie(self):
        storage = CookieStorage({DEVICE_ID_KEY: "abc"})
        DeviceIdentity(storage).get()
        response = storage.apply(Response())

        assert "set-cookie" not in response.headers

    def test_reset_deletes_cookie(self):
        storage = CookieStorage({DEVICE_ID_KEY: "abc"})
        DeviceIdentity(storage).reset()
        response = storage.apply(Response())

        header = response.headers["set-cookie"]
        assert header.startswith(f"{DEVICE_ID_KEY}=")
        assert "Max-Age=0" in header
