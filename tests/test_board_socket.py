"""Tests for the board WebSocket helpers."""

import asyncio
import logging

import pytest
from sqlalchemy.pool import NullPool

from stagenotes.database import engine
from stagenotes.routers.boards import _stop_pump


@pytest.mark.asyncio
async def test_stop_pump_cancels_a_running_forwarder():
    pump = asyncio.create_task(asyncio.sleep(60))
    await asyncio.sleep(0)

    await _stop_pump(pump, "ABC234")

    assert pump.cancelled()


@pytest.mark.asyncio
async def test_stop_pump_collects_a_failed_forwarder(caplog):
    async def broken():
        raise RuntimeError("socket went away")

    pump = asyncio.create_task(broken())
    await asyncio.sleep(0)

    with caplog.at_level(logging.WARNING, logger="stagenotes.routers.boards"):
        await _stop_pump(pump, "ABC234")

    assert pump.done()
    assert "socket went away" in caplog.text


def test_sqlite_engine_does_not_pool_connections():
    assert isinstance(engine.sync_engine.pool, NullPool)
