"""Tests for the event emitter."""
import pytest

from multi_uploader.utils.events import EventEmitter


@pytest.mark.asyncio
async def test_sync_and_async_listeners():
    events = EventEmitter()
    seen = []

    async def on_async(value):
        seen.append(("async", value))

    events.on("done", lambda value: seen.append(("sync", value)))
    events.on("done", on_async)
    await events.emit("done", 1)

    assert seen == [("sync", 1), ("async", 1)]


@pytest.mark.asyncio
async def test_listener_errors_are_swallowed():
    events = EventEmitter()
    seen = []

    def broken(_):
        raise RuntimeError("listener bug")

    events.on("done", broken)
    events.on("done", seen.append)
    await events.emit("done", "x")

    assert seen == ["x"]


def test_on_is_idempotent_and_off_removes():
    events = EventEmitter()
    callback = print
    events.on("e", callback)
    events.on("e", callback)
    assert events.listener_count("e") == 1
    events.off("e", callback)
    assert events.listener_count("e") == 0
    events.off("missing", callback)
