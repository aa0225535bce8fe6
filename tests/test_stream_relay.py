"""
Tests for the completion → HTTP stream relay
"""
import asyncio

import pytest

from profmatch.src.core.stream_relay import relay_stream


class Upstream:
    """Async generator wrapper that records how far it was consumed."""

    def __init__(self, chunks, error=None):
        self.chunks = chunks
        self.error = error
        self.yielded = 0
        self.closed = False

    async def gen(self):
        try:
            for chunk in self.chunks:
                self.yielded += 1
                yield chunk
            if self.error:
                raise self.error
        finally:
            self.closed = True


async def collect(stream):
    return [chunk async for chunk in stream]


async def test_forwards_chunks_in_order_as_bytes():
    upstream = Upstream(["Prof", "essor ", "Smith"])
    assert await collect(relay_stream(upstream.gen())) == [b"Prof", b"essor ", b"Smith"]
    assert upstream.closed


async def test_skips_empty_chunks_without_merging():
    upstream = Upstream(["a", "", "b", "", ""])
    assert await collect(relay_stream(upstream.gen())) == [b"a", b"b"]


async def test_encodes_utf8():
    upstream = Upstream(["Café ", "🎓"])
    assert await collect(relay_stream(upstream.gen())) == ["Café ".encode("utf-8"), "🎓".encode("utf-8")]


async def test_empty_upstream_closes_cleanly():
    upstream = Upstream([])
    assert await collect(relay_stream(upstream.gen())) == []
    assert upstream.closed


async def test_upstream_error_propagates_after_sent_chunks():
    upstream = Upstream(["partial"], error=RuntimeError("model overloaded"))
    received = []

    with pytest.raises(RuntimeError, match="model overloaded"):
        async for chunk in relay_stream(upstream.gen()):
            received.append(chunk)

    assert received == [b"partial"]
    assert upstream.closed


async def test_client_disconnect_closes_upstream():
    upstream = Upstream(["a", "b", "c", "d"])
    relay = relay_stream(upstream.gen())

    assert await relay.__anext__() == b"a"
    await relay.aclose()

    assert upstream.closed
    assert upstream.yielded == 1


async def test_cancellation_stops_reading_upstream():
    started = asyncio.Event()
    state = {"closed": False, "reads": 0}

    async def slow():
        try:
            while True:
                state["reads"] += 1
                yield "tick"
                started.set()
                await asyncio.sleep(10)
        finally:
            state["closed"] = True

    async def consume():
        async for _ in relay_stream(slow()):
            pass

    task = asyncio.create_task(consume())
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert state["closed"]
    assert state["reads"] == 1
