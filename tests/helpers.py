"""
Shared test doubles.
"""

import asyncio
from typing import List, Tuple

from common.protocol_definitions import decode_event


class FakeTransport:

    def __init__(self):
        self.aborted = False

    def abort(self):
        self.aborted = True


class FakeWriter:
    """Collects everything written, in the shape of asyncio.StreamWriter.

    ``fail`` makes every write raise; ``stall`` makes drain() never return,
    like a peer that stopped reading.
    """

    def __init__(self, fail: bool = False, stall: bool = False):
        self.buffer: List[bytes] = []
        self.closed = False
        self.fail = fail
        self.stall = stall
        self.transport = FakeTransport()

    def write(self, data: bytes):
        if self.fail:
            raise ConnectionResetError("peer gone")
        self.buffer.append(data)

    async def drain(self):
        if self.stall:
            await asyncio.Event().wait()
        await asyncio.sleep(0)

    def close(self):
        self.closed = True

    async def wait_closed(self):
        pass

    def get_extra_info(self, name, default=None):
        return ('127.0.0.1', 50000) if name == 'peername' else default

    def events(self) -> List[Tuple[str, dict]]:
        return [decode_event(line) for line in self.buffer]

    def of_type(self, event: str) -> List[dict]:
        return [payload for name, payload in self.events() if name == event]

    def clear(self):
        self.buffer.clear()


async def wait_for(predicate, timeout: float = 2.0, interval: float = 0.01):
    """Poll until predicate() is true or fail with TimeoutError."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise TimeoutError("condition not met in time")
        await asyncio.sleep(interval)
