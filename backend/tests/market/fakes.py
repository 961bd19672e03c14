"""In-process stand-ins for the Binance combined stream.

FakeBinance replaces ``websockets.connect`` so BinanceStreamSource can be
driven frame by frame without touching the network.
"""

import asyncio
import json

_CLOSE = object()


class FakeConnection:
    """Stands in for the object returned by websockets.connect()."""

    def __init__(self, url: str, hold_handshake: bool = False) -> None:
        self.url = url
        self.kwargs: dict = {}
        self.entered = False
        self.exited = False
        self._frames: asyncio.Queue = asyncio.Queue()
        self._handshake = asyncio.Event()
        if not hold_handshake:
            self._handshake.set()

    async def __aenter__(self):
        await self._handshake.wait()
        self.entered = True
        return self

    async def __aexit__(self, *exc_info):
        self.exited = True
        return False

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._frames.get()
        if item is _CLOSE:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item

    # --- Test controls ---

    def complete_handshake(self) -> None:
        self._handshake.set()

    def push(self, frame) -> None:
        """Queue a frame; dicts are JSON-encoded like Binance does."""
        self._frames.put_nowait(frame if isinstance(frame, (str, bytes)) else json.dumps(frame))

    def remote_close(self) -> None:
        self._frames.put_nowait(_CLOSE)

    def fail(self, error: BaseException) -> None:
        self._frames.put_nowait(error)

    @property
    def streams(self) -> set[str]:
        return set(self.url.split("streams=", 1)[1].split("/"))


class FakeBinance:
    """Records every connection BinanceStreamSource opens."""

    def __init__(self) -> None:
        self.connections: list[FakeConnection] = []
        self.hold_handshake = False

    def connect(self, url: str, **kwargs) -> FakeConnection:
        conn = FakeConnection(url, hold_handshake=self.hold_handshake)
        conn.kwargs = kwargs
        self.connections.append(conn)
        return conn

    @property
    def latest(self) -> FakeConnection:
        return self.connections[-1]


def trade(symbol: str, price, trade_time: int | None = 1700000000000) -> dict:
    """Binance combined-stream trade frame."""
    data = {"e": "trade", "s": symbol, "p": price}
    if trade_time is not None:
        data["T"] = trade_time
    return {"stream": f"{symbol.lower()}@trade", "data": data}


async def settle() -> None:
    """Let pending tasks run until they block again."""
    for _ in range(5):
        await asyncio.sleep(0)
