"""有界字节通道：生产者与消费者之间的背压队列。

生产者（StreamRelay）只使用 emit / close / fail 三个操作；
消费者通过 read() 或 ``async for`` 读取，直到通道关闭。

- emit 在队列满时挂起，生产速度受消费者读取速度约束。
- close 后 read() 返回 b""，``async for`` 正常结束。
- fail 后 read() 抛出对应异常（之后每次读取都会再次抛出）。
- aclose() 表示消费者不再读取：取消生产者任务并丢弃未读数据。
"""

import asyncio
from typing import AsyncIterator, Optional


class _Closed:
    pass


class _Failed:
    def __init__(self, error: BaseException):
        self.error = error


_CLOSED = _Closed()


class ChannelClosedError(RuntimeError):
    """向已结束的通道写入。"""


class ByteChannel:
    def __init__(self, capacity: int = 1):
        self._queue: "asyncio.Queue[object]" = asyncio.Queue(maxsize=capacity)
        self._finished = False  # 生产侧已 close/fail
        self._terminal: Optional[object] = None  # 消费侧已读到的终止信号
        self._producer: Optional["asyncio.Task[None]"] = None

    # ---- 生产侧 ----

    async def emit(self, data: bytes) -> None:
        if self._finished:
            raise ChannelClosedError("emit on a finished channel")
        await self._queue.put(data)

    async def close(self) -> None:
        if self._finished:
            return
        self._finished = True
        await self._queue.put(_CLOSED)

    async def fail(self, error: BaseException) -> None:
        if self._finished:
            return
        self._finished = True
        await self._queue.put(_Failed(error))

    def attach(self, producer: "asyncio.Task[None]") -> None:
        """登记生产者任务，消费者 aclose() 时会取消它。"""

        self._producer = producer

    # ---- 消费侧 ----

    async def read(self) -> bytes:
        """读取下一块字节；通道正常结束时返回 b""。"""

        if self._terminal is None:
            item = await self._queue.get()
            if isinstance(item, bytes):
                return item
            self._terminal = item
        if isinstance(self._terminal, _Failed):
            raise self._terminal.error
        return b""

    async def read_all(self) -> bytes:
        chunks = [chunk async for chunk in self]
        return b"".join(chunks)

    async def aclose(self) -> None:
        if self._terminal is None:
            self._terminal = _CLOSED
        if self._producer is not None and not self._producer.done():
            self._producer.cancel()
            try:
                await self._producer
            except asyncio.CancelledError:
                pass
        while not self._queue.empty():
            self._queue.get_nowait()

    @property
    def finished(self) -> bool:
        return self._finished

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self

    async def __anext__(self) -> bytes:
        chunk = await self.read()
        if not chunk:
            raise StopAsyncIteration
        return chunk

    async def __aenter__(self) -> "ByteChannel":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
