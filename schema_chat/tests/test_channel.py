import asyncio

import pytest

from schema_chat.streaming.channel import ByteChannel, ChannelClosedError


def test_channel_emit_then_close():
    async def scenario():
        ch = ByteChannel(capacity=4)
        await ch.emit(b"a")
        await ch.emit(b"b")
        await ch.close()
        assert await ch.read_all() == b"ab"
        # 关闭后继续读取始终返回空
        assert await ch.read() == b""

    asyncio.run(scenario())


def test_channel_fail_raises_on_read():
    async def scenario():
        ch = ByteChannel(capacity=4)
        await ch.emit(b"partial")
        await ch.fail(ValueError("boom"))
        assert await ch.read() == b"partial"
        with pytest.raises(ValueError):
            await ch.read()
        with pytest.raises(ValueError):
            await ch.read()

    asyncio.run(scenario())


def test_channel_emit_after_close_rejected():
    async def scenario():
        ch = ByteChannel(capacity=2)
        await ch.close()
        with pytest.raises(ChannelClosedError):
            await ch.emit(b"x")

    asyncio.run(scenario())


def test_channel_backpressure():
    async def scenario():
        ch = ByteChannel(capacity=1)
        await ch.emit(b"a")
        pending = asyncio.create_task(ch.emit(b"b"))
        await asyncio.sleep(0)
        assert not pending.done()
        assert await ch.read() == b"a"
        await asyncio.wait_for(pending, timeout=1)
        assert await ch.read() == b"b"

    asyncio.run(scenario())


def test_channel_aclose_cancels_producer():
    async def scenario():
        ch = ByteChannel()

        async def producer():
            while True:
                await ch.emit(b"x")

        task = asyncio.create_task(producer())
        ch.attach(task)
        assert await ch.read() == b"x"
        await ch.aclose()
        assert task.cancelled()
        assert await ch.read() == b""

    asyncio.run(scenario())
