"""流式响应转发。

StreamRelay 读取补全接口的 SSE 响应体，把每个事件里的文本增量
编码为 UTF-8 写入 ByteChannel。状态机：

    open ──finish_reason 非空──▶ closed
      │
      └──事件无法解析 / 传输中断 / 其他异常──▶ errored

进入终态后不再读取上游，并立即释放上游连接。
上游在没有 finish_reason 的情况下结束时，同样关闭通道（记录告警）。
"""

import codecs
import json
from typing import Literal, Optional

import httpx

from schema_chat.domain.exceptions import CompletionProviderError, StreamParseError
from schema_chat.infrastructure.logging.logger import logger
from schema_chat.providers.base import UpstreamStream
from schema_chat.streaming.channel import ByteChannel
from schema_chat.streaming.sse import ParsedEvent, SSEMessage, SSEParser


RelayState = Literal["open", "closed", "errored"]


class StreamRelay:
    def __init__(self, upstream: UpstreamStream, channel: ByteChannel):
        self._upstream = upstream
        self._channel = channel
        self._parser = SSEParser()
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.state: RelayState = "open"
        self.error: Optional[BaseException] = None

    async def run(self) -> None:
        """生产者主循环，作为独立的 asyncio 任务运行。"""

        try:
            async for chunk in self._upstream.aiter_bytes():
                for message in self._parser.feed(self._decoder.decode(chunk)):
                    await self._handle(message)
                    if self.state != "open":
                        return
            tail = self._parser.feed(self._decoder.decode(b"", final=True)) + self._parser.end()
            for message in tail:
                await self._handle(message)
                if self.state != "open":
                    return
            logger.warning("Completion stream ended without a finish reason")
            await self._close()
        except httpx.HTTPError as e:
            await self._fail(CompletionProviderError(message=f"Completion stream interrupted: {e}", http_status=502))
        except Exception as e:
            # 任何意外错误都要交给消费者，避免 read() 永久挂起
            await self._fail(CompletionProviderError(message=f"Completion stream failed: {e!r}", http_status=502))
        finally:
            await self._upstream.aclose()

    async def _handle(self, message: SSEMessage) -> None:
        if not isinstance(message, ParsedEvent):
            return
        try:
            payload = json.loads(message.data)
            choice = payload["choices"][0]
            if choice.get("finish_reason") is not None:
                await self._close()
                return
            text = (choice.get("delta") or {}).get("content")
            if text is not None and not isinstance(text, str):
                raise TypeError(f"delta.content must be a string, got {type(text).__name__}")
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            await self._fail(
                StreamParseError(
                    code="STREAM_PARSE_ERROR",
                    message=f"Unparseable stream event: {e!r}",
                    http_status=502,
                    data=message.data[:200],
                )
            )
            return
        if text:
            await self._channel.emit(text.encode("utf-8"))

    async def _close(self) -> None:
        self.state = "closed"
        logger.info("Completion stream closed")
        await self._channel.close()

    async def _fail(self, error: BaseException) -> None:
        self.state = "errored"
        self.error = error
        logger.error(f"Completion stream errored: {error}")
        await self._channel.fail(error)
