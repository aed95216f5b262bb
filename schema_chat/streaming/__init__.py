"""流式输出：SSE 解析、背压通道与转发器。"""

from schema_chat.streaming.channel import ByteChannel
from schema_chat.streaming.relay import StreamRelay
from schema_chat.streaming.sse import ParsedEvent, ReconnectInterval, SSEParser

__all__ = ["ByteChannel", "StreamRelay", "SSEParser", "ParsedEvent", "ReconnectInterval"]
