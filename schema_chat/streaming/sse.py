"""增量 Server-Sent Events 解析器。

上游响应体按任意边界切成若干块，一个事件可能横跨多块。
SSEParser 保存尚未读完的半行与当前事件的字段，每次 feed 一块文本，
返回这一块里凑齐的零个或多个事件。

字段规则（与 EventSource 规范一致）：
- 空行：派发当前事件（没有 data 行时不派发）。
- 以 ":" 开头：注释，忽略。
- data / event / id：累积到当前事件；多行 data 以 "\\n" 连接。
- retry：数字时产出 ReconnectInterval，否则忽略。
- 其他字段忽略。
"""

import re
from dataclasses import dataclass
from typing import List, Literal, Optional, Union


_LINE_END = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class ParsedEvent:
    """一条完整的 SSE 事件。"""

    data: str
    event: Optional[str] = None
    id: Optional[str] = None
    type: Literal["event"] = "event"


@dataclass(frozen=True)
class ReconnectInterval:
    """服务端通过 retry 字段建议的重连间隔（毫秒）。"""

    value: int
    type: Literal["reconnect-interval"] = "reconnect-interval"


SSEMessage = Union[ParsedEvent, ReconnectInterval]


class SSEParser:
    def __init__(self):
        self._buffer = ""
        self._data: List[str] = []
        self._event_type: Optional[str] = None
        self._last_event_id: Optional[str] = None
        self._started = False

    def feed(self, chunk: str) -> List[SSEMessage]:
        if not self._started:
            self._started = True
            if chunk.startswith("\ufeff"):
                chunk = chunk[1:]
        buf = self._buffer + chunk
        out: List[SSEMessage] = []
        pos = 0
        while True:
            m = _LINE_END.search(buf, pos)
            if m is None:
                break
            # 块尾的 \r 可能是 \r\n 的前半，留到下一块再判断
            if m.group() == "\r" and m.end() == len(buf):
                break
            msg = self._process_line(buf[pos:m.start()])
            if msg is not None:
                out.append(msg)
            pos = m.end()
        self._buffer = buf[pos:]
        return out

    def end(self) -> List[SSEMessage]:
        """上游结束：块尾保留的 \\r 按行尾处理，未以换行结尾的残行丢弃。"""

        out: List[SSEMessage] = []
        if self._buffer.endswith("\r"):
            buf, self._buffer = self._buffer, ""
            for line in _LINE_END.split(buf[:-1]):
                msg = self._process_line(line)
                if msg is not None:
                    out.append(msg)
        self._buffer = ""
        return out

    def reset(self) -> None:
        self._buffer = ""
        self._data = []
        self._event_type = None
        self._last_event_id = None
        self._started = False

    def _process_line(self, line: str) -> Optional[SSEMessage]:
        if line == "":
            return self._dispatch()
        if line.startswith(":"):
            return None
        field, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]
        if field == "data":
            self._data.append(value)
        elif field == "event":
            self._event_type = value
        elif field == "id":
            if "\0" not in value:
                self._last_event_id = value
        elif field == "retry":
            if value.isdigit():
                return ReconnectInterval(value=int(value))
        return None

    def _dispatch(self) -> Optional[ParsedEvent]:
        data, event_type = self._data, self._event_type
        self._data = []
        self._event_type = None
        if not data:
            return None
        return ParsedEvent(data="\n".join(data), event=event_type or None, id=self._last_event_id)
