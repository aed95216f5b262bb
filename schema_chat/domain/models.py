"""管道内共享的数据模型。

- ChatMessage: 调用方传入的一条对话消息（system/user/assistant）。
- ContextRecord: 向量库返回的一条候选上下文。
- AssembledContext: 按 token 预算拼好的上下文文本。

所有对象只在一次请求内存在，不跨请求共享。
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Literal


# 与 OpenAI chat/completions 的 role 字段对应
Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    """一条对话消息。调用方传入后不再修改。"""

    role: Role
    content: str

    def to_payload(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatMessage":
        return cls(role=data["role"], content=data.get("content") or "")


@dataclass(frozen=True)
class ContextRecord:
    """向量库返回的候选片段，按 similarity 降序排列，可能重复。"""

    content: str
    similarity: float


@dataclass(frozen=True)
class AssembledContext:
    """拼装结果。

    - text: 每条片段 strip 后接分隔行，依次拼接。
    - records_used: 被纳入的片段数量。
    - tokens_used: 被纳入片段的 token 总数。
    """

    text: str
    records_used: int
    tokens_used: int

    @property
    def is_empty(self) -> bool:
        return not self.text


EmbeddingVector = List[float]
