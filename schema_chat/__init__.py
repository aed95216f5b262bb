"""schema_chat 顶层包。

针对数据库表结构的检索增强问答：审核用户问题、向量化、
从向量库检索表结构片段、按 token 预算拼装上下文，
再把补全模型的流式回答以字节流的形式返回给调用方。
"""

from schema_chat.api.service import stream_chat
from schema_chat.config.pipeline import PipelineConfig

__all__ = ["PipelineConfig", "stream_chat"]
