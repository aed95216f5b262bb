"""对外 API 服务模块。

stream_chat 是唯一入口：审核 → 向量化 → 检索 → 拼装上下文 → 构造提示词
→ 发起流式补全 → 转发。前五步依次 await，任一步出错直接抛出；
补全请求成功后立即返回 ByteChannel，之后的错误通过通道交给消费者。
"""

import asyncio
from typing import Any, Dict, Optional, Sequence, Union

import httpx

from schema_chat.config.pipeline import PipelineConfig
from schema_chat.domain.exceptions import ValidationError
from schema_chat.domain.models import ChatMessage
from schema_chat.infrastructure.logging.logger import logger, redact
from schema_chat.prompts import build_system_prompt
from schema_chat.providers import create_provider
from schema_chat.providers.registry import OpenAIModel
from schema_chat.retrieval.context import TokenCounter, assemble_context
from schema_chat.retrieval.embeddings import EmbeddingClient
from schema_chat.retrieval.moderation import ModerationGuard
from schema_chat.retrieval.search import SimilaritySearchClient
from schema_chat.streaming.channel import ByteChannel
from schema_chat.streaming.relay import StreamRelay


MessageLike = Union[ChatMessage, Dict[str, Any]]


def _normalize_messages(messages: Sequence[MessageLike]) -> list[ChatMessage]:
    return [m if isinstance(m, ChatMessage) else ChatMessage.from_dict(m) for m in messages]


def _query_from(messages: Sequence[ChatMessage]) -> str:
    """取第一条 user 消息作为检索查询。"""

    for m in messages:
        if m.role == "user":
            query = m.content.strip()
            if query:
                return query
            break
    raise ValidationError(code="INVALID_REQUEST", message="No user query in messages")


async def stream_chat(
    model: OpenAIModel,
    system_prompt: Optional[str],
    temperature: float,
    key: Optional[str],
    messages: Sequence[MessageLike],
    config: Optional[PipelineConfig] = None,
    *,
    token_counter: Optional[TokenCounter] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ByteChannel:
    """运行完整的检索增强对话管道，返回回答的字节流。

    Args:
        model: 目标补全模型
        system_prompt: 调用方的 system 提示词；会被检索提示词取代，仅为兼容保留
        temperature: 生成温度
        key: 调用方提供的 API key，为空时使用配置中的默认 key
        messages: 完整的对话消息列表
        config: 管道配置（默认由全局 settings 构造）
        token_counter: 自定义 token 计数函数（默认 GPT-3 分词器）
        transport: 注入的 httpx 传输层（测试用）

    Returns:
        ByteChannel，逐块产出 UTF-8 文本增量

    Raises:
        各种 domain.exceptions 中定义的异常（流开始之前）
    """
    config = config or PipelineConfig.from_settings()
    msgs = _normalize_messages(messages)
    if not msgs:
        raise ValidationError(code="INVALID_REQUEST", message="messages must not be empty")
    query = _query_from(msgs)
    api_key = key or config.api_key
    if not api_key:
        raise ValidationError(code="MISSING_API_KEY", message="OPENAI_API_KEY not set")
    if system_prompt:
        logger.info("Caller system prompt replaced by retrieval prompt")
    logger.info(f"sanitizedQuery: {redact(query)}")

    await ModerationGuard(config, transport=transport).check(query, api_key)
    embedding = await EmbeddingClient(config, transport=transport).embed(query, api_key)
    records = await SimilaritySearchClient(config, transport=transport).search(embedding)
    context = assemble_context(records, token_counter=token_counter)
    prompt = build_system_prompt(context.text)
    logger.info(f"Custom prompt: {redact(prompt)}", extra={"extra": {"prompt_chars": len(prompt)}})

    provider = create_provider(config, transport=transport)
    upstream = await provider.open_stream(prompt, msgs, model, temperature, api_key)

    channel = ByteChannel()
    relay = StreamRelay(upstream, channel)
    channel.attach(asyncio.create_task(relay.run()))
    return channel
