"""输入审核。

调用 {api_host}/v1/moderations 判断查询是否违规：

- flagged 为 true：抛出 ContentPolicyViolation，管道在向量化之前中止。
- 审核接口本身出错（网络/状态码/响应格式）：
  permissive 模式记录日志后放行；strict 模式抛出 ModerationUnavailableError。
"""

from typing import Optional

import httpx

from schema_chat.config.pipeline import PipelineConfig
from schema_chat.domain.exceptions import ContentPolicyViolation, ModerationUnavailableError
from schema_chat.infrastructure.logging.logger import logger, redact


class ModerationGuard:
    """OpenAI moderation 接口的封装。"""

    def __init__(self, config: PipelineConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._config = config
        self._transport = transport

    async def check(self, text: str, api_key: str) -> None:
        try:
            async with httpx.AsyncClient(
                timeout=self._config.http_timeout,
                trust_env=False,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    f"{self._config.api_host}/v1/moderations",
                    json={"input": text},
                    headers={
                        "Content-Type": "application/json",
                        "Authorization": f"Bearer {api_key}",
                    },
                )
            resp.raise_for_status()
            results = resp.json()["results"]
            flagged = bool(results[0].get("flagged"))
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            logger.error(f"Failed to moderate content: {e!r}")
            if self._config.moderation_failure_mode == "strict":
                raise ModerationUnavailableError(
                    code="MODERATION_UNAVAILABLE",
                    message=f"Failed to moderate content: {e}",
                    http_status=503,
                ) from e
            return

        if flagged:
            logger.error(f"Your query was flagged as inappropriate: {redact(text)}")
            raise ContentPolicyViolation(text)
