"""补全 Provider 抽象接口。

管道不直接依赖具体厂商的请求形态，而是依赖 CompletionClient 协议：

- direct（OpenAI 直连）与 gateway（Azure 部署）各实现一个 Client。
- 两者共享同一套请求/错误处理流程（BaseCompletionClient），
  只在 URL、请求头、请求体是否带 model 上有差别。
- open_stream 只负责发请求并检查状态码；响应体交给 StreamRelay 解析。
"""

import json
from typing import Any, AsyncIterator, Dict, List, Optional, Protocol, Sequence

import httpx

from schema_chat.config.pipeline import PipelineConfig
from schema_chat.domain.exceptions import CompletionProviderError
from schema_chat.domain.models import ChatMessage
from schema_chat.infrastructure.logging.logger import logger
from schema_chat.providers.registry import OpenAIModel


# 单次回答的最大输出 token 数
MAX_COMPLETION_TOKENS = 1000


class UpstreamStream:
    """已通过状态码检查、尚未读取响应体的流式响应。

    持有 AsyncClient 与 Response，aclose() 时两者一并释放。
    """

    def __init__(self, client: httpx.AsyncClient, response: httpx.Response):
        self._client = client
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    def aiter_bytes(self) -> AsyncIterator[bytes]:
        return self._response.aiter_bytes()

    async def aclose(self) -> None:
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()


class CompletionClient(Protocol):
    """流式补全客户端协议。

    实现者需要提供：
    - name: Provider 名称，用于日志。
    - open_stream(...): 发出 stream=true 的请求，返回 UpstreamStream；
      非 200 时抛出 CompletionProviderError。
    """

    name: str

    async def open_stream(
        self,
        system_prompt: str,
        messages: Sequence[ChatMessage],
        model: OpenAIModel,
        temperature: float,
        api_key: str,
    ) -> UpstreamStream:
        ...


class BaseCompletionClient:
    """direct / gateway 共用的请求流程，子类只需给出 URL、请求头与 model 字段。"""

    name = "base"
    include_model = True

    def __init__(self, config: PipelineConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._config = config
        # 测试时可注入 httpx.MockTransport
        self._transport = transport

    def build_url(self) -> str:
        raise NotImplementedError

    def build_headers(self, api_key: str) -> Dict[str, str]:
        raise NotImplementedError

    def build_payload(
        self,
        system_prompt: str,
        messages: Sequence[ChatMessage],
        model: OpenAIModel,
        temperature: float,
    ) -> Dict[str, Any]:
        """组装请求体：system 提示词在最前，其后是调用方的全部消息。"""

        msgs: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}]
        msgs.extend(m.to_payload() for m in messages)
        payload: Dict[str, Any] = {}
        if self.include_model:
            payload["model"] = model.id
        payload.update(
            {
                "messages": msgs,
                "max_tokens": MAX_COMPLETION_TOKENS,
                "temperature": temperature,
                "stream": True,
            }
        )
        return payload

    async def open_stream(
        self,
        system_prompt: str,
        messages: Sequence[ChatMessage],
        model: OpenAIModel,
        temperature: float,
        api_key: str,
    ) -> UpstreamStream:
        url = self.build_url()
        payload = self.build_payload(system_prompt, messages, model, temperature)
        headers = self.build_headers(api_key)
        logger.info(f"Dispatching completion via {self.name}: {url}")

        client = httpx.AsyncClient(timeout=self._config.http_timeout, trust_env=False, transport=self._transport)
        opened = False
        try:
            request = client.build_request("POST", url, json=payload, headers=headers)
            try:
                resp = await client.send(request, stream=True)
            except httpx.RequestError as e:
                # 网络错误：DNS 失败、连接超时等
                raise CompletionProviderError(message=str(e), http_status=503) from e
            if resp.status_code != 200:
                try:
                    await self._raise_provider_error(resp)
                finally:
                    await resp.aclose()
            opened = True
            return UpstreamStream(client, resp)
        finally:
            if not opened:
                await client.aclose()

    @staticmethod
    async def _raise_provider_error(resp: httpx.Response) -> None:
        """把非 200 响应转换为 CompletionProviderError。

        服务端返回 ``{"error": {message, type, param, code}}`` 时原样带出四个字段；
        否则把状态码与原始响应体放进 message。
        """

        body = (await resp.aread()).decode("utf-8", errors="replace")
        try:
            data = json.loads(body)
        except ValueError:
            data = None
        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict):
            logger.error(f"Completion provider error {resp.status_code}: {error.get('message')}")
            raise CompletionProviderError(
                message=error.get("message") or "",
                error_type=error.get("type"),
                param=error.get("param"),
                provider_code=error.get("code"),
                http_status=resp.status_code,
            )
        logger.error(f"Completion provider returned {resp.status_code}: {body[:200]}")
        raise CompletionProviderError(
            message=f"OpenAI API returned an error: {body or resp.reason_phrase}",
            http_status=resp.status_code,
            status=resp.status_code,
        )
