"""补全 Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口与共用请求流程 (base)。
- 维护可用的补全模型 (registry)。
- 提供两种请求形态的实现 (openai_client 直连、azure_client 网关)。
"""

from typing import Optional

import httpx

from schema_chat.config.pipeline import PipelineConfig
from schema_chat.providers.base import CompletionClient
from schema_chat.providers.openai_client import OpenAIClient
from schema_chat.providers.azure_client import AzureClient


def create_provider(
    config: PipelineConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> CompletionClient:
    """根据 provider_kind 创建补全客户端。"""

    if config.provider_kind == "gateway":
        return AzureClient(config, transport=transport)
    return OpenAIClient(config, transport=transport)
