"""单次请求使用的管道配置。

Settings 是进程级的环境配置；PipelineConfig 则是显式构造、
显式传入 stream_chat 的值对象，测试里可以直接构造，不依赖环境变量。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from schema_chat.domain.exceptions import ValidationError


ProviderKind = Literal["direct", "gateway"]
ModerationFailureMode = Literal["permissive", "strict"]

# Settings.openai_api_type -> ProviderKind
_API_TYPE_TO_KIND = {"openai": "direct", "azure": "gateway"}


@dataclass
class PipelineConfig:
    """补全服务、向量库与审核策略的配置。

    Attributes:
        api_host: 补全/审核/向量化服务地址（不带结尾斜杠）。
        provider_kind: direct 直连 OpenAI；gateway 走 Azure 部署。
        deployment_id: gateway 模式下 URL 中的部署名。
        api_version: gateway 模式下的 api-version 查询参数。
        organization_id: direct 模式下可选的组织 ID。
        api_key: 调用方未提供 key 时的兜底密钥。
        vector_store_url: 向量库 REST 地址。
        vector_store_key: 向量库服务端密钥。
        moderation_failure_mode: 审核接口故障时是否放行。
        http_timeout: 单次 HTTP 调用超时（秒）。
    """

    api_host: str = "https://api.openai.com"
    provider_kind: ProviderKind = "direct"
    deployment_id: str = ""
    api_version: str = "2023-03-15-preview"
    organization_id: str = ""
    api_key: Optional[str] = None
    vector_store_url: str = ""
    vector_store_key: str = ""
    moderation_failure_mode: ModerationFailureMode = "permissive"
    http_timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.provider_kind not in ("direct", "gateway"):
            raise ValidationError(code="INVALID_CONFIG", message=f"Unknown provider kind: {self.provider_kind!r}")
        if self.moderation_failure_mode not in ("permissive", "strict"):
            raise ValidationError(
                code="INVALID_CONFIG",
                message=f"Unknown moderation failure mode: {self.moderation_failure_mode!r}",
            )
        self.api_host = self.api_host.rstrip("/")
        self.vector_store_url = self.vector_store_url.rstrip("/")

    @classmethod
    def from_settings(cls, cfg=None) -> "PipelineConfig":
        """从 Settings（默认全局 settings）构造配置。"""

        if cfg is None:
            from schema_chat.config.settings import settings as cfg
        return cls(
            api_host=cfg.openai_api_host,
            provider_kind=_API_TYPE_TO_KIND[cfg.openai_api_type],
            deployment_id=cfg.azure_deployment_id,
            api_version=cfg.openai_api_version,
            organization_id=cfg.openai_organization,
            api_key=cfg.openai_api_key,
            vector_store_url=cfg.supabase_url,
            vector_store_key=cfg.supabase_service_role_key,
            moderation_failure_mode=cfg.moderation_failure_mode,
            http_timeout=cfg.http_timeout,
        )
