"""配置管理模块。

支持从 .env、config.yaml 以及环境变量加载配置。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("SCHEMA_CHAT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
        Path(__file__).resolve().parents[1] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- 补全服务（OpenAI / Azure OpenAI） ----
    openai_api_host: str = Field(
        default="https://api.openai.com",
        description="OpenAI 或 Azure OpenAI 的服务地址",
    )
    openai_api_type: Literal["openai", "azure"] = Field(
        default="openai",
        description="openai 直连；azure 走网关部署",
    )
    openai_api_version: str = Field(default="2023-03-15-preview", description="Azure api-version 查询参数")
    openai_organization: str = Field(default="", description="OpenAI-Organization 请求头")
    azure_deployment_id: str = Field(default="", description="Azure 部署名")
    openai_api_key: Optional[str] = Field(default=None, description="调用方未传 key 时使用的默认密钥")

    default_model: str = Field(default="gpt-3.5-turbo", description="默认补全模型 ID")
    default_temperature: float = Field(default=1.0, ge=0.0, le=2.0)

    # ---- 向量库（Supabase / PostgREST RPC） ----
    supabase_url: str = Field(default="", description="向量库 REST 地址")
    supabase_service_role_key: str = Field(default="", description="向量库服务端密钥")

    # ---- 管道行为 ----
    moderation_failure_mode: Literal["permissive", "strict"] = Field(
        default="permissive",
        description="审核接口本身出错时：permissive 放行，strict 中断",
    )
    http_timeout: float = Field(default=30.0, ge=1.0, description="HTTP 超时时间（秒）")
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("openai_api_key")
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        if v and len(v) < 10:
            raise ValueError("API key seems too short")
        return v

    @field_validator("openai_api_host", "supabase_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
