"""Azure OpenAI（gateway）适配器。

与直连接口的区别：
- URL 中带部署名，并通过 api-version 查询参数指定版本：
  {api_host}/openai/deployments/{deployment_id}/chat/completions?api-version={api_version}
- 认证使用 api-key 请求头，而不是 Bearer token。
- 模型由部署决定，请求体里不带 model 字段。
"""

from typing import Dict

from schema_chat.domain.exceptions import ValidationError
from schema_chat.providers.base import BaseCompletionClient


class AzureClient(BaseCompletionClient):
    """Azure OpenAI 部署客户端。"""

    name = "azure"
    include_model = False

    def build_url(self) -> str:
        if not self._config.deployment_id:
            raise ValidationError(code="MISSING_DEPLOYMENT", message="AZURE_DEPLOYMENT_ID not set")
        return (
            f"{self._config.api_host}/openai/deployments/{self._config.deployment_id}"
            f"/chat/completions?api-version={self._config.api_version}"
        )

    def build_headers(self, api_key: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "api-key": api_key,
        }
