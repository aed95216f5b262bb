"""OpenAI 直连（direct）适配器。

- URL: {api_host}/v1/chat/completions
- 认证: Authorization: Bearer <api_key>
- 配置了组织 ID 时附加 OpenAI-Organization 请求头
- 请求体携带 model 字段
"""

from typing import Dict

from schema_chat.providers.base import BaseCompletionClient


class OpenAIClient(BaseCompletionClient):
    """OpenAI 直连客户端。"""

    name = "openai"
    include_model = True

    def build_url(self) -> str:
        return f"{self._config.api_host}/v1/chat/completions"

    def build_headers(self, api_key: str) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }
        if self._config.organization_id:
            headers["OpenAI-Organization"] = self._config.organization_id
        return headers
