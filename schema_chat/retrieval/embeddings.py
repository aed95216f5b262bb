"""查询向量化。"""

from typing import Optional

import httpx

from schema_chat.config.pipeline import PipelineConfig
from schema_chat.domain.exceptions import EmbeddingProviderError
from schema_chat.domain.models import EmbeddingVector
from schema_chat.infrastructure.logging.logger import logger


EMBEDDING_MODEL = "text-embedding-ada-002"


class EmbeddingClient:
    """调用 {api_host}/v1/embeddings，把查询文本转换为一个向量。"""

    def __init__(self, config: PipelineConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._config = config
        self._transport = transport

    async def embed(self, text: str, api_key: str) -> EmbeddingVector:
        try:
            async with httpx.AsyncClient(
                timeout=self._config.http_timeout,
                trust_env=False,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    f"{self._config.api_host}/v1/embeddings",
                    json={"model": EMBEDDING_MODEL, "input": text},
                    headers={
                        "Content-Type": "application/json",
                        "Authorization": f"Bearer {api_key}",
                    },
                )
        except httpx.RequestError as e:
            raise EmbeddingProviderError(code="EMBEDDING_ERROR", message=str(e), http_status=503) from e
        if resp.status_code >= 400:
            raise EmbeddingProviderError(
                code="EMBEDDING_ERROR",
                message=f"Failed to create embedding: {resp.text}",
                http_status=resp.status_code,
            )
        try:
            embedding = resp.json()["data"][0]["embedding"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise EmbeddingProviderError(
                code="EMBEDDING_ERROR",
                message=f"Malformed embedding response: {e!r}",
                http_status=502,
            ) from e
        if not isinstance(embedding, list) or not embedding:
            raise EmbeddingProviderError(
                code="EMBEDDING_ERROR",
                message="Malformed embedding response: empty or non-list embedding",
                http_status=502,
            )

        try:
            vector = [float(x) for x in embedding]
        except (TypeError, ValueError) as e:
            raise EmbeddingProviderError(
                code="EMBEDDING_ERROR",
                message=f"Malformed embedding response: non-numeric component ({e})",
                http_status=502,
            ) from e

        logger.info(f"Embedding Length: {len(vector)}")
        return vector
