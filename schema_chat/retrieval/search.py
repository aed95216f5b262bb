"""向量库相似度检索。

向量库以 PostgREST RPC 的形式暴露 match_schema 函数：
POST {vector_store_url}/rest/v1/rpc/match_schema
失败时返回 ``{"message": ..., "code": ..., "details": ..., "hint": ...}``。
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from schema_chat.config.pipeline import PipelineConfig
from schema_chat.domain.exceptions import RetrievalError
from schema_chat.domain.models import ContextRecord, EmbeddingVector
from schema_chat.infrastructure.logging.logger import logger


@dataclass(frozen=True)
class SearchParams:
    """固定的检索参数。"""

    match_threshold: float = 0.1
    match_count: int = 10
    min_content_length: int = 10


DEFAULT_SEARCH_PARAMS = SearchParams()


class SimilaritySearchClient:
    """match_schema RPC 客户端。"""

    function_name = "match_schema"

    def __init__(
        self,
        config: PipelineConfig,
        params: SearchParams = DEFAULT_SEARCH_PARAMS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._config = config
        self._params = params
        self._transport = transport

    async def search(self, embedding: EmbeddingVector) -> List[ContextRecord]:
        if not self._config.vector_store_url:
            raise RetrievalError(code="RETRIEVAL_ERROR", message="Vector store URL not configured", http_status=500)
        body = {
            "embedding": embedding,
            "match_threshold": self._params.match_threshold,
            "match_count": self._params.match_count,
            "min_content_length": self._params.min_content_length,
        }
        key = self._config.vector_store_key
        try:
            async with httpx.AsyncClient(
                timeout=self._config.http_timeout,
                trust_env=False,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    f"{self._config.vector_store_url}/rest/v1/rpc/{self.function_name}",
                    json=body,
                    headers={
                        "Content-Type": "application/json",
                        "apikey": key,
                        "Authorization": f"Bearer {key}",
                    },
                )
        except httpx.RequestError as e:
            raise RetrievalError(code="RETRIEVAL_ERROR", message=f"Failed to match schema: {e}", http_status=503) from e

        try:
            data = resp.json()
        except ValueError:
            data = None
        if resp.status_code >= 400:
            detail = data.get("message") if isinstance(data, dict) else None
            raise RetrievalError(
                code="RETRIEVAL_ERROR",
                message=f"Failed to match schema: {detail or resp.text}",
                http_status=resp.status_code,
            )
        if not isinstance(data, list):
            raise RetrievalError(
                code="RETRIEVAL_ERROR",
                message="Failed to match schema: unexpected response shape",
                http_status=502,
            )

        records = [self._to_record(item) for item in data]
        logger.info(f"Matched {len(records)} schema records")
        return records

    @staticmethod
    def _to_record(item: Dict[str, Any]) -> ContextRecord:
        if not isinstance(item, dict) or "content" not in item:
            raise RetrievalError(
                code="RETRIEVAL_ERROR",
                message="Failed to match schema: record without content",
                http_status=502,
            )
        try:
            similarity = float(item.get("similarity") or 0.0)
        except (TypeError, ValueError) as e:
            raise RetrievalError(
                code="RETRIEVAL_ERROR",
                message=f"Failed to match schema: non-numeric similarity ({e})",
                http_status=502,
            ) from e
        return ContextRecord(content=str(item["content"] or ""), similarity=similarity)
