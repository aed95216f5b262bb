"""检索阶段：审核、向量化、相似度检索与上下文拼装。"""

from schema_chat.retrieval.context import assemble_context, count_tokens
from schema_chat.retrieval.embeddings import EmbeddingClient
from schema_chat.retrieval.moderation import ModerationGuard
from schema_chat.retrieval.search import SimilaritySearchClient

__all__ = [
    "ModerationGuard",
    "EmbeddingClient",
    "SimilaritySearchClient",
    "assemble_context",
    "count_tokens",
]
