"""按 token 预算拼装上下文。

依次遍历检索结果：先把当前片段的 token 数累加到计数器，再检查上限；
计数器一旦达到或超过上限就停止，当前片段不纳入。
因此第一条片段本身就超限时，结果为空字符串（不是错误）。
"""

from functools import lru_cache
from typing import Callable, Iterable, List, Optional

import tiktoken

from schema_chat.domain.models import AssembledContext, ContextRecord
from schema_chat.infrastructure.logging.logger import logger


CONTEXT_TOKEN_LIMIT = 1500
CONTEXT_SEPARATOR = "\n---\n"

# GPT-3 系列的 BPE 编码
TOKENIZER_ENCODING = "r50k_base"

TokenCounter = Callable[[str], int]


@lru_cache(maxsize=None)
def _encoding() -> "tiktoken.Encoding":
    return tiktoken.get_encoding(TOKENIZER_ENCODING)


def count_tokens(text: str) -> int:
    """返回 text 在 GPT-3 分词器下的 token 数。"""

    return len(_encoding().encode(text, disallowed_special=()))


def assemble_context(
    records: Iterable[ContextRecord],
    token_counter: Optional[TokenCounter] = None,
    limit: int = CONTEXT_TOKEN_LIMIT,
) -> AssembledContext:
    counter = token_counter or count_tokens
    token_count = 0
    included_tokens = 0
    parts: List[str] = []

    for record in records:
        tokens = counter(record.content)
        token_count += tokens
        if token_count >= limit:
            break
        included_tokens += tokens
        parts.append(f"{record.content.strip()}{CONTEXT_SEPARATOR}")

    logger.info(f"Assembled {len(parts)} context records ({included_tokens} tokens)")
    return AssembledContext(text="".join(parts), records_used=len(parts), tokens_used=included_tokens)
