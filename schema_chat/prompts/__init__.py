"""系统提示词构造。

指令模板按语言(locale) 从 prompts/<locale> 目录读取，折叠为一行后，
接上 "Context sections:" 标题与拼装好的上下文，得到 system 消息内容。
不同请求之间只有上下文部分会变化。
"""

from functools import lru_cache
from pathlib import Path


PROMPTS_DIR = Path(__file__).resolve().parent
CONTEXT_HEADER = "Context sections:"


@lru_cache(maxsize=None)
def load_instructions(locale: str = "en") -> str:
    """加载指令模板，并把多行文本折叠为单行。"""

    fname = PROMPTS_DIR / locale / "schema_analyst_system.md"
    return " ".join(fname.read_text(encoding="utf-8").split())


def build_system_prompt(context_text: str, locale: str = "en") -> str:
    """拼出完整的 system 提示词。context_text 为空时只剩指令与标题。"""

    return f"{load_instructions(locale)}\n\n{CONTEXT_HEADER}\n{context_text}"
