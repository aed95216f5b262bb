"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在 API 层统一捕获与用户提示。

管道中除审核接口故障（permissive 模式下仅记录日志）外，
其余错误都是致命的：流开始之前直接抛出；流开始之后通过
ByteChannel 交给消费者，在下一次 read() 时抛出。
"""

from typing import Optional


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "RETRIEVAL_ERROR"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 provider、status 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class ValidationError(BusinessError):
    """参数或配置校验失败。"""


class ContentPolicyViolation(BusinessError):
    """审核接口判定输入违规。text 保存被拦截的原文。"""

    def __init__(self, text: str):
        super().__init__(
            code="CONTENT_FLAGGED",
            message="Your query was flagged as inappropriate",
            http_status=400,
        )
        self.text = text


class ModerationUnavailableError(BusinessError):
    """审核接口本身不可用（仅 strict 模式抛出）。"""


class EmbeddingProviderError(BusinessError):
    """向量化接口返回非 2xx 或响应缺少 embedding。"""


class RetrievalError(BusinessError):
    """向量库 RPC 调用失败。"""


class CompletionProviderError(BusinessError):
    """补全接口返回错误。

    当服务端返回 ``{"error": {...}}`` 时，error_type / param / provider_code
    分别对应其中的 type / param / code 字段；否则只有 message 携带
    原始状态与响应体。
    """

    def __init__(
        self,
        message: str,
        error_type: Optional[str] = None,
        param: Optional[str] = None,
        provider_code: Optional[str] = None,
        http_status: int = 502,
        **extra,
    ):
        super().__init__(code="COMPLETION_ERROR", message=message, http_status=http_status, **extra)
        self.error_type = error_type
        self.param = param
        self.provider_code = provider_code


class StreamParseError(BusinessError):
    """流式响应中的事件无法解析。只会经由输出通道交给消费者。"""
