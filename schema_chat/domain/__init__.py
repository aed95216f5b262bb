"""领域层模型。

包含：
- models: ChatMessage / ContextRecord / AssembledContext 等数据结构。
- exceptions: 业务异常类型定义。
"""
