"""补全模型配置。

ModelSelector 由两部分组成：这里登记的模型（id 等元数据），
以及 PipelineConfig.provider_kind 决定的请求形态。
gateway 模式下模型由部署名决定，请求体里不会出现 id。"""

from dataclasses import dataclass
from typing import Dict, Mapping


@dataclass(frozen=True)
class OpenAIModel:
    """单个补全模型的配置。"""

    id: str
    name: str
    max_length: int  # 提示词最大字符数，供调用方截断输入
    token_limit: int


GPT_3_5 = OpenAIModel(id="gpt-3.5-turbo", name="GPT-3.5", max_length=12000, token_limit=4000)
GPT_3_5_AZ = OpenAIModel(id="gpt-35-turbo", name="GPT-3.5", max_length=12000, token_limit=4000)
GPT_4 = OpenAIModel(id="gpt-4", name="GPT-4", max_length=24000, token_limit=8000)
GPT_4_32K = OpenAIModel(id="gpt-4-32k", name="GPT-4-32K", max_length=96000, token_limit=32000)


MODEL_REGISTRY: Mapping[str, OpenAIModel] = {
    m.id: m for m in (GPT_3_5, GPT_3_5_AZ, GPT_4, GPT_4_32K)
}


def get_model(model_id: str) -> OpenAIModel:
    """根据 ID 获取模型配置，名称不区分大小写。"""

    key = model_id.lower()
    for k, model in MODEL_REGISTRY.items():
        if k.lower() == key:
            return model
    raise KeyError(f"Unknown model: {model_id!r}")


def available_models() -> Dict[str, str]:
    return {m.id: m.name for m in MODEL_REGISTRY.values()}
