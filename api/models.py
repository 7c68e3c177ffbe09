"""请求/响应数据模型"""
import time

from pydantic import BaseModel


class ModelCard(BaseModel):
    id: str
    object: str = "model"
    created: int
    owned_by: str = "web-llm"


class HealthResponse(BaseModel):
    status: str
    webllm_initialized: bool
    timestamp: str


class RestartResponse(BaseModel):
    status: str
    message: str


# web-llm 预编译模型（MLC 格式）
MODEL_IDS = [
    # Llama
    "Llama-3-8B-Instruct-q4f32_1-MLC",
    "Llama-3.1-70B-Instruct-q4f16_1-MLC",
    "Llama-3.1-8B-q4f32_1-MLC",
    "Llama-3.1-8B-Instruct-q4f32_1-MLC",
    "Llama-3.2-1B-Instruct-q4f32_1-MLC",
    "Llama-3.2-3B-Instruct-q4f32_1-MLC",
    # Hermes
    "Hermes-2-Pro-Llama-3-8B-q4f16_1-MLC",
    "Hermes-2-Theta-Llama-3-70B-q4f16_1-MLC",
    "Hermes-2-Theta-Llama-3-8B-q4f16_1-MLC",
    "Hermes-3-Llama-3.1-8B-q4f16_1-MLC",
    "Hermes-3-Llama-3.2-3B-q4f16_1-MLC",
    # Phi
    "Phi-3-mini-128k-instruct-q4f16_1-MLC",
    "Phi-3.5-mini-instruct-q4f16_1-MLC",
    "Phi-3.5-vision-instruct-q4f16_1-MLC",
    # Qwen
    "Qwen1.5-0.5B-Chat-q4f16_1-MLC",
    "Qwen1.5-1.8B-Chat-q4f16_1-MLC",
    "Qwen1.5-4B-Chat-q4f16_1-MLC",
    "Qwen1.5-7B-Chat-q4f16_1-MLC",
    "Qwen2-0.5B-Instruct-q4f16_1-MLC",
    "Qwen2-1.5B-Instruct-q4f16_1-MLC",
    "Qwen2-7B-Instruct-q4f16_1-MLC",
    "Qwen2.5-0.5B-Instruct-q4f16_1-MLC",
    "Qwen2.5-1.5B-Instruct-q4f16_1-MLC",
    "Qwen2.5-3B-Instruct-q4f16_1-MLC",
    "Qwen2.5-7B-Instruct-q4f16_1-MLC",
    "Qwen3-0.5B-Instruct-q4f16_1-MLC",
    "Qwen2-Math-7B-Instruct-q4f16_1-MLC",
    "Qwen2.5-Coder-7B-Instruct-q4f16_1-MLC",
    # Mistral
    "Mistral-7B-Instruct-v0.3-q4f16_1-MLC",
    "Mixtral-8x7B-Instruct-q4f16_1-MLC",
    # DeepSeek
    "DeepSeek-R1-Distill-Qwen-1.5B-q4f16_1-MLC",
    "DeepSeek-R1-Distill-Qwen-7B-q4f16_1-MLC",
    # QwQ
    "QwQ-32B-Preview-q4f16_1-MLC",
    # SmolLM
    "SmolLM-135M-Instruct-q4f16_1-MLC",
    "SmolLM-360M-Instruct-q4f16_1-MLC",
    "SmolLM-1.7B-Instruct-q4f16_1-MLC",
    # Gemma
    "Gemma-2-2B-it-q4f16_1-MLC",
    "Gemma-2-9B-it-q4f16_1-MLC",
    # InternLM
    "InternLM2.5-7B-Chat-q4f16_1-MLC",
]


def model_catalog() -> list[ModelCard]:
    created = int(time.time())
    return [ModelCard(id=model_id, created=created) for model_id in MODEL_IDS]
