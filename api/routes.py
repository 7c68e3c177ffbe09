"""API 路由"""
import time

from fastapi import APIRouter, Depends, Request

from webllm_client import __version__
from webllm_client.bridge import Bridge, BridgeState
from webllm_client.config import TIMEOUT, DEBUG
from webllm_client.utils import iso_timestamp
from .models import HealthResponse, ModelCard, RestartResponse, model_catalog
from .translator import (
    InvalidRequestError,
    invalid_request,
    to_http_response,
    to_inference_request,
)

router = APIRouter()


def get_bridge(request: Request) -> Bridge:
    """Bridge 实例由 create_app() 挂在 app.state 上"""
    return request.app.state.bridge


@router.post("/v1/chat/completions")
async def chat_completions(request: Request, bridge: Bridge = Depends(get_bridge)):
    t_start = time.time()

    # 先校验请求体，格式错误不触发引擎初始化
    try:
        body = await request.json()
    except ValueError:
        return to_http_response(invalid_request("Request body must be valid JSON"))
    try:
        inference = to_inference_request(body)
    except InvalidRequestError as e:
        return to_http_response(invalid_request(str(e)))

    # 首个请求负责懒初始化；初始化中的请求等待同一个结果
    if bridge.state is not BridgeState.READY:
        failure = await bridge.initialize()
        if failure is not None:
            return to_http_response(failure)

    if DEBUG:
        print(f"  [DEBUG] 请求消息: {[m.role for m in inference.messages]}")

    result = await bridge.invoke("generateText", inference.to_page_args())
    print(f"  [TIMING] /v1/chat/completions 端到端总耗时: {time.time() - t_start:.1f}s")
    return to_http_response(result)


@router.get("/v1/models", response_model=list[ModelCard])
async def list_models():
    return model_catalog()


@router.get("/health", response_model=HealthResponse)
async def health(bridge: Bridge = Depends(get_bridge)):
    # 只探活，不触发初始化
    ready = await bridge.is_ready(timeout=TIMEOUT["health_probe"])
    return HealthResponse(
        status="healthy",
        webllm_initialized=ready,
        timestamp=iso_timestamp(),
    )


@router.post("/v1/restart", response_model=RestartResponse)
async def restart(bridge: Bridge = Depends(get_bridge)):
    failure = await bridge.restart()
    if failure is not None:
        return to_http_response(failure)
    return RestartResponse(status="ok", message="WebLLM engine restarted")


@router.get("/")
async def root(bridge: Bridge = Depends(get_bridge)):
    return {
        "name": "WebLLM Bridge API",
        "version": __version__,
        "description": "OpenAI-compatible API backed by web-llm running in a headless browser",
        "model": bridge.model_id,
        "state": bridge.state.value,
        "request_count": bridge.request_count,
        "endpoints": {
            "models": "GET /v1/models",
            "chat_completions": "POST /v1/chat/completions",
            "health": "GET /health",
            "restart": "POST /v1/restart",
        },
    }
