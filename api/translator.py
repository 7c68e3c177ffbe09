"""请求/响应转换

OpenAI 风格请求体 <-> 页面侧 generateText 调用参数，纯函数，无副作用。
"""
from typing import Any, Literal, Optional, Union

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from webllm_client.result import Failure, FailureKind, InferenceResult, Success


class InvalidRequestError(Exception):
    """请求体缺失或格式错误"""


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    role: Literal["system", "user", "assistant"]
    # 字符串，或 OpenAI 多段内容 [{type, text, ...}]
    content: Union[str, tuple[dict[str, Any], ...]]


class InferenceRequest(BaseModel):
    """规范化后的聊天请求，构造后不可变"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    messages: tuple[ChatMessage, ...] = Field(min_length=1)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    stream: Optional[bool] = None

    def to_page_args(self) -> dict:
        """页面侧 generateText 的参数（未设置的字段不传）"""
        return self.model_dump(mode="json", exclude_none=True)


# 失败类型 -> (HTTP 状态码, 错误类型)
_ERROR_STATUS = {
    FailureKind.INVALID_REQUEST: (400, "invalid_request_error"),
    FailureKind.ENGINE_NOT_READY: (503, "service_unavailable_error"),
    FailureKind.TORNDOWN: (503, "service_unavailable_error"),
    FailureKind.INITIALIZATION_FAILURE: (500, "internal_server_error"),
    FailureKind.ENGINE_INVOCATION_ERROR: (500, "internal_server_error"),
}


def error_envelope(message: str, error_type: str) -> dict:
    return {"error": {"message": message, "type": error_type}}


def _format_validation_error(e: ValidationError) -> str:
    err = e.errors()[0]
    loc = ".".join(str(p) for p in err["loc"])
    return f"{loc}: {err['msg']}" if loc else err["msg"]


def to_inference_request(body: Any) -> InferenceRequest:
    """把请求体转换为 InferenceRequest

    - messages 数组优先；为空或缺失时使用 prompt 生成一条 user 消息（空数组无 prompt 时内容为空串）
    - system 字符串作为第一条 system 消息插入

    Raises:
        InvalidRequestError: messages 和 prompt 都没有，或字段类型不对
    """
    if not isinstance(body, dict):
        raise InvalidRequestError("Request body must be a JSON object")

    messages = body.get("messages")
    prompt = body.get("prompt")
    system = body.get("system")

    if messages is not None and not isinstance(messages, list):
        raise InvalidRequestError("messages must be an array")
    if system is not None and not isinstance(system, str):
        raise InvalidRequestError("system must be a string")

    if messages is None and prompt is None:
        raise InvalidRequestError("Messages array or prompt is required")

    normalized = list(messages or [])
    if not normalized:
        # 空数组且没有 prompt 时补一条空的 user 消息
        if prompt is not None and not isinstance(prompt, str):
            raise InvalidRequestError("prompt must be a string")
        normalized.append({"role": "user", "content": prompt or ""})

    if system is not None:
        normalized.insert(0, {"role": "system", "content": system})

    try:
        return InferenceRequest(
            messages=normalized,
            max_tokens=body.get("max_tokens"),
            temperature=body.get("temperature"),
            stream=body.get("stream"),
        )
    except ValidationError as e:
        raise InvalidRequestError(_format_validation_error(e)) from e


def to_http_response(result: InferenceResult) -> JSONResponse:
    """把调用结果转换为 HTTP 响应

    Success 原样透传页面返回的内容；Failure 转为 OpenAI 风格错误信封。
    """
    if isinstance(result, Success):
        return JSONResponse(status_code=200, content=result.payload)

    status_code, error_type = _ERROR_STATUS.get(result.kind, (500, "internal_server_error"))
    return JSONResponse(status_code=status_code, content=error_envelope(result.message, error_type))


def invalid_request(message: str) -> Failure:
    return Failure(FailureKind.INVALID_REQUEST, message)
