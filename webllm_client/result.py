"""调用结果类型"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class FailureKind(str, Enum):
    INVALID_REQUEST = "invalid_request"
    ENGINE_NOT_READY = "engine_not_ready"
    INITIALIZATION_FAILURE = "initialization_failure"
    ENGINE_INVOCATION_ERROR = "engine_invocation_error"
    TORNDOWN = "torndown"


@dataclass(frozen=True)
class Success:
    payload: Any


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str


InferenceResult = Union[Success, Failure]
