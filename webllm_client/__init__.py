"""WebLLM Bridge - 无头浏览器内 web-llm 引擎的桥接层"""
from .bridge import Bridge, BridgeSession, BridgeState
from .browser import WebLLMBrowser, PollTimeoutError
from .config import DEBUG, DEFAULT_MODEL
from .result import Failure, FailureKind, InferenceResult, Success

__all__ = [
    'Bridge', 'BridgeSession', 'BridgeState',
    'WebLLMBrowser', 'PollTimeoutError',
    'Failure', 'FailureKind', 'InferenceResult', 'Success',
    'DEBUG', 'DEFAULT_MODEL',
]
__version__ = '0.1.0'
