from __future__ import annotations

import asyncio
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from webllm_client.bridge import Bridge
from webllm_client.browser import PollTimeoutError
from webllm_client.config import PREDICATES

COMPLETION = {
    "id": "chatcmpl-1",
    "object": "chat.completion",
    "choices": [{"index": 0, "message": {"role": "assistant", "content": "hello"}, "finish_reason": "stop"}],
}


class FakeHost:
    """In-memory stand-in for WebLLMBrowser."""

    def __init__(self, farm: "HostFarm") -> None:
        self.farm = farm
        self.ready = True
        self.closed = False
        self.calls: list[tuple[str, Any]] = []

    async def launch(self) -> None:
        await asyncio.sleep(0)
        if self.farm.launch_error:
            raise RuntimeError(self.farm.launch_error)

    async def open_bridge_page(self) -> None:
        await asyncio.sleep(0)

    async def wait_for(self, predicate: str, timeout: Optional[int] = None) -> bool:
        await asyncio.sleep(0)
        if predicate == PREDICATES["proxy_defined"] and not self.farm.proxy_defined:
            raise PollTimeoutError(f"timed out after {timeout}ms")
        if predicate == PREDICATES["engine_ready"] and not (self.ready and self.farm.engine_ready):
            raise PollTimeoutError(f"timed out after {timeout}ms")
        return True

    async def call(self, operation: str, args: Any = None, timeout: Optional[int] = None) -> Any:
        self.calls.append((operation, args))
        if operation == "initialize":
            self.farm.initialize_entered.set()
            if self.farm.initialize_gate is not None:
                await self.farm.initialize_gate.wait()
            if self.farm.initialize_error:
                raise RuntimeError(self.farm.initialize_error)
            return None
        if self.farm.generate_error:
            raise RuntimeError(self.farm.generate_error)
        return self.farm.reply

    async def close(self) -> None:
        self.closed = True


class HostFarm:
    """Host factory that records every host it launches."""

    def __init__(self) -> None:
        self.hosts: list[FakeHost] = []
        self.launch_error: Optional[str] = None
        self.initialize_error: Optional[str] = None
        self.generate_error: Optional[str] = None
        self.proxy_defined = True
        self.engine_ready = True
        self.initialize_gate: Optional[asyncio.Event] = None
        self.initialize_entered = asyncio.Event()
        self.reply: Any = COMPLETION

    def __call__(self) -> FakeHost:
        host = FakeHost(self)
        self.hosts.append(host)
        return host


@pytest.fixture
def farm() -> HostFarm:
    return HostFarm()


@pytest.fixture
def bridge(farm: HostFarm) -> Bridge:
    return Bridge(model="test-model", host_factory=farm, poll_timeout=50, call_timeout=50)


@pytest.fixture
def client(bridge: Bridge):
    with TestClient(create_app(bridge)) as c:
        yield c
