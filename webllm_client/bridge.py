"""web-llm 引擎生命周期管理 + 请求串行化"""
import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from .browser import WebLLMBrowser
from .config import DEFAULT_MODEL, TIMEOUT, PREDICATES, PAGE_OPERATIONS, DEBUG
from .result import Failure, FailureKind, InferenceResult, Success


class BridgeState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


@dataclass
class BridgeSession:
    """浏览器会话的生命周期状态，只由 Bridge 修改"""
    model_id: str
    state: BridgeState = BridgeState.UNINITIALIZED
    handle: Optional[WebLLMBrowser] = None
    last_error: Optional[Failure] = None


class Bridge:
    """web-llm 桥接器

    - 同一时刻最多一个初始化在进行，并发调用者等待同一个结果
    - 通过轮询页面侧条件（poll-until-true-or-timeout）与引擎同步
    - asyncio.Lock 串行化页面调用（一个页面同时只跑一次生成）
    - 失败以 Failure 返回，不向调用方抛出
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        host_factory: Callable[[], Any] = WebLLMBrowser,
        poll_timeout: int = TIMEOUT["poll"],
        call_timeout: int = TIMEOUT["generation"],
        init_timeout: int = TIMEOUT["engine_init"],
    ):
        self._session = BridgeSession(model_id=model)
        self._host_factory = host_factory
        self._poll_timeout = poll_timeout
        self._call_timeout = call_timeout
        self._init_timeout = init_timeout
        self._init_future: Optional[asyncio.Future] = None
        self._init_task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()
        self._request_count = 0

    @property
    def state(self) -> BridgeState:
        return self._session.state

    @property
    def model_id(self) -> str:
        return self._session.model_id

    @property
    def last_error(self) -> Optional[Failure]:
        return self._session.last_error

    @property
    def request_count(self) -> int:
        return self._request_count

    async def initialize(self) -> Optional[Failure]:
        """初始化 web-llm 引擎

        正在初始化时，等待同一个初始化结果，而不是再启动一个浏览器。

        Returns:
            成功返回 None，失败返回 Failure（所有等待者拿到同一个 Failure）
        """
        state = self._session.state
        if state is BridgeState.READY:
            return None
        if state is BridgeState.FAILED:
            return self._session.last_error

        if self._init_future is None:
            self._init_future = asyncio.get_running_loop().create_future()
            self._session.state = BridgeState.INITIALIZING
            self._init_task = asyncio.create_task(self._run_initialize(self._init_future))

        # shield: 单个等待者被取消不影响其他等待者
        return await asyncio.shield(self._init_future)

    async def _run_initialize(self, outcome: asyncio.Future) -> None:
        session = self._session
        t_start = time.time()
        print(f"→ 初始化 web-llm 引擎 (model={session.model_id})...")

        try:
            host = self._host_factory()
            session.handle = host
            await host.launch()
            await host.open_bridge_page()

            if DEBUG:
                print("  [DEBUG] 等待 webllmProxy 定义...")
            await host.wait_for(PREDICATES["proxy_defined"], timeout=self._poll_timeout)

            if DEBUG:
                print(f"  [DEBUG] 加载模型: {session.model_id}")
            await host.call("initialize", {"model": session.model_id}, timeout=self._init_timeout)

            await host.wait_for(PREDICATES["engine_ready"], timeout=self._poll_timeout)
        except Exception as e:
            print(f"✗ web-llm 引擎初始化失败: {e}")
        else:
            session.state = BridgeState.READY
            session.last_error = None
            if DEBUG:
                print(f"  [TIMING] 引擎初始化: {time.time() - t_start:.1f}s")
            print("✓ web-llm 引擎就绪")
            if not outcome.done():
                outcome.set_result(None)
        finally:
            # teardown 已先写入 Torndown；其余未成功的退出路径一律记为 Failed
            if not outcome.done():
                failure = Failure(FailureKind.INITIALIZATION_FAILURE, "WebLLM engine failed to initialize")
                session.state = BridgeState.FAILED
                session.last_error = failure
                outcome.set_result(failure)
                await self._close_handle()

    async def is_ready(self, timeout: int = None) -> bool:
        """引擎当前是否可用

        未就绪直接返回 False；已就绪时重新轮询页面侧 isReady()（引擎可能已失效）。
        超时或异常均视为 False，不抛出。
        """
        handle = self._session.handle
        if self._session.state is not BridgeState.READY or handle is None:
            return False
        try:
            return bool(await handle.wait_for(
                PREDICATES["engine_ready"],
                timeout=timeout if timeout is not None else self._poll_timeout,
            ))
        except Exception as e:
            if DEBUG:
                print(f"  [DEBUG] 就绪检查失败: {e}")
            return False

    async def invoke(self, operation: str, args: Any = None) -> InferenceResult:
        """在页面中调用 webllmProxy[operation](args)

        调用前必须已完成 initialize()，由调用方保证顺序。
        """
        if operation not in PAGE_OPERATIONS:
            return Failure(FailureKind.ENGINE_INVOCATION_ERROR, f"Unsupported engine operation: {operation}")

        async with self._lock:
            if not await self.is_ready():
                return Failure(FailureKind.ENGINE_NOT_READY, "WebLLM engine is not ready")

            t_start = time.time()
            try:
                result = await self._session.handle.call(operation, args, timeout=self._call_timeout)
            except Exception as e:
                print(f"✗ 页面调用 {operation} 失败: {e!r}")
                return Failure(FailureKind.ENGINE_INVOCATION_ERROR, "WebLLM engine failed to generate a response")

            self._request_count += 1
            if DEBUG:
                print(f"  [TIMING] Bridge.invoke({operation}) 耗时: {time.time() - t_start:.1f}s")
            return Success(result)

    async def teardown(self) -> None:
        """关闭浏览器会话，状态回到 Uninitialized

        初始化进行中调用也是安全的：等待者会收到 Torndown 失败。
        """
        print("→ Bridge 关闭中...")
        outcome, task = self._init_future, self._init_task
        try:
            if outcome is not None and not outcome.done():
                outcome.set_result(Failure(FailureKind.TORNDOWN, "WebLLM engine was shut down"))
            if task is not None and not task.done():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
        finally:
            await self._close_handle()
            self._init_future = None
            self._init_task = None
            self._session.state = BridgeState.UNINITIALIZED
            self._session.last_error = None
        print("✓ Bridge 已关闭")

    async def restart(self) -> Optional[Failure]:
        """重启引擎：teardown + initialize，用于从 Failed 恢复"""
        print("→ Bridge 重启中...")
        await self.teardown()
        return await self.initialize()

    async def _close_handle(self) -> None:
        handle, self._session.handle = self._session.handle, None
        if handle is None:
            return
        try:
            await handle.close()
        except Exception as e:
            print(f"  [WARN] 关闭浏览器失败: {e}")
