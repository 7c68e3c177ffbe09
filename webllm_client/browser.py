"""浏览器核心模块

启动无头 Chromium，加载 web-llm 桥接页面，并提供页面侧轮询和函数调用。
"""
import asyncio
import time
from pathlib import Path
from typing import Any, Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import BRIDGE_PAGE, TIMEOUT, BROWSER_CONFIG, DEBUG


class PollTimeoutError(Exception):
    """页面侧条件在超时时间内未成立"""


# 页面侧统一调用入口：window.webllmProxy[operation](args)
_CALL_SCRIPT = """
async ({ operation, args }) => {
    const proxy = window.webllmProxy;
    if (!proxy || typeof proxy[operation] !== 'function') {
        throw new Error(`webllmProxy.${operation} is not available`);
    }
    return await proxy[operation](args);
}
"""


class WebLLMBrowser:
    """web-llm 浏览器宿主

    独占一个 Chromium 进程和一个页面，页面里运行 web-llm 引擎。
    """

    def __init__(self, page_path: Path = BRIDGE_PAGE):
        self.page_path = page_path
        self.playwright = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    async def launch(self, headless: bool = None) -> None:
        """启动浏览器"""
        if headless is None:
            headless = BROWSER_CONFIG["headless"]

        t_start = time.time()
        print(f"→ 启动浏览器 (headless={headless})...")

        self.playwright = await async_playwright().start()
        self.browser = await self.playwright.chromium.launch(
            headless=headless,
            slow_mo=BROWSER_CONFIG["slow_mo"],
            args=BROWSER_CONFIG["args"],
        )
        self.context = await self.browser.new_context()
        self.page = await self.context.new_page()

        if DEBUG:
            print(f"  [TIMING] 浏览器启动: {time.time() - t_start:.1f}s")
        print("✓ 浏览器已启动")

    async def open_bridge_page(self) -> None:
        """加载桥接页面"""
        if not self.page:
            raise RuntimeError("浏览器页面未创建，请先调用 launch()")

        if DEBUG:
            self.page.on("console", lambda msg: print(f"  [PAGE] {msg.text}"))

        # 模型下载/编译进度回调，页面侧通过 window.__webllmProgress 上报
        await self.page.expose_function("__webllmProgress", self._on_progress)

        url = self.page_path.resolve().as_uri()
        print(f"→ 正在加载桥接页面: {url}")
        await self.page.goto(url, wait_until="domcontentloaded", timeout=TIMEOUT["navigation"])

    def _on_progress(self, report: Any) -> None:
        if not DEBUG:
            return
        if isinstance(report, dict):
            print(f"  [DEBUG] 加载进度 {report.get('progress', 0):.0%}: {report.get('text', '')}")
        else:
            print(f"  [DEBUG] 加载进度: {report}")

    async def wait_for(self, predicate: str, timeout: int = None) -> bool:
        """轮询页面侧条件，直到为真或超时

        Args:
            predicate: 页面侧 JS 函数表达式
            timeout: 超时（毫秒），默认 TIMEOUT["poll"]

        Raises:
            PollTimeoutError: 超时仍未成立
        """
        if not self.page:
            raise RuntimeError("浏览器页面未创建")
        if timeout is None:
            timeout = TIMEOUT["poll"]
        try:
            await self.page.wait_for_function(predicate, timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise PollTimeoutError(f"等待页面条件超时 ({timeout}ms): {predicate}") from e
        return True

    async def call(self, operation: str, args: Any = None, timeout: int = None) -> Any:
        """调用页面侧 webllmProxy 的方法并返回结果

        Args:
            operation: 方法名，如 generateText
            args: 传入的参数（需可 JSON 序列化）
            timeout: 超时（毫秒），默认 TIMEOUT["generation"]
        """
        if not self.page:
            raise RuntimeError("浏览器页面未创建")
        if timeout is None:
            timeout = TIMEOUT["generation"]
        return await asyncio.wait_for(
            self.page.evaluate(_CALL_SCRIPT, {"operation": operation, "args": args}),
            timeout=timeout / 1000,
        )

    async def close(self) -> None:
        """关闭浏览器"""
        try:
            if self.browser:
                await self.browser.close()
        finally:
            if self.playwright:
                await self.playwright.stop()
            self.browser = None
            self.context = None
            self.page = None
            self.playwright = None
        print("✓ 浏览器已关闭")
