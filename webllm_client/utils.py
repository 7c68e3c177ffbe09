"""工具函数"""
from datetime import datetime, timezone
from pathlib import Path

from playwright.async_api import async_playwright

from .config import BRIDGE_PAGE


def iso_timestamp() -> str:
    """当前 UTC 时间，ISO 8601 格式（毫秒精度，Z 结尾）"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def check_environment() -> list[str]:
    """启动前检查运行环境，返回问题列表（为空表示正常）"""
    problems = []
    if not BRIDGE_PAGE.exists():
        problems.append(f"找不到桥接页面: {BRIDGE_PAGE}")

    async with async_playwright() as p:
        executable = p.chromium.executable_path
    if not executable or not Path(executable).exists():
        problems.append("未安装 Chromium，请先运行: playwright install chromium")
    return problems


def print_banner():
    """打印启动横幅"""
    banner = """
╔═══════════════════════════════════════╗
║           WebLLM Bridge               ║
║   浏览器内 web-llm 的 OpenAI 兼容接口 ║
╚═══════════════════════════════════════╝
    """
    print(banner)
