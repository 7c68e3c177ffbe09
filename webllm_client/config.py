"""配置管理"""
import os
from pathlib import Path

# 包目录
PACKAGE_DIR = Path(__file__).parent

# 桥接页面（在浏览器中加载 web-llm 并暴露 window.webllmProxy）
BRIDGE_PAGE = PACKAGE_DIR / "static" / "webllm-proxy.html"

# 环境变量配置
DEBUG = os.getenv("DEBUG", "0") == "1"
SLOW_MO = int(os.getenv("SLOW_MO", "0"))

# 默认模型（需在 web-llm 预置模型列表中）
DEFAULT_MODEL = os.getenv("WEBLLM_MODEL", "Llama-3.2-1B-Instruct-q4f32_1-MLC")

# 超时配置（毫秒）
TIMEOUT = {
    "navigation": 30000,      # 桥接页面加载超时
    "poll": 60000,            # 页面侧条件轮询超时（proxy 定义 / 引擎就绪）
    "engine_init": 600000,    # 页面侧 initialize 超时（含模型下载和编译）
    "health_probe": 5000,     # /health 探活超时
    "generation": 120000,     # 单次页面调用超时（生成文本）
}

# 页面侧条件（page.wait_for_function 轮询）
PREDICATES = {
    "proxy_defined": "() => window.webllmProxy !== undefined",
    "engine_ready": "() => window.webllmProxy.isReady()",
}

# 允许通过 Bridge.invoke 调用的页面侧操作
# initialize 由 Bridge 生命周期独占，不对外开放
PAGE_OPERATIONS = frozenset({"generateText", "getModel", "setModel", "isReady"})

# 浏览器配置
BROWSER_CONFIG = {
    "headless": os.getenv("HEADLESS", "1") != "0",
    "slow_mo": SLOW_MO,
    "args": [
        "--disable-web-security",
        "--disable-features=VizDisplayCompositor",
        "--enable-unsafe-webgpu",
        "--enable-features=Vulkan",
        "--no-sandbox",
        "--disable-dev-shm-usage",
    ],
}

# API 服务配置
API_CONFIG = {
    "host": os.getenv("API_HOST", "localhost"),
    "port": int(os.getenv("API_PORT", "15408")),
}
