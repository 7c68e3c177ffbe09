#!/usr/bin/env python3
"""WebLLM Bridge API 服务启动入口

Usage:
    python server.py
    API_PORT=9000 python server.py
    DEBUG=1 WEBLLM_MODEL=Qwen2.5-1.5B-Instruct-q4f16_1-MLC python server.py
"""
import asyncio
import sys

import uvicorn

from webllm_client.config import API_CONFIG
from webllm_client.utils import check_environment, print_banner


def main():
    print_banner()

    problems = asyncio.run(check_environment())
    if problems:
        for problem in problems:
            print(f"✗ {problem}")
        sys.exit(1)

    print(f"""OpenAI 兼容接口: http://{API_CONFIG["host"]}:{API_CONFIG["port"]}
  GET  /v1/models
  POST /v1/chat/completions
  GET  /health""")

    uvicorn.run(
        "api.app:app",
        host=API_CONFIG["host"],
        port=API_CONFIG["port"],
        log_level="info",
    )


if __name__ == "__main__":
    main()
