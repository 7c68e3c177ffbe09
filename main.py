#!/usr/bin/env python3
"""
WebLLM Bridge - 命令行直连浏览器内的 web-llm 引擎

Usage:
    # 单次提问
    python main.py "你好，介绍一下你自己"

    # 指定系统提示词和模型
    WEBLLM_MODEL=Qwen2.5-1.5B-Instruct-q4f16_1-MLC python main.py -s "回答尽量简短" "什么是 WebGPU"

    # 调试模式（打印加载进度和页面日志）
    DEBUG=1 python main.py "你好"

    # 交互模式
    python main.py --interactive
    python main.py -i
"""
import argparse
import asyncio
from typing import Optional

from api.translator import InvalidRequestError, to_inference_request
from webllm_client import Bridge, Failure, DEFAULT_MODEL
from webllm_client.utils import print_banner


def extract_text(payload) -> str:
    """从页面返回的 chat completion 中取出回复文本"""
    if isinstance(payload, str):
        return payload
    try:
        return payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return str(payload)


async def ask(bridge: Bridge, body: dict) -> Optional[str]:
    try:
        request = to_inference_request(body)
    except InvalidRequestError as e:
        print(f"✗ 请求无效: {e}")
        return None

    result = await bridge.invoke("generateText", request.to_page_args())
    if isinstance(result, Failure):
        print(f"✗ 生成失败: {result.message}")
        return None
    return extract_text(result.payload)


async def single_query(prompt: str, system: Optional[str]):
    """单次提问"""
    bridge = Bridge()
    try:
        failure = await bridge.initialize()
        if failure:
            print(f"✗ {failure.message}")
            return

        body = {"prompt": prompt}
        if system:
            body["system"] = system
        response = await ask(bridge, body)
        if response is None:
            return

        print("\n" + "=" * 50)
        print("AI 回复:")
        print("=" * 50)
        print(response)
        print("=" * 50)

    finally:
        await bridge.teardown()


async def interactive_mode(system: Optional[str]):
    """交互模式"""
    bridge = Bridge()
    try:
        failure = await bridge.initialize()
        if failure:
            print(f"✗ {failure.message}")
            return

        history: list[dict] = []

        print("\n" + "=" * 50)
        print(f"进入交互模式 (model={bridge.model_id})")
        print("输入 'quit' 或 'exit' 退出")
        print("输入 'new' 开启新对话")
        print("=" * 50 + "\n")

        while True:
            try:
                prompt = input("You: ").strip()

                if not prompt:
                    continue

                if prompt.lower() in ('quit', 'exit', 'q'):
                    print("Bye!")
                    break

                if prompt.lower() == 'new':
                    history.clear()
                    print("✓ 已开启新对话\n")
                    continue

                history.append({"role": "user", "content": prompt})
                body = {"messages": history}
                if system:
                    body["system"] = system

                response = await ask(bridge, body)
                if response is None:
                    history.pop()
                    continue

                history.append({"role": "assistant", "content": response})
                print(f"\nAI: {response}\n")

            except KeyboardInterrupt:
                print("\nBye!")
                break

    finally:
        await bridge.teardown()


def main():
    print_banner()

    parser = argparse.ArgumentParser(
        description=f"WebLLM Bridge - 命令行直连 web-llm（默认模型 {DEFAULT_MODEL}）"
    )
    parser.add_argument(
        "prompt",
        nargs="?",
        help="要发送的消息"
    )
    parser.add_argument(
        "-s", "--system",
        help="系统提示词"
    )
    parser.add_argument(
        "-i", "--interactive",
        action="store_true",
        help="进入交互模式"
    )

    args = parser.parse_args()

    if args.interactive:
        asyncio.run(interactive_mode(args.system))
    elif args.prompt:
        asyncio.run(single_query(args.prompt, args.system))
    else:
        parser.print_help()
        print("\n示例:")
        print("  python main.py '你好'                 # 单次提问")
        print("  python main.py -i                     # 交互模式")


if __name__ == "__main__":
    main()
