"""FastAPI 应用"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from webllm_client import __version__
from webllm_client.bridge import Bridge
from webllm_client.config import DEBUG
from webllm_client.utils import iso_timestamp
from .routes import router
from .translator import error_envelope

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 启动：不预热引擎，首个 /v1/chat/completions 请求触发初始化
    print(f"✓ WebLLM Bridge 已启动 (model={app.state.bridge.model_id})")
    yield
    # 关闭：释放浏览器
    await app.state.bridge.teardown()


def create_app(bridge: Optional[Bridge] = None) -> FastAPI:
    app = FastAPI(title="WebLLM Bridge API", version=__version__, lifespan=lifespan)
    app.state.bridge = bridge if bridge is not None else Bridge()
    app.include_router(router)

    @app.middleware("http")
    async def cors_and_errors(request: Request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            try:
                response = await call_next(request)
            except Exception as e:
                print(f"✗ {request.method} {request.url.path} 未处理异常: {e!r}")
                response = JSONResponse(
                    status_code=500,
                    content=error_envelope("An unexpected error occurred", "internal_server_error"),
                )
        response.headers.update(CORS_HEADERS)
        if DEBUG:
            print(f"  [DEBUG] {request.method} {request.url.path} - {response.status_code} ({iso_timestamp()})")
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # 未匹配的路径或方法统一按 404 处理
        if exc.status_code in (404, 405):
            return JSONResponse(
                status_code=404,
                content=error_envelope(
                    f"The requested URL {request.url.path} was not found on this server.",
                    "not_found_error",
                ),
            )
        error_type = "invalid_request_error" if exc.status_code < 500 else "internal_server_error"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(str(exc.detail), error_type),
        )

    return app


app = create_app()
