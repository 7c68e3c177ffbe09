from __future__ import annotations

from fastapi.testclient import TestClient

from api.app import create_app
from api.models import MODEL_IDS
from webllm_client.bridge import Bridge, BridgeState


def _assert_cors(response) -> None:  # type: ignore[no-untyped-def]
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type, Authorization"


def test_health_does_not_initialize(client: TestClient, bridge: Bridge, farm) -> None:  # type: ignore[no-untyped-def]
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["webllm_initialized"] is False
    assert body["timestamp"].endswith("Z")
    assert farm.hosts == []
    assert bridge.state is BridgeState.UNINITIALIZED
    _assert_cors(response)


def test_chat_completion_initializes_lazily(client: TestClient, bridge: Bridge, farm) -> None:  # type: ignore[no-untyped-def]
    response = client.post("/v1/chat/completions", json={"prompt": "hi", "max_tokens": 10})

    assert response.status_code == 200
    assert response.json() == farm.reply
    assert len(farm.hosts) == 1
    assert farm.hosts[0].calls[-1] == (
        "generateText",
        {"messages": [{"role": "user", "content": "hi"}], "max_tokens": 10},
    )
    _assert_cors(response)

    second = client.post("/v1/chat/completions", json={"messages": [{"role": "user", "content": "again"}]})
    assert second.status_code == 200
    assert len(farm.hosts) == 1
    assert client.get("/health").json()["webllm_initialized"] is True


def test_invalid_body_does_not_touch_bridge(client: TestClient, farm) -> None:  # type: ignore[no-untyped-def]
    response = client.post("/v1/chat/completions", json={})

    assert response.status_code == 400
    assert response.json()["error"]["type"] == "invalid_request_error"
    assert farm.hosts == []


def test_malformed_json_is_invalid_request(client: TestClient) -> None:
    response = client.post(
        "/v1/chat/completions",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["type"] == "invalid_request_error"


def test_initialization_failure_returns_500(client: TestClient, bridge: Bridge, farm) -> None:  # type: ignore[no-untyped-def]
    farm.launch_error = "chromium missing"

    response = client.post("/v1/chat/completions", json={"prompt": "hi"})

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["type"] == "internal_server_error"
    assert "chromium missing" not in error["message"]
    assert bridge.state is BridgeState.FAILED


def test_restart_recovers_failed_bridge(client: TestClient, bridge: Bridge, farm) -> None:  # type: ignore[no-untyped-def]
    farm.launch_error = "chromium missing"
    assert client.post("/v1/chat/completions", json={"prompt": "hi"}).status_code == 500

    farm.launch_error = None
    response = client.post("/v1/restart")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert bridge.state is BridgeState.READY
    assert client.post("/v1/chat/completions", json={"prompt": "hi"}).status_code == 200


def test_engine_error_returns_500(client: TestClient, farm) -> None:  # type: ignore[no-untyped-def]
    farm.generate_error = "gpu lost"

    response = client.post("/v1/chat/completions", json={"prompt": "hi"})

    assert response.status_code == 500
    assert response.json()["error"]["type"] == "internal_server_error"


def test_list_models(client: TestClient) -> None:
    response = client.get("/v1/models")

    assert response.status_code == 200
    models = response.json()
    assert [m["id"] for m in models] == MODEL_IDS
    assert all(m["object"] == "model" and m["owned_by"] == "web-llm" for m in models)
    assert all(isinstance(m["created"], int) for m in models)


def test_root_metadata(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["model"] == "test-model"
    assert body["state"] == "uninitialized"


def test_unknown_route_is_404(client: TestClient) -> None:
    response = client.get("/nope")

    assert response.status_code == 404
    assert response.json()["error"]["type"] == "not_found_error"
    _assert_cors(response)


def test_wrong_method_is_404(client: TestClient) -> None:
    response = client.get("/v1/chat/completions")

    assert response.status_code == 404
    assert response.json()["error"]["type"] == "not_found_error"


def test_options_preflight_on_any_path(client: TestClient, farm) -> None:  # type: ignore[no-untyped-def]
    response = client.options("/v1/chat/completions")

    assert response.status_code == 200
    assert response.content == b""
    _assert_cors(response)
    assert client.options("/anything/else").status_code == 200
    assert farm.hosts == []


def test_uncaught_error_is_generic_500(farm) -> None:  # type: ignore[no-untyped-def]
    class ExplodingBridge(Bridge):
        async def is_ready(self, timeout=None):  # type: ignore[no-untyped-def]
            raise RuntimeError("secret detail")

    app = create_app(ExplodingBridge(model="x", host_factory=farm))
    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 500
    assert response.json() == {"error": {"message": "An unexpected error occurred", "type": "internal_server_error"}}
    _assert_cors(response)


def test_shutdown_tears_down_session(bridge: Bridge, farm) -> None:  # type: ignore[no-untyped-def]
    with TestClient(create_app(bridge)) as client:
        assert client.post("/v1/chat/completions", json={"prompt": "hi"}).status_code == 200

    assert farm.hosts[0].closed
    assert bridge.state is BridgeState.UNINITIALIZED
