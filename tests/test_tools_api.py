from __future__ import annotations

from fastapi.testclient import TestClient

from src.api.app import create_app
from src.api.rate_limit import RateLimiter
from src.core.config import BridgeMode, Settings
from src.core.errors import RemoteError
from src.replit.bridge import ToolBridge


AUTH = {"Authorization": "Bearer test-token"}

EXPECTED_REQUIRED = {
    "createReplitProject": {"title", "language"},
    "updateFile": {"replId", "filePath", "content"},
    "deployReplitProject": {"replId"},
    "getDeploymentStatus": {"replId"},
    "reviewCommits": {"replId"},
}


class FailingBackend:
    simulated = False

    def deploy_project(self, *, repl_id, command=None):
        raise RemoteError("Replit returned HTTP 502 for exec", status_code=502)


def test_list_tools(client):
    resp = client.get("/tools")
    assert resp.status_code == 200
    tools = {t["name"]: t for t in resp.json()["tools"]}
    assert set(tools) == set(EXPECTED_REQUIRED)
    for name, required in EXPECTED_REQUIRED.items():
        assert set(tools[name]["parameters"]["required"]) == required


def test_call_requires_bearer_token(client):
    resp = client.post("/tools/createReplitProject", json={"title": "App", "language": "python"})
    assert resp.status_code == 401
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["message"] == "Missing or invalid Authorization header"


def test_empty_bearer_token(client):
    resp = client.post("/tools/createReplitProject", json={}, headers={"Authorization": "Bearer "})
    assert resp.status_code == 401
    assert resp.json()["error"]["message"] == "Missing Replit access token"


def test_missing_required_parameter(client):
    resp = client.post("/tools/createReplitProject", json={"title": "Test"}, headers=AUTH)
    assert resp.status_code == 400
    assert resp.json()["error"] == {"code": 400, "message": "Missing required parameter: language", "details": None}


def test_unknown_tool(client):
    resp = client.post("/tools/doesNotExist", json={}, headers=AUTH)
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "Unknown tool: doesNotExist"


def test_create_project_simulated(client):
    resp = client.post("/tools/createReplitProject", json={"title": "My App", "language": "nodejs"}, headers=AUTH)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["responseType"] == "json"

    text_block, json_block = body["data"]["content"]
    assert text_block["type"] == "text"
    assert "*(Simulated)*" in text_block["text"]
    assert json_block["json"]["simulated"] is True
    assert json_block["json"]["project"]["url"] == "https://replit.com/@user/my-app"


def test_review_commits_limit(client):
    resp = client.post("/tools/reviewCommits", json={"replId": "repl_1", "limit": 3}, headers=AUTH)
    assert resp.status_code == 200
    commits = resp.json()["data"]["content"][1]["json"]["commits"]
    assert len(commits) == 3


def test_review_commits_rejects_fractional_limit(client):
    resp = client.post("/tools/reviewCommits", json={"replId": "repl_1", "limit": 2.5}, headers=AUTH)
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Parameter limit must be an integer"


def test_invalid_enum_value(client):
    resp = client.post(
        "/tools/createReplitProject",
        json={"title": "App", "language": "python", "visibility": "secret"},
        headers=AUTH,
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Parameter visibility must be one of: public, private"


def test_invalid_json_body(client):
    resp = client.post(
        "/tools/getDeploymentStatus",
        content=b"{not json",
        headers={**AUTH, "Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Invalid JSON in request body"


def test_body_must_be_object(client):
    resp = client.post("/tools/getDeploymentStatus", json=["replId"], headers=AUTH)
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Request body must be a JSON object"


def test_remote_failure_is_500(token_store):
    settings = Settings(replit_api_url="https://replit.test/graphql", db_path=":memory:")
    bridge = ToolBridge.from_settings(settings, remote_factory=lambda session: FailingBackend())
    client = TestClient(create_app(settings, bridge=bridge, token_store=token_store))

    resp = client.post("/tools/deployReplitProject", json={"replId": "r1", "command": "npm start"}, headers=AUTH)

    assert resp.status_code == 500
    message = resp.json()["error"]["message"]
    assert message.startswith("Tool execution failed: deployReplitProject:")
    assert "502" in message


def test_unknown_route(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "Route GET /nope not found"


def test_rate_limit(token_store):
    settings = Settings(db_path=":memory:", rate_limit_max=2)
    client = TestClient(create_app(settings, token_store=token_store))

    assert client.get("/health").status_code == 200
    assert client.get("/health").status_code == 200
    resp = client.get("/health")
    assert resp.status_code == 429
    assert resp.json()["error"]["message"] == "Too many requests, please try again later"
    assert int(resp.headers["Retry-After"]) >= 1


def test_rate_limit_ignores_spoofed_forwarded_for(token_store):
    settings = Settings(db_path=":memory:", rate_limit_max=2)
    client = TestClient(create_app(settings, token_store=token_store))

    codes = [client.get("/health", headers={"X-Forwarded-For": f"10.0.0.{i}"}).status_code for i in range(5)]

    assert codes[:2] == [200, 200]
    assert set(codes[2:]) == {429}


def test_rate_limit_keys_on_forwarded_for_behind_trusted_proxy(token_store):
    settings = Settings(db_path=":memory:", rate_limit_max=1, trust_proxy=True)
    client = TestClient(create_app(settings, token_store=token_store))

    assert client.get("/health", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 200
    assert client.get("/health", headers={"X-Forwarded-For": "10.0.0.2, 172.16.0.1"}).status_code == 200
    assert client.get("/health", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 429


def test_rate_limiter_prunes_expired_windows():
    now = [0.0]
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=lambda: now[0])
    for i in range(100):
        limiter.hit(f"client-{i}")
    assert len(limiter._windows) == 100

    now[0] = 61.0
    assert limiter.hit("client-0") is None
    assert list(limiter._windows) == ["client-0"]


def test_health_reports_mode(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["mode"] == BridgeMode.SIMULATED.value


def test_root_lists_endpoints(client):
    body = client.get("/").json()
    assert body["mode"] == "simulated"
    assert "POST /mcp" in body["endpoints"]
