from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest
import requests

from src.core.errors import RemoteError
from src.core.replit_client import RemoteSession, ReplitClient, classify_deployment_logs
from src.core.schemas import DeploymentStatus


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None):
        self.status_code = status_code
        self._body = body
        self.text = json.dumps(body) if body is not None else ""

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("no json")
        return self._body


class FakeHttp:
    """Stands in for requests.Session; replays queued responses and records calls."""

    def __init__(self, responses: List[Any]):
        self.headers: Dict[str, str] = {}
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def request(self, method: str, url: str, timeout: Optional[float] = None, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, "timeout": timeout, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def make_client(*responses: Any) -> ReplitClient:
    session = RemoteSession(access_token="tok", graphql_url="https://replit.test/graphql", rest_url="https://replit.test/@api")
    return ReplitClient(session, timeout_s=10, http=FakeHttp(list(responses)))


def test_log_classification_uses_newest_matching_line():
    status, line = classify_deployment_logs(["build started", "deploy success"])
    assert status is DeploymentStatus.SUCCESS
    assert line.message == "deploy success"


def test_log_classification_failed_and_unknown():
    status, _ = classify_deployment_logs(["deploy success", "build error: missing module"])
    assert status is DeploymentStatus.FAILED

    status, line = classify_deployment_logs(["server listening on 3000", "GET / 200"])
    assert status is DeploymentStatus.UNKNOWN
    assert line is None


def test_log_classification_is_case_insensitive():
    status, _ = classify_deployment_logs(["Build finished", "App DEPLOYED to production"])
    assert status is DeploymentStatus.SUCCESS


def test_log_classification_is_repeatable():
    logs = ["build started", "deploy success"]
    assert classify_deployment_logs(logs) == classify_deployment_logs(logs)


def test_malformed_log_payload_classifies_as_error():
    assert classify_deployment_logs(None) == (DeploymentStatus.ERROR, None)


def test_bearer_token_and_user_agent_are_attached():
    client = make_client()
    assert client._http.headers["Authorization"] == "Bearer tok"
    assert client._http.headers["User-Agent"].startswith("bhindi-replit-agent")


def test_create_repl_sends_mutation():
    repl = {"id": "r1", "title": "App", "slug": "app", "url": "https://replit.com/@me/app", "language": "python", "isPrivate": True}
    client = make_client(FakeResponse(200, {"data": {"createRepl": repl}}))

    result = client.create_repl(title="App", language="python", visibility="private")

    assert result.id == "r1"
    assert result.is_private is True
    call = client._http.calls[0]
    assert call["url"] == "https://replit.test/graphql"
    assert call["json"]["variables"] == {"title": "App", "language": "python", "isPrivate": True}


def test_graphql_errors_raise_remote_error_with_payload():
    errors = [{"message": "Repl not found"}]
    client = make_client(FakeResponse(200, {"errors": errors}))

    with pytest.raises(RemoteError) as exc_info:
        client.get_repl("missing")
    assert exc_info.value.payload == errors
    assert "Repl not found" in str(exc_info.value)


def test_http_failure_raises_without_retry():
    client = make_client(FakeResponse(503, {"message": "unavailable"}), FakeResponse(200, {"output": "ok"}))

    with pytest.raises(RemoteError) as exc_info:
        client.exec_command("r1", "npm run deploy")
    assert exc_info.value.status_code == 503
    assert len(client._http.calls) == 1


def test_transport_failure_raises_remote_error():
    client = make_client(requests.ConnectionError("connection refused"))
    with pytest.raises(RemoteError) as exc_info:
        client.write_file(repl_id="r1", path="main.py", content="print(1)")
    assert "connection refused" in str(exc_info.value)


def test_deployment_status_from_logs():
    logs = {"logs": [
        {"message": "build started", "timestamp": "2024-05-01T10:00:00Z"},
        {"message": "deploy success", "timestamp": "2024-05-01T10:02:00Z"},
    ]}
    client = make_client(FakeResponse(200, logs))

    status = client.get_deployment_status("r1", limit=50)

    assert status == {"status": "success", "message": "deploy success", "timestamp": "2024-05-01T10:02:00Z"}
    call = client._http.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://replit.test/@api/repls/r1/logs"
    assert call["params"] == {"limit": 50}


def test_deployment_status_without_logs_is_unknown():
    client = make_client(FakeResponse(200, {"logs": []}))
    assert client.get_deployment_status("r1")["status"] == "unknown"


def test_commit_history_sorted_and_truncated():
    history = [
        {"id": "aaaaaaaaaa", "message": "old", "timestamp": "2024-04-01T00:00:00Z", "author": {"username": "ann"}},
        {"id": "bbbbbbbbbb", "message": "new", "timestamp": "2024-04-03T00:00:00Z", "author": {"username": "bob"}},
        {"id": "cccccccccc", "message": "mid", "timestamp": "2024-04-02T00:00:00Z", "author": None},
    ]
    client = make_client(FakeResponse(200, {"data": {"repl": {"id": "r1", "history": history}}}))

    commits = client.get_commits("r1", limit=2)

    assert [c["message"] for c in commits] == ["new", "mid"]
    assert commits[0]["hash"] == "bbbbbbbb"
    assert commits[1]["author"] == "unknown"


def test_commit_history_falls_back_to_placeholder():
    client = make_client(FakeResponse(500, {"message": "boom"}))

    commits = client.get_commits("r1", limit=5)

    assert len(commits) == 1
    assert commits[0]["message"] == "Recent changes"
    assert commits[0]["author"] == "unknown"
