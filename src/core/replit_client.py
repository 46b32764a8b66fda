"""Replit client facade.

This module encapsulates GraphQL requests to the Replit endpoint and the
plain REST calls (exec, logs) that GraphQL does not cover. Every request
carries the caller's bearer token from a `RemoteSession`.

All business code should call this facade instead of issuing raw HTTP
requests or handling GraphQL envelopes directly. Nothing here retries:
remote calls such as deployments have side effects and must not be
duplicated behind the caller's back.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import requests

from .config import DEFAULT_GRAPHQL_URL, DEFAULT_REST_URL, get_settings
from .constants import DEPLOY_LOG_KEYWORDS, DEPLOY_SUCCESS_MARKERS, USER_AGENT
from .errors import RemoteError
from .schemas import (
    DeploymentStatus,
    ExecResult,
    LogLine,
    Repl,
    ReplitUser,
    try_validate_history,
    try_validate_log_lines,
    try_validate_repl,
)


logger = logging.getLogger(__name__)


CREATE_REPL_MUTATION = """
mutation CreateRepl($title: String!, $language: String!, $isPrivate: Boolean!) {
  createRepl(input: {title: $title, language: $language, isPrivate: $isPrivate}) {
    ... on Repl { id title slug url language isPrivate }
  }
}
"""

WRITE_FILE_MUTATION = """
mutation WriteToFile($replId: String!, $path: String!, $content: String!) {
  writeToFile(input: {replId: $replId, path: $path, content: $content}) {
    ... on WriteToFileResult { success }
  }
}
"""

GET_REPL_QUERY = """
query GetRepl($id: String!) {
  repl(id: $id) { id title slug url language isPrivate owner { id username } }
}
"""

REPL_HISTORY_QUERY = """
query GetReplHistory($id: String!, $count: Int!) {
  repl(id: $id) {
    ... on Repl { id title history(count: $count) { id message timestamp author { username } } }
  }
}
"""

CURRENT_USER_QUERY = """
query GetCurrentUser { currentUser { id username email displayName } }
"""

USER_REPLS_QUERY = """
query GetUserRepls { currentUser { repls(count: 20) { id title slug url language isPrivate } } }
"""


@dataclass(frozen=True)
class RemoteSession:
    """Authenticated context for one caller against Replit."""

    access_token: str
    graphql_url: str = DEFAULT_GRAPHQL_URL
    rest_url: str = DEFAULT_REST_URL


def classify_deployment_logs(
    logs: Optional[Iterable[Union[LogLine, str]]],
) -> Tuple[DeploymentStatus, Optional[LogLine]]:
    """Derive a deployment status from recent log lines.

    Lines arrive oldest first; the newest line mentioning a deployment
    keyword decides. Returns the status and the line it was derived from.
    """
    if logs is None:
        return DeploymentStatus.ERROR, None

    lines = [LogLine(message=item) if isinstance(item, str) else item for item in logs]
    for line in reversed(lines):
        text = line.message.lower()
        if not any(keyword in text for keyword in DEPLOY_LOG_KEYWORDS):
            continue
        if any(marker in text for marker in DEPLOY_SUCCESS_MARKERS):
            return DeploymentStatus.SUCCESS, line
        return DeploymentStatus.FAILED, line
    return DeploymentStatus.UNKNOWN, None


class ReplitClient:
    def __init__(
        self,
        session: RemoteSession,
        *,
        timeout_s: Optional[float] = None,
        http: Optional[requests.Session] = None,
    ):
        cfg = get_settings()
        self.graphql_url = session.graphql_url
        self.rest_url = session.rest_url.rstrip("/")
        self.timeout_s = timeout_s or cfg.http_timeout_seconds

        self._http = http or requests.Session()
        self._http.headers.update({
            "Authorization": f"Bearer {session.access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        })

    def _request(self, method: str, url: str, *, what: str, **kwargs: Any) -> Any:
        try:
            resp = self._http.request(method, url, timeout=self.timeout_s, **kwargs)
        except requests.RequestException as e:
            raise RemoteError(f"Replit request failed for {what}: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = resp.text

        if resp.status_code >= 400:
            raise RemoteError(
                f"Replit returned HTTP {resp.status_code} for {what}: {body}",
                status_code=resp.status_code,
                payload=body,
            )
        if not isinstance(body, dict):
            raise RemoteError(f"Replit returned an unreadable body for {what}", status_code=resp.status_code, payload=body)
        return body

    def _graphql(self, query: str, variables: Optional[Dict[str, Any]] = None, *, what: str) -> Dict[str, Any]:
        logger.info("replit.graphql call", extra={"operation": what, "has_variables": bool(variables)})
        body = self._request("POST", self.graphql_url, what=what, json={"query": query, "variables": variables or {}})

        if body.get("errors"):
            raise RemoteError(f"GraphQL errors: {json.dumps(body['errors'])}", payload=body["errors"])
        data = body.get("data")
        if not isinstance(data, dict):
            raise RemoteError(f"GraphQL invalid response for {what}: missing data", payload=body)
        return data

    # GraphQL operations
    def create_repl(self, *, title: str, language: str, visibility: str = "private") -> Repl:
        variables = {"title": title, "language": language, "isPrivate": visibility == "private"}
        logger.info("Creating Replit project", extra={"title": title, "language": language, "visibility": visibility})
        data = self._graphql(CREATE_REPL_MUTATION, variables, what="createRepl")
        repl = try_validate_repl(data.get("createRepl"))
        if repl is None:
            raise RemoteError("createRepl returned no project", payload=data)
        return repl

    def write_file(self, *, repl_id: str, path: str, content: str) -> bool:
        logger.info("Updating file in Replit project", extra={"repl_id": repl_id, "file_path": path})
        data = self._graphql(WRITE_FILE_MUTATION, {"replId": repl_id, "path": path, "content": content}, what="writeToFile")
        result = data.get("writeToFile") or {}
        if not result.get("success"):
            raise RemoteError(f"writeToFile did not succeed for {path}", payload=data)
        return True

    def get_repl(self, repl_id: str) -> Optional[Repl]:
        data = self._graphql(GET_REPL_QUERY, {"id": repl_id}, what="repl")
        return try_validate_repl(data.get("repl"))

    def get_commits(self, repl_id: str, limit: int = 5) -> List[Dict[str, Any]]:
        """Return up to `limit` commits, newest first.

        History is best-effort: an upstream failure yields a single
        placeholder commit instead of an error so callers always get a
        well-formed, non-empty list.
        """
        try:
            data = self._graphql(REPL_HISTORY_QUERY, {"id": repl_id, "count": limit}, what="replHistory")
        except RemoteError as e:
            logger.warning("Failed to get commit history", extra={"repl_id": repl_id, "error": str(e)})
            return [placeholder_commit()]

        history = try_validate_history((data.get("repl") or {}).get("history"))
        commits = [
            {
                "id": entry.id,
                "hash": entry.id[:8],
                "message": entry.message or "",
                "author": (entry.author.username if entry.author else None) or "unknown",
                "timestamp": entry.timestamp,
            }
            for entry in history
        ]
        commits.sort(key=lambda c: c["timestamp"] or "", reverse=True)
        return commits[:limit]

    def get_current_user(self) -> ReplitUser:
        data = self._graphql(CURRENT_USER_QUERY, what="currentUser")
        user = data.get("currentUser")
        if not user:
            raise RemoteError("Failed to fetch user data", payload=data)
        return ReplitUser.model_validate(user)

    def get_user_repls(self) -> List[Repl]:
        data = self._graphql(USER_REPLS_QUERY, what="currentUserRepls")
        raw = (data.get("currentUser") or {}).get("repls") or []
        return [r for r in (try_validate_repl(item) for item in raw) if r is not None]

    # REST operations
    def exec_command(self, repl_id: str, command: str) -> ExecResult:
        body = self._request("POST", f"{self.rest_url}/repls/{repl_id}/exec", what="exec", json={"command": command})
        logger.info("Executed command in Replit", extra={"repl_id": repl_id, "command": command})
        return ExecResult.model_validate(body)

    def fetch_logs(self, repl_id: str, limit: int) -> Optional[List[LogLine]]:
        body = self._request("GET", f"{self.rest_url}/repls/{repl_id}/logs", what="logs", params={"limit": limit})
        return try_validate_log_lines(body.get("logs", []))

    def get_deployment_status(self, repl_id: str, limit: int = 50) -> Dict[str, Any]:
        logs = self.fetch_logs(repl_id, limit)
        status, line = classify_deployment_logs(logs)
        if status is DeploymentStatus.ERROR:
            message = "Replit returned a malformed log payload"
        elif line is None:
            message = "No deployment logs found"
        else:
            message = line.message
        return {
            "status": status.value,
            "message": message,
            "timestamp": line.timestamp if line else None,
        }


def placeholder_commit(now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    return {
        "id": "placeholder-commit",
        "hash": "00000000",
        "message": "Recent changes",
        "author": "unknown",
        "timestamp": now.isoformat(),
    }
