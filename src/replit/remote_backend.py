"""Live Replit backend: maps each operation onto ReplitClient calls."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from src.core.replit_client import ReplitClient
from src.replit.catalog import default_deploy_command, project_template, slugify


class RemoteBackend:
    simulated = False

    def __init__(self, client: ReplitClient, *, log_limit: int = 50):
        self._client = client
        self._log_limit = log_limit

    def create_project(self, *, title: str, language: str, visibility: str = "private") -> Dict[str, Any]:
        repl = self._client.create_repl(title=title, language=language, visibility=visibility)
        slug = repl.slug or slugify(title)
        return {
            "project": {
                "id": repl.id,
                "title": repl.title or title,
                "slug": slug,
                "url": repl.url or f"https://replit.com/@user/{slug}",
                "language": repl.language or language,
                "visibility": visibility if repl.is_private is None else ("private" if repl.is_private else "public"),
            },
            "files": project_template(repl.language or language),
        }

    def update_file(self, *, repl_id: str, file_path: str, content: str) -> Dict[str, Any]:
        self._client.write_file(repl_id=repl_id, path=file_path, content=content)
        return {
            "replId": repl_id,
            "filePath": file_path,
            "success": True,
            "characters": len(content),
            "bytes": len(content.encode("utf-8")),
        }

    def deploy_project(self, *, repl_id: str, command: Optional[str] = None) -> Dict[str, Any]:
        if not command:
            # extra round trip, with its own request timeout, before the exec
            repl = self._client.get_repl(repl_id)
            command = default_deploy_command(repl.language if repl else None)
        started = datetime.now(timezone.utc)
        result = self._client.exec_command(repl_id, command)
        return {
            "replId": repl_id,
            "command": command,
            "status": "running" if result.exit_code == 0 else "failed",
            "startedAt": started.isoformat(),
            "exitCode": result.exit_code,
            "output": result.output,
            "steps": [],
        }

    def get_deployment_status(self, *, repl_id: str) -> Dict[str, Any]:
        status = self._client.get_deployment_status(repl_id, limit=self._log_limit)
        return {"replId": repl_id, **status}

    def review_commits(self, *, repl_id: str, limit: int = 5) -> Dict[str, Any]:
        return {"replId": repl_id, "commits": self._client.get_commits(repl_id, int(limit))}
