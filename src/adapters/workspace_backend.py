from __future__ import annotations

from typing import Protocol, Dict, Any, Optional


class WorkspaceBackend(Protocol):
    """Abstract interface for executing workspace operations.

    Implementations may call the live Replit API or fabricate results locally.
    Every method returns a plain payload dict whose keys are identical across
    implementations; only the values differ in realism.
    """

    simulated: bool

    def create_project(self, *, title: str, language: str, visibility: str) -> Dict[str, Any]:
        ...

    def update_file(self, *, repl_id: str, file_path: str, content: str) -> Dict[str, Any]:
        ...

    def deploy_project(self, *, repl_id: str, command: Optional[str] = None) -> Dict[str, Any]:
        ...

    def get_deployment_status(self, *, repl_id: str) -> Dict[str, Any]:
        ...

    def review_commits(self, *, repl_id: str, limit: int) -> Dict[str, Any]:
        ...
