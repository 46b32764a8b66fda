"""Simulated Replit backend.

Produces plausible results for every operation without any network I/O.
Randomness and time come from an injected `random.Random` and clock, so a
fixed seed and a frozen clock give exactly reproducible output.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from src.core.schemas import DeploymentStatus
from src.replit.catalog import project_template, slugify


Clock = Callable[[], datetime]

COMMIT_MESSAGES = [
    "Initial project setup",
    "Add main functionality",
    "Fix authentication bug",
    "Update dependencies",
    "Improve error handling",
    "Add user interface components",
    "Optimize performance",
    "Fix deployment issues",
    "Add documentation",
    "Implement new features",
    "Refactor code structure",
    "Add unit tests",
    "Fix CSS styling issues",
    "Update API endpoints",
    "Add database integration",
]

COMMIT_AUTHORS = ["user", "developer", "team-member"]

DEPLOY_COMMAND_POOL = [
    "npm run build && npm start",
    "python main.py",
    "npm run deploy",
    "yarn build && yarn start",
    "node index.js",
]

DEPLOY_STEPS = [
    "Pre-deployment checks passed",
    "Installing dependencies",
    "Building project",
    "Deploying to Replit hosting",
]

SUCCESS_RATIO = 0.8


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SimulationEngine:
    simulated = True

    def __init__(self, *, rng: Optional[random.Random] = None, clock: Optional[Clock] = None, owner: str = "user"):
        self._rng = rng or random.Random()
        self._clock = clock or _utcnow
        self._owner = owner
        # Per-project statuses are derived from this salt so repeated checks agree
        self._status_salt = self._rng.getrandbits(32)

    def create_project(self, *, title: str, language: str, visibility: str = "private") -> Dict[str, Any]:
        millis = int(self._clock().timestamp() * 1000)
        repl_id = f"repl_{millis}_{self._rng.getrandbits(16):04x}"
        slug = slugify(title)
        return {
            "project": {
                "id": repl_id,
                "title": title,
                "slug": slug,
                "url": f"https://replit.com/@{self._owner}/{slug}",
                "language": language,
                "visibility": visibility,
            },
            "files": project_template(language),
        }

    def update_file(self, *, repl_id: str, file_path: str, content: str) -> Dict[str, Any]:
        return {
            "replId": repl_id,
            "filePath": file_path,
            "success": True,
            "characters": len(content),
            "bytes": len(content.encode("utf-8")),
        }

    def deploy_project(self, *, repl_id: str, command: Optional[str] = None) -> Dict[str, Any]:
        return {
            "replId": repl_id,
            "command": command or self._rng.choice(DEPLOY_COMMAND_POOL),
            "status": "running",
            "startedAt": self._clock().isoformat(),
            "exitCode": 0,
            "output": None,
            "steps": list(DEPLOY_STEPS),
        }

    def get_deployment_status(self, *, repl_id: str) -> Dict[str, Any]:
        project_rng = random.Random(f"{self._status_salt}:{repl_id}")
        if project_rng.random() < SUCCESS_RATIO:
            status = DeploymentStatus.SUCCESS
            message = "Deployment successful, project is live"
        else:
            status = DeploymentStatus.IN_PROGRESS
            message = "Building project assets"
        deployed_at = self._clock() - timedelta(seconds=project_rng.uniform(0, 300))
        return {
            "replId": repl_id,
            "status": status.value,
            "message": message,
            "timestamp": deployed_at.isoformat(),
        }

    def review_commits(self, *, repl_id: str, limit: int = 5) -> Dict[str, Any]:
        return {"replId": repl_id, "commits": self._generate_commits(int(limit))}

    def _generate_commits(self, limit: int) -> List[Dict[str, Any]]:
        now = self._clock()
        commits: List[Dict[str, Any]] = []
        age = timedelta(0)
        for _ in range(limit):
            # Strictly increasing age keeps the list newest first
            age += timedelta(hours=self._rng.randint(1, 36), minutes=self._rng.randint(0, 59))
            digest = f"{self._rng.getrandbits(160):040x}"
            commits.append({
                "id": digest,
                "hash": digest[:8],
                "message": self._rng.choice(COMMIT_MESSAGES),
                "author": self._rng.choice(COMMIT_AUTHORS),
                "timestamp": (now - age).isoformat(),
            })
        return commits
