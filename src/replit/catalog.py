"""Static tool catalog: the operations the bridge exposes and their input schemas.

The same definitions drive argument validation, `GET /tools` and the MCP
`tools/list` method, so the advertised required fields always match what
the validator enforces.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class OperationName(str, Enum):
    CREATE_PROJECT = "createReplitProject"
    UPDATE_FILE = "updateFile"
    DEPLOY_PROJECT = "deployReplitProject"
    GET_DEPLOYMENT_STATUS = "getDeploymentStatus"
    REVIEW_COMMITS = "reviewCommits"

    @classmethod
    def lookup(cls, name: str) -> Optional["OperationName"]:
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass(frozen=True)
class Operation:
    name: OperationName
    description: str
    properties: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    required: Tuple[str, ...] = ()
    read_only: bool = False

    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": copy.deepcopy(self.properties),
            "required": list(self.required),
        }


_REPL_ID = {"type": "string", "description": "Replit project ID"}

OPERATIONS: Dict[OperationName, Operation] = {
    op.name: op
    for op in (
        Operation(
            name=OperationName.CREATE_PROJECT,
            description="Create a new Replit project with a given template or language.",
            properties={
                "title": {"type": "string", "description": "Project name"},
                "language": {
                    "type": "string",
                    "description": "Replit language template (e.g., 'python', 'nodejs', 'javascript')",
                },
                "visibility": {
                    "type": "string",
                    "enum": ["public", "private"],
                    "default": "private",
                    "description": "Project visibility",
                },
            },
            required=("title", "language"),
        ),
        Operation(
            name=OperationName.UPDATE_FILE,
            description="Edit or overwrite a file in an existing Replit project.",
            properties={
                "replId": _REPL_ID,
                "filePath": {"type": "string", "description": "Path to the file (e.g., 'main.py', 'src/app.js')"},
                "content": {"type": "string", "description": "File contents"},
            },
            required=("replId", "filePath", "content"),
        ),
        Operation(
            name=OperationName.DEPLOY_PROJECT,
            description="Trigger a Replit deployment for the given project.",
            properties={
                "replId": _REPL_ID,
                "command": {
                    "type": "string",
                    "description": "Build or run command. Defaults to a command chosen from the project's language.",
                },
            },
            required=("replId",),
        ),
        Operation(
            name=OperationName.GET_DEPLOYMENT_STATUS,
            description="Check if the last Replit deployment succeeded or failed.",
            properties={"replId": _REPL_ID},
            required=("replId",),
            read_only=True,
        ),
        Operation(
            name=OperationName.REVIEW_COMMITS,
            description="Retrieve recent commits or code changes from a Replit project.",
            properties={
                "replId": _REPL_ID,
                "limit": {
                    "type": "integer",
                    "description": "Number of commits to fetch",
                    "default": 5,
                    "minimum": 1,
                    "maximum": 50,
                },
            },
            required=("replId",),
            read_only=True,
        ),
    )
}


# File manifests created for each language template
PROJECT_TEMPLATES: Dict[str, List[Dict[str, str]]] = {
    "python": [
        {"path": "main.py", "type": "file"},
        {"path": "requirements.txt", "type": "file"},
        {"path": "README.md", "type": "file"},
        {"path": ".gitignore", "type": "file"},
    ],
    "nodejs": [
        {"path": "package.json", "type": "file"},
        {"path": "index.js", "type": "file"},
        {"path": "README.md", "type": "file"},
        {"path": ".gitignore", "type": "file"},
        {"path": "node_modules/", "type": "directory"},
    ],
    "javascript": [
        {"path": "index.html", "type": "file"},
        {"path": "script.js", "type": "file"},
        {"path": "style.css", "type": "file"},
        {"path": "README.md", "type": "file"},
    ],
    "react": [
        {"path": "package.json", "type": "file"},
        {"path": "src/", "type": "directory"},
        {"path": "src/App.js", "type": "file"},
        {"path": "src/index.js", "type": "file"},
        {"path": "public/", "type": "directory"},
        {"path": "public/index.html", "type": "file"},
        {"path": "README.md", "type": "file"},
    ],
    "nextjs": [
        {"path": "package.json", "type": "file"},
        {"path": "pages/", "type": "directory"},
        {"path": "pages/index.js", "type": "file"},
        {"path": "pages/_app.js", "type": "file"},
        {"path": "README.md", "type": "file"},
    ],
    "html": [
        {"path": "index.html", "type": "file"},
        {"path": "style.css", "type": "file"},
        {"path": "script.js", "type": "file"},
    ],
}

DEFAULT_TEMPLATE = "python"

DEFAULT_DEPLOY_COMMANDS: Dict[str, str] = {
    "python": "python main.py",
    "nodejs": "npm run deploy",
    "javascript": "npm run deploy",
    "react": "npm run build && npm start",
    "nextjs": "yarn build && yarn start",
    "html": "npx serve .",
}

FALLBACK_DEPLOY_COMMAND = "npm run deploy"


def project_template(language: str) -> List[Dict[str, str]]:
    """File manifest for `language`; unknown languages get the python template."""
    template = PROJECT_TEMPLATES.get(language.lower(), PROJECT_TEMPLATES[DEFAULT_TEMPLATE])
    return [dict(entry) for entry in template]


def default_deploy_command(language: Optional[str]) -> str:
    if not language:
        return FALLBACK_DEPLOY_COMMAND
    return DEFAULT_DEPLOY_COMMANDS.get(language.lower(), FALLBACK_DEPLOY_COMMAND)


def slugify(title: str) -> str:
    return "-".join(title.lower().split())


def list_tools_rest() -> List[Dict[str, Any]]:
    """Catalog in the REST shape (`parameters`)."""
    return [
        {"name": op.name.value, "description": op.description, "parameters": op.input_schema()}
        for op in OPERATIONS.values()
    ]

