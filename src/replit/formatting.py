from __future__ import annotations

from typing import Any, Dict

SIMULATION_MARKER = " *(Simulated)*"


def _marker(simulated: bool) -> str:
    return SIMULATION_MARKER if simulated else ""


def format_create_project(payload: Dict[str, Any], *, simulated: bool) -> str:
    project = payload["project"]
    formatted = f"Project \"{project['title']}\" created successfully!{_marker(simulated)}\n\n"
    formatted += "Details:\n"
    formatted += f"- ID: {project['id']}\n"
    formatted += f"- Language: {project['language']}\n"
    formatted += f"- Visibility: {project['visibility']}\n"
    formatted += f"- URL: {project['url']}\n\n"
    formatted += "Project structure:\n"
    for entry in payload["files"]:
        formatted += f"- {entry['path']}\n"
    return formatted.rstrip()


def format_update_file(payload: Dict[str, Any], *, simulated: bool) -> str:
    return (
        f"File `{payload['filePath']}` updated successfully!{_marker(simulated)}\n\n"
        f"Project: {payload['replId']}\n"
        f"Size: {payload['characters']} characters ({payload['bytes']} bytes)"
    )


def format_deploy_project(payload: Dict[str, Any], *, simulated: bool) -> str:
    formatted = f"Deployment initiated for project {payload['replId']}{_marker(simulated)}\n\n"
    formatted += f"Command executed: `{payload['command']}`\n"
    formatted += f"Status: {payload['status']}\n"
    formatted += f"Started: {payload['startedAt']}\n"
    if payload.get("steps"):
        formatted += "\nDeployment process:\n"
        for step in payload["steps"]:
            formatted += f"- {step}\n"
    if payload.get("output"):
        formatted += f"\nOutput:\n{payload['output']}\n"
    formatted += "\nUse `getDeploymentStatus` to check progress."
    return formatted


def format_deployment_status(payload: Dict[str, Any], *, simulated: bool) -> str:
    formatted = f"Deployment status: {payload['status'].upper()}{_marker(simulated)}\n\n"
    formatted += f"Project: {payload['replId']}\n"
    formatted += f"Details: {payload['message']}\n"
    if payload.get("timestamp"):
        formatted += f"Last update: {payload['timestamp']}\n"
    return formatted.rstrip()


def format_review_commits(payload: Dict[str, Any], *, simulated: bool) -> str:
    commits = payload["commits"]
    formatted = f"Recent commits for {payload['replId']}:{_marker(simulated)}\n\n"
    if not commits:
        return formatted + "No commits found."
    for i, commit in enumerate(commits, 1):
        formatted += f"{i}. `{commit['hash']}` - {commit['message']}\n"
        formatted += f"   {commit['author']} at {commit['timestamp']}\n"
    return formatted.rstrip()
