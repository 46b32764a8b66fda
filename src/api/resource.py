from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request

from src.api.auth import optional_replit_token
from src.api.models import error_response, success_response
from src.core.errors import RemoteError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/resource")
def get_resource(request: Request, token: Optional[str] = Depends(optional_replit_token)):
    """User context: the connected Replit account and its projects"""
    logger.info("POST /resource requested", extra={"has_token": bool(token)})

    if not token:
        return success_response({
            "connected": False,
            "message": "No Replit token provided. Use /auth/replit to connect your account.",
        })

    state = request.app.state
    client = state.replit_client_factory(state.remote_session(token))
    try:
        user = client.get_current_user()
        repls = client.get_user_repls()
    except RemoteError as e:
        logger.error("Failed to retrieve resource data", extra={"error": str(e)})
        if e.status_code == 401:
            return error_response("Invalid or expired Replit token", 401)
        return error_response(f"Failed to retrieve resource data: {e}", 500)

    projects = [
        {
            "title": repl.title,
            "id": repl.id,
            "url": repl.url,
            "language": repl.language,
            "isPrivate": bool(repl.is_private),
        }
        for repl in repls
    ]
    logger.info("Resource data retrieved successfully", extra={"user_id": user.id, "project_count": len(projects)})
    return success_response({
        "connected": True,
        "replitUser": {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "displayName": user.display_name or user.username,
        },
        "projects": projects,
        "stats": {
            "totalProjects": len(projects),
            "publicProjects": sum(1 for p in projects if not p["isPrivate"]),
            "privateProjects": sum(1 for p in projects if p["isPrivate"]),
        },
    })
