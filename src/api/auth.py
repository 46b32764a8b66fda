"""Bearer-token extraction for the HTTP surfaces."""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from src.core.errors import Unauthorized


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):].strip() or None


def require_replit_token(request: Request) -> str:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        raise Unauthorized("Missing or invalid Authorization header")
    token = _bearer_token(request)
    if not token:
        raise Unauthorized("Missing Replit access token")
    return token


def optional_replit_token(request: Request) -> Optional[str]:
    return _bearer_token(request)
