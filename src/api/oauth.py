"""Replit OAuth endpoints: authorize URL, code callback, token presence check."""

from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import APIRouter, Request

from src.api.models import error_response, success_response
from src.core.errors import OAuthError, RemoteError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


@router.get("/replit")
def start_oauth(request: Request):
    try:
        auth_url = request.app.state.oauth_client.authorize_url()
    except OAuthError as e:
        return error_response(str(e), 500)

    logger.info("OAuth flow initiated", extra={"auth_url": auth_url})
    return success_response({
        "authURL": auth_url,
        "message": "Visit the authURL to authorize this application with Replit",
    })


@router.get("/replit/callback")
def oauth_callback(request: Request, code: Optional[str] = None, error: Optional[str] = None):
    if error:
        logger.error("OAuth callback error", extra={"error": error})
        return error_response(f"OAuth error: {error}", 400)
    if not code:
        return error_response("Missing authorization code", 400)

    state = request.app.state
    try:
        tokens = state.oauth_client.exchange_code(code)
        session = state.remote_session(tokens["access_token"])
        user = state.replit_client_factory(session).get_current_user()
        state.token_store.save(
            user.id,
            tokens["access_token"],
            tokens.get("refresh_token"),
            tokens.get("expires_in"),
        )
    except (OAuthError, RemoteError) as e:
        logger.error("OAuth callback failed", extra={"error": str(e)})
        return error_response(f"OAuth callback failed: {e}", 500)

    logger.info("OAuth callback successful", extra={"user_id": user.id, "username": user.username})
    return success_response({
        "message": "Authorization successful",
        "user": user.model_dump(by_alias=True),
        "accessToken": tokens["access_token"],
    })


@router.get("/token/{user_id}")
def check_token(user_id: str, request: Request):
    token = request.app.state.token_store.get(user_id)
    if token is None:
        return error_response("No token found for user", 404)

    return success_response({
        "hasToken": True,
        "isExpired": token.is_expired(time.time()),
        "expiresAt": token.expires_at,
    })
