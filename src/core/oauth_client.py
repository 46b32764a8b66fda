"""Replit OAuth helper: authorize URL construction and code exchange."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests

from .config import Settings, get_settings
from .errors import OAuthError


logger = logging.getLogger(__name__)

OAUTH_SCOPE = "read write exec"


class OAuthClient:
    def __init__(self, settings: Optional[Settings] = None, *, http: Optional[requests.Session] = None):
        self._cfg = settings or get_settings()
        self._http = http or requests.Session()

    @property
    def configured(self) -> bool:
        return not self._cfg.missing_oauth_settings()

    def authorize_url(self) -> str:
        if not (self._cfg.replit_client_id and self._cfg.replit_redirect_uri):
            raise OAuthError("OAuth configuration missing")
        query = urlencode({
            "client_id": self._cfg.replit_client_id,
            "redirect_uri": self._cfg.replit_redirect_uri,
            "response_type": "code",
            "scope": OAUTH_SCOPE,
        })
        return f"{self._cfg.replit_oauth_url}/authorize?{query}"

    def exchange_code(self, code: str) -> Dict[str, Any]:
        """Trade an authorization code for tokens.

        Returns the token response (`access_token`, optional `refresh_token`
        and `expires_in`).
        """
        if not self.configured:
            raise OAuthError("OAuth configuration incomplete")

        try:
            resp = self._http.post(
                f"{self._cfg.replit_oauth_url}/token",
                json={
                    "grant_type": "authorization_code",
                    "code": code,
                    "client_id": self._cfg.replit_client_id,
                    "client_secret": self._cfg.replit_client_secret,
                    "redirect_uri": self._cfg.replit_redirect_uri,
                },
                timeout=self._cfg.http_timeout_seconds,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("OAuth token exchange failed", extra={"error": str(e)})
            raise OAuthError(f"Token exchange failed: {e}") from e

        if not isinstance(data, dict) or not data.get("access_token"):
            raise OAuthError("Token exchange returned no access token")
        return data
