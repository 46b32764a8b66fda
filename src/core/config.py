"""Centralized configuration for the Replit bridge.

This module consolidates environment-driven settings such as the Replit
GraphQL/REST endpoints, OAuth client credentials, the token database path,
timeouts and rate limits.

Other modules should import Settings via `get_settings()` and avoid
reading environment variables directly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from dotenv import load_dotenv


# Load env once at import (idempotent if already loaded elsewhere)
load_dotenv()


DEFAULT_GRAPHQL_URL = "https://replit.com/graphql"
DEFAULT_REST_URL = "https://replit.com/@api"
DEFAULT_OAUTH_URL = "https://replit.com/oauth"


class BridgeMode(str, Enum):
    REAL = "real"
    SIMULATED = "simulated"


@dataclass(frozen=True)
class Settings:
    # Replit endpoints. An empty replit_api_url selects simulated mode.
    replit_api_url: str = ""
    replit_rest_url: str = DEFAULT_REST_URL

    # OAuth
    replit_client_id: str = ""
    replit_client_secret: str = ""
    replit_redirect_uri: str = ""
    replit_oauth_url: str = DEFAULT_OAUTH_URL

    # Token store
    db_path: str = "./data/tokens.sqlite"

    # Networking
    http_timeout_seconds: float = 10.0
    deploy_log_limit: int = 50

    # HTTP surface
    rate_limit_max: int = 100
    rate_limit_window_seconds: int = 15 * 60
    cors_origin: str = "*"
    trust_proxy: bool = False
    port: int = 3000

    # Runtime
    environment: str = "development"
    log_level: str = "INFO"
    simulation_seed: Optional[int] = None

    @property
    def bridge_mode(self) -> BridgeMode:
        return BridgeMode.REAL if self.replit_api_url else BridgeMode.SIMULATED

    @property
    def graphql_url(self) -> str:
        """GraphQL endpoint used by collaborators that always talk to Replit (OAuth, /resource)."""
        return self.replit_api_url or DEFAULT_GRAPHQL_URL

    def missing_oauth_settings(self) -> List[str]:
        pairs = [
            ("REPLIT_CLIENT_ID", self.replit_client_id),
            ("REPLIT_CLIENT_SECRET", self.replit_client_secret),
            ("REPLIT_REDIRECT_URI", self.replit_redirect_uri),
        ]
        return [name for name, value in pairs if not value]


def load_settings() -> Settings:
    """Build a fresh Settings object from the current environment."""
    seed = os.getenv("SIMULATION_SEED")
    return Settings(
        replit_api_url=os.getenv("REPLIT_API_URL", "").strip(),
        replit_rest_url=os.getenv("REPLIT_REST_URL", DEFAULT_REST_URL).rstrip("/"),
        replit_client_id=os.getenv("REPLIT_CLIENT_ID", ""),
        replit_client_secret=os.getenv("REPLIT_CLIENT_SECRET", ""),
        replit_redirect_uri=os.getenv("REPLIT_REDIRECT_URI", ""),
        replit_oauth_url=os.getenv("REPLIT_OAUTH_URL", DEFAULT_OAUTH_URL).rstrip("/"),
        db_path=os.getenv("DB_PATH", "./data/tokens.sqlite"),
        http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "10")),
        deploy_log_limit=int(os.getenv("DEPLOY_LOG_LIMIT", "50")),
        rate_limit_max=int(os.getenv("RATE_LIMIT_MAX", "100")),
        rate_limit_window_seconds=int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", str(15 * 60))),
        cors_origin=os.getenv("CORS_ORIGIN", "*"),
        trust_proxy=os.getenv("TRUST_PROXY", "false").strip().lower() in ("1", "true", "yes"),
        port=int(os.getenv("PORT", "3000")),
        environment=os.getenv("ENVIRONMENT", "development"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        simulation_seed=int(seed) if seed else None,
    )


_cached_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return cached settings (loaded from environment) to be used across modules."""
    global _cached_settings
    if _cached_settings is not None:
        return _cached_settings

    _cached_settings = load_settings()
    return _cached_settings
