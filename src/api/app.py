"""FastAPI application factory for the Replit bridge.

Wires the REST tool surface, the MCP JSON-RPC surface, the OAuth and
resource collaborators, request logging, rate limiting and the error
envelope handlers. Collaborators can be injected for tests.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api import mcp, oauth, resource, tools
from src.api.models import HealthResponse, error_response
from src.api.rate_limit import RateLimiter, get_client_ip
from src.core.config import Settings, get_settings
from src.core.constants import SERVICE_NAME, SERVICE_VERSION
from src.core.errors import Unauthorized
from src.core.oauth_client import OAuthClient
from src.core.replit_client import RemoteSession, ReplitClient
from src.core.token_store import TokenStore
from src.replit.bridge import ToolBridge

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    bridge: Optional[ToolBridge] = None,
    token_store: Optional[TokenStore] = None,
    oauth_client: Optional[OAuthClient] = None,
    replit_client_factory: Optional[Callable[[RemoteSession], ReplitClient]] = None,
) -> FastAPI:
    cfg = settings or get_settings()
    started_at = time.monotonic()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        missing = cfg.missing_oauth_settings()
        if missing:
            logger.warning(
                "OAuth not configured; OAuth endpoints will not work until configured",
                extra={"missing": missing},
            )
        logger.info(
            "Replit bridge started",
            extra={"mode": app.state.bridge.mode.value, "environment": cfg.environment, "port": cfg.port},
        )
        yield
        app.state.token_store.close()

    app = FastAPI(
        title="Replit Deploy Bridge",
        description="Tool bridge exposing Replit project operations over REST and MCP JSON-RPC",
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.bridge = bridge or ToolBridge.from_settings(cfg)
    app.state.token_store = token_store or TokenStore(cfg.db_path)
    app.state.oauth_client = oauth_client or OAuthClient(cfg)
    app.state.replit_client_factory = replit_client_factory or (
        lambda session: ReplitClient(session, timeout_s=cfg.http_timeout_seconds)
    )
    app.state.remote_session = lambda token: RemoteSession(
        access_token=token, graphql_url=cfg.graphql_url, rest_url=cfg.replit_rest_url
    )
    limiter = RateLimiter(cfg.rate_limit_max, cfg.rate_limit_window_seconds)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[cfg.cors_origin],
        allow_credentials=cfg.cors_origin != "*",
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_and_limit(request: Request, call_next):
        start = time.perf_counter()
        retry_after = limiter.hit(get_client_ip(request, cfg.trust_proxy))
        if retry_after is not None:
            response = error_response("Too many requests, please try again later", 429)
            response.headers["Retry-After"] = str(retry_after)
        else:
            response = await call_next(request)
        logger.info(
            "Request completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration": f"{(time.perf_counter() - start) * 1000:.0f}ms",
                "user_agent": request.headers.get("User-Agent"),
            },
        )
        return response

    @app.exception_handler(Unauthorized)
    async def unauthorized_handler(request: Request, exc: Unauthorized):
        return error_response(str(exc) or "Unauthorized", 401)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return error_response(f"Route {request.method} {request.url.path} not found", 404)
        return error_response(str(exc.detail), exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response("Invalid request", 400, details=str(exc))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled error",
            exc_info=exc,
            extra={"path": request.url.path, "method": request.method},
        )
        return error_response("Internal server error", 500)

    @app.get("/")
    async def root():
        """Root endpoint with API information"""
        return {
            "name": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "mode": app.state.bridge.mode.value,
            "endpoints": {
                "GET /tools": "List available tools",
                "POST /tools/{toolName}": "Execute a specific tool",
                "POST /mcp": "MCP JSON-RPC endpoint (tools/list, tools/call)",
                "POST /resource": "Get user context and project info",
                "GET /auth/replit": "Initiate OAuth flow",
                "GET /auth/replit/callback": "OAuth callback endpoint",
                "GET /auth/token/{userId}": "Check stored token",
                "GET /health": "Health check endpoint",
            },
        }

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(
            status="healthy",
            mode=app.state.bridge.mode.value,
            environment=cfg.environment,
            uptime=round(time.monotonic() - started_at, 3),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    app.include_router(tools.router)
    app.include_router(mcp.router)
    app.include_router(resource.router)
    app.include_router(oauth.router)
    return app
