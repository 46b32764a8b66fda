#!/usr/bin/env python3
"""
Replit Deploy Bridge - HTTP server

Serves the REST tools surface, the MCP JSON-RPC endpoint and the OAuth
helpers. Set REPLIT_API_URL to route tool calls to the live Replit API;
without it every call is answered by the simulation engine.
"""

import uvicorn

from src.api.app import create_app
from src.core.config import get_settings
from src.core.logging_config import configure_logging

settings = get_settings()
configure_logging(settings.log_level)

app = create_app(settings)


if __name__ == "__main__":
    uvicorn.run(
        "server:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
