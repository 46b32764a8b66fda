"""REST tool surface: `GET /tools` and `POST /tools/{tool_name}`."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.auth import require_replit_token
from src.api.models import error_response, success_response
from src.core.errors import BridgeError, ValidationError
from src.replit.catalog import list_tools_rest
from src.replit.validation import validate

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_json_object(request: Request) -> Dict[str, Any]:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON in request body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return body


@router.get("/tools")
async def list_tools():
    """List the available tools with their parameter schemas"""
    logger.info("GET /tools requested")
    return {"tools": list_tools_rest()}


@router.post("/tools/{tool_name}")
async def call_tool(tool_name: str, request: Request, token: str = Depends(require_replit_token)):
    """Validate and execute one tool"""
    parameters = await read_json_object(request)
    logger.info("Tool execution requested", extra={"tool": tool_name, "parameters": sorted(parameters)})

    try:
        validated = validate(tool_name, parameters)
    except ValidationError as e:
        return error_response(str(e), e.status_code)

    bridge = request.app.state.bridge
    try:
        result = await bridge.execute(tool_name, validated, bridge.session_for(token))
    except BridgeError as e:
        logger.error("Tool execution failed", extra={"tool": tool_name, "error": str(e)})
        return error_response(f"Tool execution failed: {e}", 500)

    return success_response(result.to_wire())
