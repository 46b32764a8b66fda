"""MCP JSON-RPC surface mounted at `POST /mcp`.

Supports `initialize`, `tools/list` and `tools/call`. A JSON array body is
treated as a batch; each entry is dispatched independently and answered in
order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from src.api.auth import optional_replit_token
from src.api.models import JsonRpcRequest, ToolInfo, ToolListResponse
from src.core.constants import (
    JSONRPC_INTERNAL_ERROR,
    JSONRPC_INVALID_REQUEST,
    JSONRPC_METHOD_NOT_FOUND,
    JSONRPC_PARSE_ERROR,
    PROTOCOL_VERSION,
    SERVICE_NAME,
    SERVICE_VERSION,
)
from src.replit.bridge import ToolBridge
from src.replit.catalog import OPERATIONS
from src.replit.validation import validate

logger = logging.getLogger(__name__)

router = APIRouter()


def rpc_result(rpc_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "result": result, "id": rpc_id}


def rpc_error(rpc_id: Any, code: int, message: str, data: Any = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "error": error, "id": rpc_id}


def tools_catalog() -> Dict[str, Any]:
    tools = [
        ToolInfo(
            name=op.name.value,
            description=op.description,
            input_schema=op.input_schema(),
            annotations={"readOnlyHint": op.read_only, "openWorldHint": True},
        )
        for op in OPERATIONS.values()
    ]
    return ToolListResponse(tools=tools).model_dump(by_alias=True, exclude_none=True)


async def _call_tool(bridge: ToolBridge, params: Optional[Dict[str, Any]], token: Optional[str]) -> Dict[str, Any]:
    params = params or {}
    name = params.get("name")
    if not isinstance(name, str):
        raise ValueError("tools/call requires params.name")
    args = params.get("arguments") or {}
    if not isinstance(args, dict):
        raise ValueError("tools/call params.arguments must be an object")

    logger.info("Tool call", extra={"tool": name})
    validated = validate(name, args)
    result = await bridge.execute(name, validated, bridge.session_for(token))
    return result.to_wire()


async def dispatch(message: Any, bridge: ToolBridge, token: Optional[str]) -> Tuple[int, Dict[str, Any]]:
    """Handle one JSON-RPC message; returns (http status, response object)."""
    rpc_id = message.get("id") if isinstance(message, dict) else None
    try:
        rpc = JsonRpcRequest.model_validate(message)
    except PydanticValidationError:
        return 400, rpc_error(rpc_id, JSONRPC_INVALID_REQUEST, "Invalid Request")

    logger.info("MCP JSON-RPC request", extra={"method": rpc.method, "rpc_id": rpc.id})
    try:
        if rpc.method == "initialize":
            result = {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": {"name": SERVICE_NAME, "version": SERVICE_VERSION},
            }
        elif rpc.method == "tools/list":
            result = tools_catalog()
        elif rpc.method == "tools/call":
            result = await _call_tool(bridge, rpc.params, token)
        else:
            return 400, rpc_error(rpc.id, JSONRPC_METHOD_NOT_FOUND, "Method not found")
    except Exception as e:
        logger.error("MCP JSON-RPC error", extra={"method": rpc.method, "error": str(e)})
        return 500, rpc_error(rpc.id, JSONRPC_INTERNAL_ERROR, "Internal error", str(e))

    return 200, rpc_result(rpc.id, result)


@router.post("/mcp")
async def handle_rpc(request: Request, token: Optional[str] = Depends(optional_replit_token)):
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(rpc_error(None, JSONRPC_PARSE_ERROR, "Parse error"), status_code=400)

    bridge: ToolBridge = request.app.state.bridge
    if isinstance(body, list):
        if not body:
            return JSONResponse(rpc_error(None, JSONRPC_INVALID_REQUEST, "Invalid Request"), status_code=400)
        answers = await asyncio.gather(*(dispatch(item, bridge, token) for item in body))
        return JSONResponse([payload for _, payload in answers])

    status_code, payload = await dispatch(body, bridge, token)
    return JSONResponse(payload, status_code=status_code)
