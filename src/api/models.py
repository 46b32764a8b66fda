from __future__ import annotations

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field

from fastapi.responses import JSONResponse


class ErrorDetail(BaseModel):
    code: int
    message: str
    details: Optional[Any] = None


class SuccessResponse(BaseModel):
    success: bool = True
    response_type: str = Field(default="json", serialization_alias="responseType")
    data: Any = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail


class ToolInfo(BaseModel):
    name: str
    description: Optional[str] = None
    input_schema: Optional[Dict[str, Any]] = Field(default=None, serialization_alias="inputSchema")
    annotations: Optional[Dict[str, Any]] = None


class ToolListResponse(BaseModel):
    tools: List[ToolInfo]


class HealthResponse(BaseModel):
    status: str
    mode: str
    environment: str
    uptime: float
    timestamp: str


class JsonRpcRequest(BaseModel):
    jsonrpc: str = "2.0"
    method: str
    params: Optional[Dict[str, Any]] = None
    id: Optional[Union[int, str]] = None


def success_response(data: Any, *, status_code: int = 200) -> JSONResponse:
    body = SuccessResponse(data=data).model_dump(by_alias=True)
    return JSONResponse(content=body, status_code=status_code)


def error_response(message: str, code: int = 500, details: Any = None) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, details=details)).model_dump()
    return JSONResponse(content=body, status_code=code)
