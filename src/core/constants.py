"""Core constants for cross-module use."""

SERVICE_NAME = "replit-deploy-bridge"
SERVICE_VERSION = "1.0.0"

PROTOCOL_VERSION = "2024-11-05"

USER_AGENT = "bhindi-replit-agent/1.0"

# JSON-RPC 2.0 error codes
JSONRPC_PARSE_ERROR = -32700
JSONRPC_INVALID_REQUEST = -32600
JSONRPC_METHOD_NOT_FOUND = -32601
JSONRPC_INTERNAL_ERROR = -32603

# Log lines that mention any of these are considered deployment related
DEPLOY_LOG_KEYWORDS = ("deploy", "build", "error", "success")
DEPLOY_SUCCESS_MARKERS = ("success", "deployed")
