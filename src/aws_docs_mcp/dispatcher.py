"""JSON-RPC method dispatcher for the MCP protocol.

Maps ``initialize``, ``tools/list``, ``tools/call`` and ``ping`` to responses
and turns every failure into an error envelope. Nothing raised by a handler
escapes ``handle``/``handle_raw``.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.types import INTERNAL_ERROR

from aws_docs_mcp.errors import (
    DocsServerError,
    InvalidRequestError,
    NotFoundError,
    ParseError,
    ValidationError,
)
from aws_docs_mcp.registry import ToolRegistry
from aws_docs_mcp.session import SessionStore, open_session

log = logging.getLogger("aws-docs-mcp")

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "awslabs.aws-documentation-mcp-server"
SERVER_VERSION = "1.1.0"

JsonRpcId = str | int | float | None


def make_response(
    req_id: JsonRpcId,
    result: Any = None,
    error: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create a JSON-RPC response carrying exactly one of result/error."""
    resp: dict[str, Any] = {"jsonrpc": "2.0", "id": req_id}
    if error is not None:
        resp["error"] = error
    else:
        resp["result"] = result
    return resp


def decode_body(body: str | bytes) -> Any:
    """Parse a request body, raising ``ParseError`` when it is not valid JSON."""
    try:
        return json.loads(body)
    except (ValueError, TypeError, RecursionError) as exc:
        log.warning("Invalid JSON body: %s", exc)
        raise ParseError(f"Parse error: {exc}") from exc


def _valid_id(value: Any) -> bool:
    return value is None or (isinstance(value, (str, int, float)) and not isinstance(value, bool))


class Dispatcher:
    """Routes decoded JSON-RPC messages to protocol handlers.

    Args:
        registry: The fixed tool set served by ``tools/list``/``tools/call``.
        sessions: Store used to register correlation tokens.
    """

    def __init__(self, registry: ToolRegistry, sessions: SessionStore) -> None:
        self.registry = registry
        self.sessions = sessions

    def open_session(self, token: str | None = None) -> str:
        return open_session(self.sessions, token)

    async def handle_raw(
        self, body: str | bytes, session_id: str | None = None
    ) -> dict[str, Any] | None:
        """Decode a request body and dispatch it.

        A body that is not valid JSON yields a ``-32700`` envelope with id null.
        """
        try:
            message = decode_body(body)
        except ParseError as exc:
            return make_response(None, error=exc.to_error())
        return await self.handle(message, session_id)

    async def handle(self, message: Any, session_id: str | None = None) -> dict[str, Any] | None:
        """Dispatch one decoded message.

        Returns the response envelope, or None for notifications.
        """
        if not isinstance(message, dict):
            return make_response(
                None, error=InvalidRequestError("Invalid request: expected an object").to_error()
            )
        req_id = message.get("id")
        if not _valid_id(req_id):
            error = InvalidRequestError("Invalid request: id must be a string or number")
            return make_response(None, error=error.to_error())
        method = message.get("method")
        if not isinstance(method, str):
            return make_response(
                req_id, error=InvalidRequestError("Invalid request: method is required").to_error()
            )
        if method.startswith("notifications/"):
            log.debug("Notification %s", method)
            return None

        params = message.get("params") or {}
        try:
            if not isinstance(params, dict):
                raise ValidationError("Invalid params: params must be an object")
            result = await self._dispatch(method, params, session_id)
        except DocsServerError as exc:
            log.info("%s failed: %s", method, exc.message)
            return make_response(req_id, error=exc.to_error())
        except Exception as exc:  # noqa: BLE001
            log.exception("Unhandled error in %s", method)
            return make_response(
                req_id, error={"code": INTERNAL_ERROR, "message": str(exc) or "Internal error"}
            )
        return make_response(req_id, result=result)

    async def _dispatch(self, method: str, params: dict[str, Any], session_id: str | None) -> Any:
        if method == "initialize":
            return self._initialize()
        if method == "tools/list":
            return {"tools": [d.to_dict() for d in self.registry.definitions()]}
        if method == "tools/call":
            return await self._call_tool(params, session_id)
        if method == "ping":
            return {}
        raise NotFoundError(f"Unknown method: {method}")

    @staticmethod
    def _initialize() -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {
                "tools": {"listChanged": True},
                "logging": {},
                "resources": {},
            },
            "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
        }

    async def _call_tool(self, params: dict[str, Any], session_id: str | None) -> dict[str, Any]:
        name = params.get("name")
        if not name or not isinstance(name, str):
            raise ValidationError("Invalid params: tool name is required")
        if name not in self.registry:
            raise NotFoundError(f"Unknown tool: {name}")

        session_id = self.open_session(session_id)
        arguments = params.get("arguments") or {}
        text = await self.registry.call(name, arguments, session_id)
        return {"content": [{"type": "text", "text": text}]}
