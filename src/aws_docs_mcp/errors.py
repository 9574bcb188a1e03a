"""Error taxonomy shared by the upstream clients, the registry and the dispatcher.

Each error carries the JSON-RPC code it is reported under, so the dispatcher
can turn any of them into an error envelope without a lookup table.
"""

from __future__ import annotations

from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
)


class DocsServerError(Exception):
    """Base class for errors that map onto a JSON-RPC error code."""

    code: int = INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_error(self) -> dict[str, object]:
        return {"code": self.code, "message": self.message}


class ValidationError(DocsServerError):
    """Missing or malformed tool argument, or a URL outside the trusted origin."""

    code = INVALID_PARAMS


class NotFoundError(DocsServerError):
    """Unknown tool or protocol method."""

    code = METHOD_NOT_FOUND


class UpstreamError(DocsServerError):
    """Non-2xx response, network failure or timeout from an external origin."""

    code = INTERNAL_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(DocsServerError):
    code = PARSE_ERROR


class InvalidRequestError(DocsServerError):
    code = INVALID_REQUEST
