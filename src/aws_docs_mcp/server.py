"""MCP Server definition: FastMCP tools plus JSON-RPC routes over one dispatcher.

The three tools are registered on FastMCP for its HTTP MCP transports, and
the same registry backs the plain JSON-RPC endpoints mounted with
``custom_route`` and the stdio transport in ``aws_docs_mcp.stdio``. The
wrapper parameters reuse the argument aliases from ``tools``, so FastMCP
publishes the same input schemas as ``tools/list``.
"""

from __future__ import annotations

import logging

from mcp.server.fastmcp import FastMCP
from sse_starlette.sse import EventSourceResponse
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from aws_docs_mcp.dispatcher import Dispatcher
from aws_docs_mcp.session import InMemorySessionStore
from aws_docs_mcp.streaming import stream_dispatch
from aws_docs_mcp.tools import (
    DEFAULT_MAX_LENGTH,
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_START_INDEX,
    MaxLength,
    ReadUrl,
    RecommendUrl,
    SearchLimit,
    SearchPhrase,
    StartIndex,
    build_registry,
)

log = logging.getLogger("aws-docs-mcp")

SESSION_HEADER = "X-MCP-Session-Id"

mcp = FastMCP(
    name="aws-docs-mcp",
    instructions=(
        "AWS documentation MCP server. Use search_documentation to find pages, "
        "read_documentation to read them as markdown (paginate with start_index), "
        "and recommend to discover related pages."
    ),
)

registry = build_registry()
sessions = InMemorySessionStore()
dispatcher = Dispatcher(registry, sessions)

# FastMCP tool calls carry no session header, so one token correlates them all.
_process_session: str | None = None


def _session() -> str:
    global _process_session  # noqa: PLW0603
    if _process_session is None:
        _process_session = dispatcher.open_session()
    return _process_session


def _describe(name: str) -> str:
    return registry.resolve(name).definition.description


# ---------------------------------------------------------------------------
# FastMCP tools
# ---------------------------------------------------------------------------


@mcp.tool(name="read_documentation", description=_describe("read_documentation"))
async def read_documentation(
    url: ReadUrl,
    max_length: MaxLength = DEFAULT_MAX_LENGTH,
    start_index: StartIndex = DEFAULT_START_INDEX,
) -> str:
    return await registry.call(
        "read_documentation",
        {"url": url, "max_length": max_length, "start_index": start_index},
        _session(),
    )


@mcp.tool(name="search_documentation", description=_describe("search_documentation"))
async def search_documentation(
    search_phrase: SearchPhrase, limit: SearchLimit = DEFAULT_SEARCH_LIMIT
) -> str:
    return await registry.call(
        "search_documentation",
        {"search_phrase": search_phrase, "limit": limit},
        _session(),
    )


@mcp.tool(name="recommend", description=_describe("recommend"))
async def recommend(url: RecommendUrl) -> str:
    return await registry.call("recommend", {"url": url}, _session())


# ---------------------------------------------------------------------------
# JSON-RPC routes (HTTP transports only)
# ---------------------------------------------------------------------------


@mcp.custom_route("/mcp/rpc", methods=["POST"])
async def rpc_endpoint(request: Request) -> Response:
    """Dispatch one JSON-RPC envelope and return the response envelope."""
    session_id = dispatcher.open_session(request.headers.get(SESSION_HEADER))
    body = await request.body()
    response = await dispatcher.handle_raw(body, session_id)
    headers = {SESSION_HEADER: session_id}
    if response is None:
        return Response(status_code=202, headers=headers)
    return JSONResponse(response, headers=headers)


@mcp.custom_route("/mcp/tools/stream", methods=["POST"])
async def stream_endpoint(request: Request) -> Response:
    """Dispatch one JSON-RPC envelope, reporting progress as Server-Sent Events."""
    session_id = dispatcher.open_session(request.headers.get(SESSION_HEADER))
    body = await request.body()
    return EventSourceResponse(
        stream_dispatch(dispatcher, body, session_id),
        headers={SESSION_HEADER: session_id},
    )
