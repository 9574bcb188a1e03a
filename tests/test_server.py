"""Tests for the FastMCP tool wrappers and the JSON-RPC HTTP routes."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest
from starlette.applications import Starlette
from starlette.routing import Route
from starlette.testclient import TestClient

from aws_docs_mcp import docs_client, server
from aws_docs_mcp.models import SearchResult


@pytest.fixture
def client() -> TestClient:
    app = Starlette(
        routes=[
            Route("/mcp/rpc", server.rpc_endpoint, methods=["POST"]),
            Route("/mcp/tools/stream", server.stream_endpoint, methods=["POST"]),
        ]
    )
    return TestClient(app)


class TestRpcEndpoint:
    def test_ping_mints_session(self, client: TestClient) -> None:
        resp = client.post("/mcp/rpc", json={"jsonrpc": "2.0", "id": 1, "method": "ping"})
        assert resp.status_code == 200
        assert resp.json() == {"jsonrpc": "2.0", "id": 1, "result": {}}
        token = resp.headers[server.SESSION_HEADER]
        assert token
        assert server.sessions.get(token)

    def test_echoes_supplied_session(self, client: TestClient) -> None:
        resp = client.post(
            "/mcp/rpc",
            json={"jsonrpc": "2.0", "id": 2, "method": "tools/list"},
            headers={server.SESSION_HEADER: "client-chosen"},
        )
        assert resp.headers[server.SESSION_HEADER] == "client-chosen"
        assert len(resp.json()["result"]["tools"]) == 3

    def test_malformed_body(self, client: TestClient) -> None:
        resp = client.post(
            "/mcp/rpc", content=b"{not json", headers={"content-type": "application/json"}
        )
        assert resp.status_code == 200
        assert resp.json()["error"]["code"] == -32700
        assert resp.json()["id"] is None

    def test_notification_is_accepted_without_body(self, client: TestClient) -> None:
        resp = client.post(
            "/mcp/rpc", json={"jsonrpc": "2.0", "method": "notifications/initialized"}
        )
        assert resp.status_code == 202
        assert resp.content == b""

    def test_tool_call_uses_header_session(self, client: TestClient) -> None:
        with patch.object(
            docs_client, "recommend", new_callable=AsyncMock, return_value=[]
        ) as mock_recommend:
            resp = client.post(
                "/mcp/rpc",
                json={
                    "jsonrpc": "2.0",
                    "id": 3,
                    "method": "tools/call",
                    "params": {
                        "name": "recommend",
                        "arguments": {"url": "https://docs.aws.amazon.com/a.html"},
                    },
                },
                headers={server.SESSION_HEADER: "hdr-session"},
            )
        assert resp.json()["result"]["content"][0]["text"] == "[]"
        mock_recommend.assert_awaited_once_with(
            "https://docs.aws.amazon.com/a.html", session_id="hdr-session"
        )


class TestFastMcpTools:
    @pytest.mark.asyncio
    async def test_tools_are_listed(self) -> None:
        tools = await server.mcp.list_tools()
        assert {t.name for t in tools} == {
            "read_documentation",
            "search_documentation",
            "recommend",
        }

    @pytest.mark.asyncio
    async def test_search_wrapper_renders_json(self) -> None:
        hits = [SearchResult(rank_order=1, url="u", title="t", context=None)]
        with patch.object(
            docs_client, "search_documentation", new_callable=AsyncMock, return_value=hits
        ) as mock_search:
            text = await server.search_documentation("lambda", limit=1)
        assert json.loads(text)[0]["rank_order"] == 1
        args, kwargs = mock_search.await_args
        assert args == ("lambda",)
        assert kwargs["limit"] == 1
        assert server.sessions.get(kwargs["session_id"])

    @pytest.mark.asyncio
    async def test_read_wrapper_validates(self) -> None:
        from aws_docs_mcp.errors import ValidationError

        with pytest.raises(ValidationError):
            await server.read_documentation("https://docs.aws.amazon.com/a.html", max_length=0)

    @pytest.mark.asyncio
    async def test_schemas_match_dispatcher(self) -> None:
        fastmcp = {t.name: t.inputSchema for t in await server.mcp.list_tools()}
        resp = await server.dispatcher.handle({"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
        listed = {t["name"]: t["inputSchema"] for t in resp["result"]["tools"]}

        assert set(fastmcp) == set(listed)
        for name, schema in listed.items():
            assert _untitled(fastmcp[name]["properties"]) == _untitled(schema["properties"]), name
            assert fastmcp[name].get("required", []) == schema.get("required", []), name

    @pytest.mark.asyncio
    async def test_fastmcp_schema_carries_constraints(self) -> None:
        tools = {t.name: t for t in await server.mcp.list_tools()}
        max_length = tools["read_documentation"].inputSchema["properties"]["max_length"]
        assert max_length["minimum"] == 1
        assert max_length["maximum"] == 1_000_000
        assert max_length["description"] == "Maximum number of characters to return"
        limit = tools["search_documentation"].inputSchema["properties"]["limit"]
        assert (limit["minimum"], limit["maximum"], limit["default"]) == (1, 50, 10)


def _untitled(properties: dict) -> dict:
    """Property schemas without ``title``, which each generator derives on its own."""
    return {
        name: {key: value for key, value in schema.items() if key != "title"}
        for name, schema in properties.items()
    }
