"""Shared pytest fixtures for aws-docs-mcp test suite."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from aws_docs_mcp import docs_client

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(autouse=True)
def block_network(monkeypatch):
    """Fail any upstream request a test did not explicitly mock."""

    def refuse(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"Unexpected network call: {request.method} {request.url}")

    monkeypatch.setattr(
        docs_client,
        "_make_client",
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(refuse)),
    )


@pytest.fixture
def mock_upstream(monkeypatch):
    """Route docs_client requests to a sync handler; returns the list of seen requests."""

    seen: list[httpx.Request] = []

    def install(handler: Handler) -> list[httpx.Request]:
        def recording(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        monkeypatch.setattr(
            docs_client,
            "_make_client",
            lambda: httpx.AsyncClient(transport=httpx.MockTransport(recording)),
        )
        return seen

    return install


class FakeSessionStore:
    """Session store that records every insert."""

    def __init__(self, tokens: tuple[str, ...] = ()) -> None:
        self.tokens = set(tokens)
        self.puts: list[str] = []

    def get(self, token: str) -> bool:
        return token in self.tokens

    def put(self, token: str) -> None:
        self.puts.append(token)
        self.tokens.add(token)


@pytest.fixture
def session_store() -> FakeSessionStore:
    return FakeSessionStore()
