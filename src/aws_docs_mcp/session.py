"""Session tokens used to correlate upstream requests.

A session carries no authorization meaning; it is only echoed to the
documentation origins. Tokens never expire for the life of the process.
"""

from __future__ import annotations

import logging
import uuid
from typing import Protocol

log = logging.getLogger("aws-docs-mcp")


class SessionStore(Protocol):
    """Narrow store interface the dispatcher depends on."""

    def get(self, token: str) -> bool: ...

    def put(self, token: str) -> None: ...


class InMemorySessionStore:
    """Append-only, process-local session registry."""

    def __init__(self) -> None:
        self._tokens: set[str] = set()

    def get(self, token: str) -> bool:
        return token in self._tokens

    def put(self, token: str) -> None:
        self._tokens.add(token)

    def __len__(self) -> int:
        return len(self._tokens)


def generate_session_id() -> str:
    return str(uuid.uuid4())


def open_session(store: SessionStore, token: str | None = None) -> str:
    """Return *token* registered in *store*, minting a new one when absent."""
    if not token:
        token = generate_session_id()
        log.info("Created session %s", token)
    if not store.get(token):
        store.put(token)
    return token
