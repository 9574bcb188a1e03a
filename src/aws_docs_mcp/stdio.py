"""Newline-delimited JSON-RPC over stdin/stdout, served by the ``Dispatcher``.

One request per line, one response per line. Notifications get no reply and
blank lines are ignored. Logging goes to stderr so stdout stays protocol-only.
"""

from __future__ import annotations

import json
import logging
import sys

import anyio
from anyio import AsyncFile

from aws_docs_mcp.dispatcher import Dispatcher

log = logging.getLogger("aws-docs-mcp")


async def serve_stdio(
    dispatcher: Dispatcher,
    stdin: AsyncFile[str] | None = None,
    stdout: AsyncFile[str] | None = None,
) -> None:
    """Answer requests from *stdin* until it is closed.

    stdio serves a single client, so one session token correlates every call.
    """
    if stdin is None:
        stdin = anyio.wrap_file(sys.stdin)
    if stdout is None:
        stdout = anyio.wrap_file(sys.stdout)
    session_id = dispatcher.open_session()
    log.info("Serving JSON-RPC on stdio (session %s)", session_id)

    async for line in stdin:
        line = line.strip()
        if not line:
            continue
        response = await dispatcher.handle_raw(line, session_id)
        if response is not None:
            await stdout.write(json.dumps(response) + "\n")
            await stdout.flush()

    log.info("stdin closed, stopping")


def run_stdio(dispatcher: Dispatcher) -> None:
    anyio.run(serve_stdio, dispatcher)
