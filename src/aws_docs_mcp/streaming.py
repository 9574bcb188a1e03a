"""Server-Sent Events rendition of a dispatched call.

Events, in order: ``connection``, ``progress``, zero or more ``heartbeat``
while the call is pending, then exactly one ``result`` or ``error``. Each
event is a ``{"event": ..., "data": <json>}`` dict as consumed by
``sse_starlette.EventSourceResponse``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import time
from collections.abc import AsyncIterator
from typing import Any

from aws_docs_mcp.dispatcher import Dispatcher, decode_body, make_response
from aws_docs_mcp.errors import ParseError

log = logging.getLogger("aws-docs-mcp")


def _heartbeat_interval() -> float:
    return float(os.environ.get("AWS_DOCS_HEARTBEAT_INTERVAL", "30"))


def _event(name: str, payload: dict[str, Any]) -> dict[str, str]:
    return {"event": name, "data": json.dumps(payload)}


def _progress_message(message: Any) -> str:
    if isinstance(message, dict):
        method = message.get("method")
        params = message.get("params")
        if method == "tools/call" and isinstance(params, dict) and params.get("name"):
            return f"Executing {params['name']}..."
        if isinstance(method, str):
            return f"Handling {method}..."
    return "Handling request..."


async def stream_dispatch(
    dispatcher: Dispatcher,
    body: str | bytes,
    session_id: str,
    heartbeat_interval: float | None = None,
) -> AsyncIterator[dict[str, str]]:
    """Dispatch *body* and yield SSE events describing its progress.

    Closing the generator early (client disconnect) stops the heartbeats and
    cancels the pending call.
    """
    interval = heartbeat_interval if heartbeat_interval is not None else _heartbeat_interval()

    yield _event("connection", {"type": "connection_established", "session_id": session_id})

    try:
        message = decode_body(body)
    except ParseError as exc:
        yield _event("error", make_response(None, error=exc.to_error()))
        return

    yield _event("progress", {"type": "progress", "message": _progress_message(message)})

    task = asyncio.create_task(dispatcher.handle(message, session_id))
    try:
        while not task.done():
            done, _ = await asyncio.wait({task}, timeout=interval)
            if not done:
                timestamp = int(time.time() * 1000)
                yield _event("heartbeat", {"type": "heartbeat", "timestamp": timestamp})
        response = task.result()
    finally:
        if not task.done():
            log.info("Stream for session %s closed before completion, cancelling", session_id)
            task.cancel()

    if response is None:
        return
    yield _event("error" if "error" in response else "result", response)
