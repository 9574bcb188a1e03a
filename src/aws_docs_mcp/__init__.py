"""aws-docs-mcp: MCP server for reading, searching and exploring AWS documentation."""

import logging
import os
import sys

from aws_docs_mcp import server
from aws_docs_mcp.stdio import run_stdio


def main() -> None:
    """CLI entry point: serves stdio unless MCP_TRANSPORT names a FastMCP HTTP transport."""
    logging.basicConfig(
        level=os.environ.get("AWS_DOCS_LOG_LEVEL", "INFO").upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    transport = os.environ.get("MCP_TRANSPORT", "stdio")
    if transport == "stdio":
        run_stdio(server.dispatcher)
    else:
        server.mcp.run(transport=transport)
