"""MCP tool implementations: read_documentation, search_documentation, recommend.

Each parameter is an ``Annotated`` alias so the argument models here and the
FastMCP wrappers in ``server`` publish the same schema.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from pydantic import Field, StrictInt, StrictStr

from aws_docs_mcp import docs_client
from aws_docs_mcp.models import RecommendationResult, SearchResult
from aws_docs_mcp.registry import Tool, ToolArguments, ToolDefinition, ToolRegistry

log = logging.getLogger("aws-docs-mcp")

MAX_LENGTH_LIMIT = 1_000_000
DEFAULT_MAX_LENGTH = 5000
DEFAULT_START_INDEX = 0
MAX_SEARCH_LIMIT = 50
DEFAULT_SEARCH_LIMIT = 10

# ---------------------------------------------------------------------------
# Tool 1: read_documentation
# ---------------------------------------------------------------------------

ReadUrl = Annotated[StrictStr, Field(description="URL of the AWS documentation page to read")]
MaxLength = Annotated[
    StrictInt,
    Field(ge=1, le=MAX_LENGTH_LIMIT, description="Maximum number of characters to return"),
]
StartIndex = Annotated[
    StrictInt, Field(ge=0, description="Starting character index for pagination")
]


class ReadDocumentationArguments(ToolArguments):
    url: ReadUrl
    max_length: MaxLength = DEFAULT_MAX_LENGTH
    start_index: StartIndex = DEFAULT_START_INDEX


class ReadDocumentationTool(Tool):
    definition = ToolDefinition(
        name="read_documentation",
        description="Fetch and convert an AWS documentation page to markdown format",
        arguments=ReadDocumentationArguments,
    )

    async def invoke(self, arguments: dict[str, Any], session_id: str) -> str:
        return await docs_client.read_documentation(
            arguments["url"],
            max_length=arguments["max_length"],
            start_index=arguments["start_index"],
            session_id=session_id,
        )


# ---------------------------------------------------------------------------
# Tool 2: search_documentation
# ---------------------------------------------------------------------------

SearchPhrase = Annotated[StrictStr, Field(description="Search phrase to use")]
SearchLimit = Annotated[
    StrictInt,
    Field(ge=1, le=MAX_SEARCH_LIMIT, description="Maximum number of results to return"),
]


class SearchDocumentationArguments(ToolArguments):
    search_phrase: SearchPhrase
    limit: SearchLimit = DEFAULT_SEARCH_LIMIT


class SearchDocumentationTool(Tool):
    definition = ToolDefinition(
        name="search_documentation",
        description="Search AWS documentation using the official AWS Documentation Search API",
        arguments=SearchDocumentationArguments,
    )

    async def invoke(self, arguments: dict[str, Any], session_id: str) -> list[SearchResult]:
        return await docs_client.search_documentation(
            arguments["search_phrase"],
            limit=arguments["limit"],
            session_id=session_id,
        )


# ---------------------------------------------------------------------------
# Tool 3: recommend
# ---------------------------------------------------------------------------

RecommendUrl = Annotated[
    StrictStr, Field(description="URL of the AWS documentation page to get recommendations for")
]


class RecommendArguments(ToolArguments):
    url: RecommendUrl


class RecommendTool(Tool):
    definition = ToolDefinition(
        name="recommend",
        description="Get content recommendations for an AWS documentation page",
        arguments=RecommendArguments,
    )

    async def invoke(
        self, arguments: dict[str, Any], session_id: str
    ) -> list[RecommendationResult]:
        return await docs_client.recommend(arguments["url"], session_id=session_id)


TOOL_NAMES = ("read_documentation", "search_documentation", "recommend")


def build_registry() -> ToolRegistry:
    """Register every tool and verify the set is complete."""
    registry = ToolRegistry(
        [ReadDocumentationTool(), SearchDocumentationTool(), RecommendTool()]
    )
    registry.require(TOOL_NAMES)
    log.debug("Registered tools: %s", ", ".join(registry.names()))
    return registry
