"""Tool contracts and the name→handler registry.

A tool is a ``ToolDefinition`` (name, description, pydantic argument model)
paired with an async ``invoke(arguments, session_id)``. Arguments are
validated and defaulted by the model before the handler ever sees them.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import pydantic
from mcp.types import Tool as McpTool
from pydantic import BaseModel, ConfigDict

from aws_docs_mcp.errors import NotFoundError, ValidationError

log = logging.getLogger("aws-docs-mcp")


class ToolArguments(BaseModel):
    """Base for tool argument models. Unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore", frozen=True)


class NoArguments(ToolArguments):
    pass


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    name: str
    description: str
    arguments: type[ToolArguments] = NoArguments

    @property
    def input_schema(self) -> dict[str, Any]:
        return self.arguments.model_json_schema()

    def to_mcp_tool(self) -> McpTool:
        return McpTool(name=self.name, description=self.description, inputSchema=self.input_schema)

    def to_dict(self) -> dict[str, Any]:
        return self.to_mcp_tool().model_dump(by_alias=True, exclude_none=True)


class Tool(ABC):
    """A registered tool: a definition plus the coroutine that runs it."""

    definition: ToolDefinition

    @property
    def name(self) -> str:
        return self.definition.name

    @abstractmethod
    async def invoke(self, arguments: dict[str, Any], session_id: str) -> Any:
        """Run the tool on already-validated *arguments*."""


def _describe_errors(exc: pydantic.ValidationError) -> str:
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "arguments"
        if error["type"] == "missing":
            problems.append(f"'{field}' is required")
        else:
            problems.append(f"'{field}': {error['msg']}")
    return "Invalid params: " + "; ".join(problems)


def validate_arguments(definition: ToolDefinition, arguments: Mapping[str, Any]) -> dict[str, Any]:
    """Return *arguments* validated by the definition's model, defaults filled in.

    Unknown keys are dropped and an explicit null counts as absent. Raises
    ``ValidationError`` on a missing required argument, a wrong type, or an
    out-of-range value.
    """
    if not isinstance(arguments, Mapping):
        raise ValidationError("Invalid params: arguments must be an object")

    present = {key: value for key, value in arguments.items() if value is not None}
    try:
        model = definition.arguments.model_validate(present)
    except pydantic.ValidationError as exc:
        raise ValidationError(_describe_errors(exc)) from exc
    return model.model_dump()


def render_result(result: Any) -> str:
    """Text form of a tool result: strings as-is, everything else as JSON."""
    if isinstance(result, str):
        return result
    if isinstance(result, list):
        result = [item.to_dict() if hasattr(item, "to_dict") else item for item in result]
    return json.dumps(result, indent=2)


class ToolRegistry:
    """Fixed set of tools keyed by unique name."""

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Duplicate tool name: {tool.name}")
        self._tools[tool.name] = tool

    def require(self, names: Iterable[str]) -> None:
        """Fail fast unless exactly *names* are registered."""
        expected = set(names)
        actual = set(self._tools)
        if expected != actual:
            raise RuntimeError(
                f"Tool registry mismatch: missing={sorted(expected - actual)} "
                f"unexpected={sorted(actual - expected)}"
            )

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def names(self) -> list[str]:
        return list(self._tools)

    def definitions(self) -> list[ToolDefinition]:
        return [tool.definition for tool in self._tools.values()]

    def resolve(self, name: str) -> Tool:
        try:
            return self._tools[name]
        except KeyError:
            raise NotFoundError(f"Unknown tool: {name}") from None

    async def call(self, name: str, arguments: Mapping[str, Any], session_id: str) -> str:
        """Resolve, validate and invoke a tool; return its text rendering."""
        tool = self.resolve(name)
        validated = validate_arguments(tool.definition, arguments)
        log.debug("Calling %s with %s (session %s)", name, validated, session_id)
        result = await tool.invoke(validated, session_id)
        return render_result(result)
