"""Core tool abstractions: BaseTool, ToolMetadata, and ToolDescriptor.

A tool is a named, schema-described unit of work invocable with validated JSON
arguments. Concrete tools subclass BaseTool, declare a ``metadata`` class
variable and implement ``run``.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import ClassVar, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from ..errors import JsonDict, JsonValue


def object_schema(
    properties: JsonDict | None = None,
    required: list[str] | None = None,
) -> JsonDict:
    """Build the restricted object schema tools declare their parameters with."""
    return {"type": "object", "properties": properties or {}, "required": required or []}


class ToolMetadata(BaseModel):
    """Metadata describing a tool.

    Attributes:
        name: Unique identifier (snake_case, e.g., "list_dir")
        description: What the tool does (shown to the model for selection)
        parameters: Restricted JSON-schema object for the tool's arguments
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    description: str = Field(..., min_length=1)
    parameters: JsonDict = Field(default_factory=object_schema)


class ToolDescriptor(BaseModel):
    """Client/model-facing description of a registered tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    schema_: JsonDict = Field(alias="schema")

    def to_function(self) -> JsonDict:
        """Function-call envelope used by ``list_tools``."""
        return {
            "type": "function",
            "function": {"name": self.name, "description": self.description, "parameters": self.schema_},
        }


@runtime_checkable
class Tool(Protocol):
    """Capability every registered tool provides."""

    def name(self) -> str: ...
    def description(self) -> str: ...
    def schema(self) -> JsonDict: ...
    def run(self, arguments: JsonDict) -> JsonValue: ...


class BaseTool(ABC):
    """Abstract base class for tools.

    Subclasses must define ``metadata`` and implement ``run``. ``run`` receives
    arguments that already passed validation (defaults applied) and returns any
    JSON value; internal failures are signalled by raising ``ToolError``.

    Example:
        >>> class EchoTool(BaseTool):
        ...     metadata = ToolMetadata(
        ...         name="echo",
        ...         description="Echo the given text",
        ...         parameters=object_schema({"text": {"type": "string"}}, ["text"]),
        ...     )
        ...
        ...     def run(self, arguments):
        ...         return arguments["text"]
    """

    metadata: ClassVar[ToolMetadata]

    def name(self) -> str:
        return self.metadata.name

    def description(self) -> str:
        return self.metadata.description

    def schema(self) -> JsonDict:
        """Parameter schema (a copy; callers may not mutate the declaration)."""
        return copy.deepcopy(self.metadata.parameters)

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(name=self.name(), description=self.description(), schema=self.schema())

    @abstractmethod
    def run(self, arguments: JsonDict) -> JsonValue:
        """Execute the tool with validated arguments."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.metadata.name!r})"
