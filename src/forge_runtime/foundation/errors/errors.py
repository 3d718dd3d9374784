"""Standardized error handling for the runtime.

Provides the protocol error codes, the structured error payload returned to
clients, and the exceptions used internally to carry them.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .types import JsonDict


class ErrorCode(StrEnum):
    """Protocol error codes.

    Clients branch on these values, so they are part of the wire contract.
    """
    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    UNKNOWN_TOOL = "UNKNOWN_TOOL"
    TOOL_EXECUTION_FAILED = "TOOL_EXECUTION_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorInfo(BaseModel):
    """Structured error payload carried in an error response.

    Attributes:
        code: Machine-readable error classification
        message: Human-readable error message
        field: Offending argument field (validation failures only)
        tool: Tool the error relates to, if any
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "title": "Error",
            "examples": [{
                "code": "INVALID_ARGUMENT",
                "message": "type mismatch, expected string",
                "field": "path",
                "tool": "list_dir",
            }],
        },
    )

    code: ErrorCode
    message: str = Field(..., description="Human-readable error message")
    field: str | None = None
    tool: str | None = None

    @field_validator("message", mode="before")
    @classmethod
    def _ensure_message(cls, v: str | Exception) -> str:
        """Accept Exception objects and extract message."""
        return str(v) if isinstance(v, Exception) else v

    @classmethod
    def create(
        cls,
        code: ErrorCode,
        message: str,
        *,
        field: str | None = None,
        tool: str | None = None,
    ) -> Self:
        """Factory method for construction."""
        return cls(code=code, message=message, field=field or None, tool=tool or None)

    @classmethod
    def from_exception(cls, tool: str, exc: BaseException) -> Self:
        """Build a TOOL_EXECUTION_FAILED error from a raised exception."""
        return cls(code=ErrorCode.TOOL_EXECUTION_FAILED, message=str(exc) or type(exc).__name__, tool=tool)

    def to_dict(self) -> JsonDict:
        """Wire form; unset optional fields are omitted."""
        return self.model_dump(mode="json", exclude_none=True)

    def __str__(self) -> str:
        where = "".join(f" {k}={v}" for k, v in (("tool", self.tool), ("field", self.field)) if v)
        return f"{self.code}: {self.message}{where}"


class ToolError(Exception):
    """Raised by a tool's ``run`` to signal an internal failure.

    The registry converts it (and any other exception) into a
    TOOL_EXECUTION_FAILED error, so raising never escapes to the dispatcher.
    """


class DispatchError(Exception):
    """Exception wrapping an ErrorInfo for raising inside action handlers."""

    __slots__ = ("error",)

    def __init__(self, error: ErrorInfo) -> None:
        self.error = error
        super().__init__(error.message)

    @classmethod
    def create(
        cls,
        code: ErrorCode,
        message: str,
        *,
        field: str | None = None,
        tool: str | None = None,
    ) -> Self:
        """Create dispatch exception."""
        return cls(ErrorInfo.create(code, message, field=field, tool=tool))
