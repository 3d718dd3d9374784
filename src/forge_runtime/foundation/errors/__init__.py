"""Unified error handling for forge_runtime.

- ErrorCode/ErrorInfo: protocol error codes and the structured error payload
- ToolError: raised by tools on internal failure
- DispatchError: raised inside action handlers, converted at the dispatch boundary
- Result/Ok/Err: registry invocation outcomes
"""

from .errors import DispatchError, ErrorCode, ErrorInfo, ToolError
from .result import Err, Ok, Result
from .types import JsonDict, JsonPrimitive, JsonValue

__all__ = [
    "ErrorCode", "ErrorInfo", "ToolError", "DispatchError",
    "Result", "Ok", "Err",
    "JsonDict", "JsonPrimitive", "JsonValue",
]
