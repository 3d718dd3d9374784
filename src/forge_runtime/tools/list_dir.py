"""Directory listing tool.

Lets the model look around the local filesystem before deciding what to do
next. Entries are returned by name only, sorted, without recursion.
"""

from __future__ import annotations

import os
from typing import ClassVar

from forge_runtime.foundation.core import BaseTool, ToolMetadata, object_schema
from forge_runtime.foundation.errors import JsonDict, JsonValue, ToolError


class ListDirTool(BaseTool):
    """List the entries of a directory."""

    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="list_dir",
        description="List the files and directories at a path. Defaults to the current directory.",
        parameters=object_schema(
            {"path": {"type": "string", "description": "Directory to list", "default": "."}},
        ),
    )

    def run(self, arguments: JsonDict) -> JsonValue:
        path = arguments.get("path", ".")
        try:
            with os.scandir(path) as entries:
                names = sorted(entry.name for entry in entries)
        except OSError as e:
            raise ToolError(f"cannot list {path!r}: {e.strerror or e}") from e
        return {"files": names}
