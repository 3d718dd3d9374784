"""Command-line entry point: ``python -m forge_runtime`` / ``forge-runtime``.

Settings come from FORGE_* environment variables (see
``forge_runtime.foundation.config``); flags override the common ones.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Sequence

from forge_runtime.foundation.config import RuntimeSettings, get_settings
from forge_runtime.foundation.registry import ToolRegistry
from forge_runtime.io.server import SocketServer
from forge_runtime.runtime.concurrency import ThreadPool
from forge_runtime.runtime.dispatch import ActionDispatcher
from forge_runtime.runtime.engine import TextEngine
from forge_runtime.runtime.observability import configure_logging
from forge_runtime.tools import default_registry

logger = logging.getLogger("forge_runtime.main")


async def serve(
    settings: RuntimeSettings,
    *,
    registry: ToolRegistry | None = None,
    engine: TextEngine | None = None,
) -> None:
    """Serve until cancelled."""
    registry = registry if registry is not None else default_registry()
    async with ThreadPool(max_workers=settings.tool_workers) as pool:
        dispatcher = ActionDispatcher(registry, engine, pool=pool, settings=settings.engine)
        if engine is None:
            logger.warning("no engine attached; generate and AI-mediated infer will fail")
        server = SocketServer(settings.socket_path, dispatcher, max_request_bytes=settings.max_request_bytes)
        await server.serve_forever()


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="forge-runtime", description="Local AI runtime control plane")
    parser.add_argument("--socket", help="Unix socket path (FORGE_SOCKET_PATH)")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], help="FORGE_LOG_LEVEL")
    parser.add_argument("--log-format", choices=["text", "json"], help="FORGE_LOG_FORMAT")
    parser.add_argument("--list-tools", action="store_true", help="Print the built-in tools and exit")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = get_settings()
    updates: dict[str, object] = {}
    if args.socket:
        updates["socket_path"] = args.socket
    log = settings.logging.model_copy(update={k: v for k, v in (("level", args.log_level), ("format", args.log_format)) if v})
    settings = settings.model_copy(update={**updates, "logging": log})

    configure_logging(settings.logging.level, settings.logging.format)

    if args.list_tools:
        print(default_registry().describe())
        return 0

    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        logger.info("interrupted")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
