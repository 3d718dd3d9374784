"""Unix-socket transport for the control protocol.

One JSON request per connection: the client writes a document (and may
half-close), the server answers with one JSON document and closes. Requests
are handled one at a time; parallelism lives inside ``infer``, not across
connections.

Usage:
    >>> server = SocketServer("/tmp/forge-ai.sock", dispatcher)
    >>> asyncio.run(server.serve_forever())
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import stat
from typing import TYPE_CHECKING

from forge_runtime.runtime.dispatch import envelope

from .codec import DecodeError, decode, encode

if TYPE_CHECKING:
    from forge_runtime.runtime.dispatch import ActionDispatcher

logger = logging.getLogger("forge_runtime.server")

_CHUNK = 64 * 1024


def _remove_stale_socket(path: str) -> None:
    """Unlink a leftover socket file. Refuses to remove anything else."""
    try:
        mode = os.lstat(path).st_mode
    except FileNotFoundError:
        return
    if not stat.S_ISSOCK(mode):
        raise FileExistsError(f"{path} exists and is not a socket")
    os.unlink(path)
    logger.debug("removed stale socket %s", path)


def _is_complete(buffer: bytes) -> bool:
    """True once ``buffer`` holds a whole object or array document.

    Only attempted when the data ends in a closing bracket; anything else
    (a bare scalar, a document cut mid-way) is read until EOF.
    """
    if buffer.rstrip()[-1:] not in (b"}", b"]"):
        return False
    try:
        decode(buffer)
    except DecodeError:
        return False
    return True


class SocketServer:
    """Serves an ActionDispatcher on a Unix domain socket."""

    __slots__ = ("_path", "_dispatcher", "_max_request_bytes", "_server", "_lock")

    def __init__(
        self,
        path: str,
        dispatcher: ActionDispatcher,
        *,
        max_request_bytes: int = 1024 * 1024,
    ) -> None:
        self._path = path
        self._dispatcher = dispatcher
        self._max_request_bytes = max_request_bytes
        self._server: asyncio.Server | None = None
        self._lock = asyncio.Lock()

    @property
    def path(self) -> str:
        return self._path

    @property
    def serving(self) -> bool:
        return self._server is not None and self._server.is_serving()

    async def start(self) -> None:
        """Seal the registry, bind the socket and begin accepting."""
        if self._server is not None:
            raise RuntimeError("server already started")
        self._dispatcher.registry.seal()
        _remove_stale_socket(self._path)
        self._server = await asyncio.start_unix_server(self._handle, path=self._path)
        logger.info("listening on %s (%d tools)", self._path, len(self._dispatcher.registry))

    async def stop(self) -> None:
        if self._server is None:
            return
        self._server.close()
        await self._server.wait_closed()
        self._server = None
        with contextlib.suppress(FileNotFoundError):
            os.unlink(self._path)
        logger.info("stopped listening on %s", self._path)

    async def serve_forever(self) -> None:
        await self.start()
        assert self._server is not None
        try:
            await self._server.serve_forever()
        finally:
            await self.stop()

    async def __aenter__(self) -> SocketServer:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    # ─────────────────────────────────────────────────────────────────
    # Connection handling
    # ─────────────────────────────────────────────────────────────────

    async def _read_request(self, reader: asyncio.StreamReader) -> bytes | None:
        """Read until EOF or a complete document. None when over the size limit."""
        buffer = b""
        while chunk := await reader.read(_CHUNK):
            buffer += chunk
            if len(buffer) > self._max_request_bytes:
                return None
            if _is_complete(buffer):
                break
        return buffer

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            raw = await self._read_request(reader)
            if raw is None:
                logger.warning("rejected request over %d bytes", self._max_request_bytes)
                reply = encode(envelope.envelope_error(envelope.REQUEST_TOO_LARGE))
            elif not raw:
                return
            else:
                async with self._lock:
                    reply = await self._dispatcher.handle_bytes(raw)
            writer.write(reply)
            await writer.drain()
        except (ConnectionError, asyncio.IncompleteReadError) as e:
            logger.warning("client connection error: %s", e)
        except Exception:
            logger.exception("failed to handle connection")
        finally:
            writer.close()
            with contextlib.suppress(ConnectionError):
                await writer.wait_closed()
