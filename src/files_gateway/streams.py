"""Stream helpers that tie a backend transfer to the lifetime of the client connection."""

import asyncio
import contextlib
import logging
import threading
from typing import AsyncIterator, BinaryIO

from fastapi import Request
from starlette.concurrency import iterate_in_threadpool

from files_gateway.adapters.storage import StoredObject
from files_gateway.errors import UploadCancelled

logger = logging.getLogger(__name__)


class CancellableStream:
    """
    File-like wrapper whose reads fail once `cancelled` is set.

    The storage client reads the upload body from a worker thread; raising
    from `read` is the only way to stop that transfer part way.
    """

    def __init__(self, raw: BinaryIO, cancelled: threading.Event):
        self._raw = raw
        self._cancelled = cancelled

    def read(self, size: int = -1) -> bytes:
        if self._cancelled.is_set():
            raise UploadCancelled("client disconnected during upload")
        return self._raw.read(size)

    def seek(self, offset: int, whence: int = 0) -> int:
        return self._raw.seek(offset, whence)

    def tell(self) -> int:
        return self._raw.tell()

    def __getattr__(self, name):
        return getattr(self._raw, name)


@contextlib.asynccontextmanager
async def cancel_on_disconnect(request: Request, poll_interval: float) -> AsyncIterator[threading.Event]:
    """
    Yield an event that is set as soon as the client disconnects.

    Only meaningful once the request body has been read: from then on the
    next ASGI message can only be the disconnect.
    """
    cancelled = threading.Event()

    async def watch() -> None:
        while not await request.is_disconnected():
            await asyncio.sleep(poll_interval)
        logger.info("Client disconnected from %s %s", request.method, request.url.path)
        cancelled.set()

    watcher = asyncio.create_task(watch())
    try:
        yield cancelled
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher


async def relay_object(stored: StoredObject, chunk_size: int) -> AsyncIterator[bytes]:
    """
    Relay an object's body chunk by chunk without buffering it.

    The backend stream is closed on every exit, including the cancellation
    Starlette raises into this generator when the client disconnects.
    """
    sent = 0
    try:
        async for chunk in iterate_in_threadpool(stored.iter_chunks(chunk_size)):
            sent += len(chunk)
            yield chunk
    except Exception:
        logger.exception("Download stream failed after %d of %d bytes", sent, stored.content_length)
        raise
    finally:
        if sent < stored.content_length:
            logger.info("Download stopped after %d of %d bytes", sent, stored.content_length)
        stored.close()
