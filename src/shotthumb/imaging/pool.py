"""Bounded worker threads for thumbnail jobs in the service.

Images that need no thumbnail are answered on the event loop. Everything else
waits up to SLOT_TIMEOUT_SECONDS for one of ``max_concurrent`` slots and then
decodes, resamples and encodes on a worker thread. Each job owns its surfaces;
jobs share nothing but the slot count.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from shotthumb.imaging.generator import create_thumbnail
from shotthumb.imaging.geometry import plan
from shotthumb.imaging.resampler import OutputFormat

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from shotthumb.config import Settings
    from shotthumb.imaging.resampler import Thumbnail

logger = logging.getLogger(__name__)

SLOT_TIMEOUT_SECONDS: float = 5.0


class ThumbnailPool:
    """Creates thumbnails on a fixed number of worker threads."""

    def __init__(self, settings: Settings) -> None:
        self._max_pixels = settings.max_image_pixels
        self._slots = asyncio.Semaphore(settings.max_concurrent)
        self._executor = ThreadPoolExecutor(
            max_workers=settings.max_concurrent,
            thread_name_prefix="thumbnail-worker",
        )
        self._waiting = 0
        self._running = 0
        self._lock = threading.Lock()

    async def create_thumbnail(
        self,
        source: bytes | str,
        width: int,
        height: int,
        output_format: OutputFormat | str = OutputFormat.DATA_URL,
    ) -> Thumbnail | None:
        """Create a thumbnail on a worker thread, or return None if none is needed.

        Sources are decoded only if their real size is within the pool's
        pixel limit.

        Raises:
            InvalidDimensions: If width or height is not a positive integer.
            ImageTooLarge: If the decoded image exceeds the pixel limit.
            DecodeError: If the source cannot be decoded.
            EncodeError: If the thumbnail cannot be encoded.
            TimeoutError: If no worker slot frees up in time.
        """
        if plan(width, height) is None:
            return None

        async with self._worker_slot():
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(
                self._executor,
                create_thumbnail,
                source,
                width,
                height,
                output_format,
                self._max_pixels,
            )

    @asynccontextmanager
    async def _worker_slot(self) -> AsyncIterator[None]:
        self._count(waiting=1)
        try:
            await asyncio.wait_for(self._slots.acquire(), timeout=SLOT_TIMEOUT_SECONDS)
        except TimeoutError:
            logger.warning("No thumbnail worker free after %ss (%s waiting)", SLOT_TIMEOUT_SECONDS, self.queue_depth)
            raise
        finally:
            self._count(waiting=-1)

        self._count(running=1)
        try:
            yield
        finally:
            self._slots.release()
            self._count(running=-1)

    def _count(self, waiting: int = 0, running: int = 0) -> None:
        with self._lock:
            self._waiting += waiting
            self._running += running

    @property
    def active_count(self) -> int:
        """Number of thumbnails being generated right now."""
        with self._lock:
            return self._running

    @property
    def queue_depth(self) -> int:
        """Number of jobs waiting for a worker slot."""
        with self._lock:
            return self._waiting

    def shutdown(self) -> None:
        """Wait for running jobs, then stop the worker threads."""
        self._executor.shutdown(wait=True)
