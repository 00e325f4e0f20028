"""
Upload staging backends.

An inbound multipart part is staged before it is forwarded to Cloudinary,
either fully in memory or in a temporary file on disk. Both backends are
async context managers: the staged artifact only lives inside the ``async
with`` block, and the temporary file (if any) is removed on every exit path.
"""

import asyncio
import io
import logging
import os
import tempfile
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, BinaryIO, Optional

from starlette.datastructures import UploadFile

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class UploadTooLargeError(Exception):
    """The uploaded part exceeded the configured size limit."""

    def __init__(self, max_bytes: int):
        super().__init__(f"File too large (limit is {max_bytes} bytes)")
        self.max_bytes = max_bytes


@dataclass
class StagedUpload:
    """A received file held until the forwarding call settles."""

    filename: str
    content_type: str
    size_bytes: int = 0
    temporary_path: Optional[str] = None  # disk staging only
    content: Optional[bytes] = None  # memory staging only

    def open(self) -> BinaryIO:
        """Return a readable binary stream over the staged bytes."""
        if self.temporary_path is not None:
            return open(self.temporary_path, "rb")
        return io.BytesIO(self.content or b"")


def _check_size(received: int, max_bytes: int) -> None:
    if max_bytes and received > max_bytes:
        raise UploadTooLargeError(max_bytes)


def _describe(upload: UploadFile) -> StagedUpload:
    return StagedUpload(
        filename=upload.filename or "upload",
        content_type=upload.content_type or "application/octet-stream",
    )


class MemoryStaging:
    """Buffers the whole file in memory."""

    name = "memory"

    def __init__(self, max_bytes: int = 0):
        self.max_bytes = max_bytes

    @asynccontextmanager
    async def stage(self, upload: UploadFile) -> AsyncIterator[StagedUpload]:
        staged = _describe(upload)
        buffer = bytearray()
        while True:
            chunk = await upload.read(_CHUNK_SIZE)
            if not chunk:
                break
            buffer.extend(chunk)
            _check_size(len(buffer), self.max_bytes)

        staged.content = bytes(buffer)
        staged.size_bytes = len(buffer)
        try:
            yield staged
        finally:
            staged.content = None


class DiskStaging:
    """
    Writes the file to a temporary path and deletes it afterwards.

    File I/O runs in worker threads so large uploads do not stall the event loop.
    """

    name = "disk"

    def __init__(self, max_bytes: int = 0, temp_dir: Optional[str] = None):
        self.max_bytes = max_bytes
        self.temp_dir = temp_dir

    @asynccontextmanager
    async def stage(self, upload: UploadFile) -> AsyncIterator[StagedUpload]:
        staged = _describe(upload)
        suffix = os.path.splitext(staged.filename)[1]

        staged.temporary_path = await asyncio.to_thread(self._create_temp_file, suffix)

        try:
            out = await asyncio.to_thread(open, staged.temporary_path, "wb")
            try:
                while True:
                    chunk = await upload.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    staged.size_bytes += len(chunk)
                    _check_size(staged.size_bytes, self.max_bytes)
                    await asyncio.to_thread(out.write, chunk)
            finally:
                await asyncio.to_thread(out.close)

            yield staged
        finally:
            await asyncio.to_thread(remove_temp_file, staged.temporary_path)

    def _create_temp_file(self, suffix: str) -> str:
        with tempfile.NamedTemporaryFile(
            delete=False, suffix=suffix, dir=self.temp_dir
        ) as tmp_file:
            return tmp_file.name


def remove_temp_file(path: str) -> None:
    """Delete a staged file; failures are logged, never raised."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Failed to remove temporary upload {path}: {e}")


def build_staging(mode: str, max_bytes: int = 0, temp_dir: Optional[str] = None):
    """Return the staging backend named by ``mode`` ("memory" or "disk")."""
    if mode == "memory":
        return MemoryStaging(max_bytes=max_bytes)
    if mode == "disk":
        return DiskStaging(max_bytes=max_bytes, temp_dir=temp_dir)
    raise ValueError(f"Unknown upload staging mode {mode!r}")
