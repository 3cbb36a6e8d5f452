"""Chunked uploader driving a whole upload from start to finish."""

import dataclasses
import logging
import time
from enum import Enum
from threading import Lock
from typing import IO, Callable, Optional, Union
from urllib.request import OpenerDirector

from chunked_upload.client.retry import MAX_ATTEMPTS, call_with_retry
from chunked_upload.client.stats import UploadStatus
from chunked_upload.client.transport import ChunkResponse, ChunkTransport
from chunked_upload.exceptions import InitError, RangeParseError, UploadFailed, UploadIOError
from chunked_upload.logger import LoggerConfig
from chunked_upload.ranges import (
    MB,
    compute_part_size,
    format_content_range,
    part_count,
    reconcile_transferred_size,
)
from chunked_upload.session import generate_session_id
from chunked_upload.source import ByteSource, FileSource, StreamSource


class UploadState(Enum):
    """Lifecycle of an uploader."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ChunkedUploader:
    """Uploads a file or stream as a sequence of Content-Range requests.

    Each chunk is sent as its own request carrying ``Content-Range`` and
    ``Session-ID`` headers. A chunk is tried up to ``max_attempts`` times;
    if it still fails, the whole upload fails. Chunks are sent one at a time in
    ascending order because the range accounting assumes gap-free progress.

    Chunk failures do not raise. They end the upload with ``status.failed``
    set, so callers inspect ``status`` to learn how far the upload got.

    Example:
        >>> uploader = ChunkedUploader.from_file(
        ...     "POST",
        ...     "http://localhost:8080/upload",
        ...     "large_file.bin",
        ...     headers={"Authorization": "Bearer token"},
        ... )
        >>> status = uploader.upload()
        >>> status.succeeded
        True
    """

    def __init__(
        self,
        method: str,
        url: str,
        file_path: Optional[str] = None,
        stream: Optional[IO[bytes]] = None,
        size: Optional[int] = None,
        headers: Optional[dict[str, str]] = None,
        opener: Optional[OpenerDirector] = None,
        chunk_size: Union[int, float] = MB,
        logger: Optional[logging.Logger] = None,
        logger_config: Optional[LoggerConfig] = None,
        file_name: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        """Initialize uploader.

        Args:
            method: HTTP method used for every chunk, e.g. "POST" or "PUT"
            url: Destination URL
            file_path: Path to file to upload (required if stream not provided)
            stream: Binary stream to upload (alternative to file_path). The
                caller keeps ownership; it is never closed here.
            size: Number of bytes to read from stream (default: up to its end)
            headers: Additional headers sent with every chunk
            opener: Shared urllib opener (default: build_opener())
            chunk_size: Size of each chunk in bytes (default: 1MB)
            logger: Logger to use as-is
            logger_config: Sinks for a new logger when logger is not given
                (default: debug discarded, info to stdout, errors to stderr)
            file_name: Name sent in Content-Disposition (default: basename of
                the file or of the stream's ``name``)
            timeout: Per-request timeout in seconds
            max_attempts: Attempts per chunk before the upload fails (default: 3)

        Raises:
            ValueError: If not exactly one of file_path and stream is given,
                or chunk_size or max_attempts is less than 1
        """
        if not file_path and stream is None:
            raise ValueError("Either file_path or stream must be provided")
        if file_path and stream is not None:
            raise ValueError("Only one of file_path and stream may be provided")
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1 byte, got {chunk_size}")
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        self.method = method
        self.url = url
        self.file_path = file_path
        self.stream = stream
        self.size = size
        self.headers = headers or {}
        self.chunk_size = int(chunk_size)
        self.file_name = file_name
        self.max_attempts = max_attempts
        self.transport = ChunkTransport(opener=opener, timeout=timeout)
        self.logger = logger or (logger_config or LoggerConfig()).build()
        self.session_id = generate_session_id()

        self._state = UploadState.PENDING
        self._status = UploadStatus(total_size=size or 0)
        self.status_lock = Lock()

    @classmethod
    def from_file(cls, method: str, url: str, file_path: str, **kwargs) -> "ChunkedUploader":
        """Create an uploader reading from a file it opens and closes itself."""
        return cls(method, url, file_path=file_path, **kwargs)

    @classmethod
    def from_stream(
        cls, method: str, url: str, stream: IO[bytes], size: Optional[int] = None, **kwargs
    ) -> "ChunkedUploader":
        """Create an uploader reading ``size`` bytes from a caller-owned stream."""
        return cls(method, url, stream=stream, size=size, **kwargs)

    @property
    def status(self) -> UploadStatus:
        """Get upload status.

        Returns:
            UploadStatus snapshot (read-only copy), safe to read from another
            thread while the upload runs
        """
        with self.status_lock:
            return dataclasses.replace(self._status)

    @property
    def state(self) -> UploadState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_done(self) -> bool:
        """True once the upload succeeded or failed."""
        return self.status.is_done

    @property
    def failed(self) -> bool:
        """True if the upload ended because of an error."""
        return self.status.failed

    def upload(
        self, progress_callback: Optional[Callable[[UploadStatus], None]] = None
    ) -> UploadStatus:
        """Run the whole upload.

        Blocks until every chunk is sent or the upload fails. Calling it again
        after the upload ended sends nothing and returns the final status.

        Args:
            progress_callback: Optional callback receiving an UploadStatus
                snapshot after each transferred chunk

        Returns:
            Final UploadStatus

        Raises:
            InitError: If the source cannot be opened or sized. No chunk is
                sent in that case.
            Exception: Whatever progress_callback raises; the upload is
                marked failed first.
        """
        if self._state is not UploadState.PENDING:
            self.logger.debug(f"Upload {self.session_id} already {self._state.value}")
            return self.status

        try:
            source = self._open_source()
        except InitError as e:
            self.logger.error(str(e))
            self._finish(failed=True)
            raise

        with source:
            with self.status_lock:
                self._status.total_size = source.size
                self._status.total_parts = part_count(source.size, self.chunk_size)
            self._state = UploadState.RUNNING

            file_name = self.file_name if self.file_name is not None else source.name
            self.logger.info(
                f"Upload {self.session_id}: {source.size} bytes in "
                f"{self._status.total_parts} parts to {self.method} {self.url}"
            )

            index = 0
            try:
                while not self._status.is_done:
                    self._upload_chunk(source, index, file_name, progress_callback)
                    index += 1
            except Exception as e:
                self.logger.error(f"Upload {self.session_id} aborted at part {index}: {e}")
                self._finish(failed=True)
                raise

            self.logger.debug(f"Close uploader {self.session_id}")

        self.logger.info("Done")
        return self.status

    def _open_source(self) -> ByteSource:
        if self.file_path:
            return FileSource(self.file_path)
        return StreamSource(self.stream, size=self.size)

    def _upload_chunk(
        self,
        source: ByteSource,
        index: int,
        file_name: str,
        progress_callback: Optional[Callable[[UploadStatus], None]],
    ) -> None:
        """Send part ``index`` and record the outcome."""
        if index == self._status.total_parts:
            self.logger.info(f"Upload {self.session_id}: done")
            self._finish(failed=False)
            return

        if self._status.failed:
            self.logger.error(f"Upload {self.session_id} already failed")
            return

        total_size = self._status.total_size
        part_size = compute_part_size(index, self.chunk_size, total_size)
        if part_size <= 0:
            return

        try:
            data = source.read_exact(part_size)
        except UploadIOError as e:
            self.logger.error(str(e))
            self._finish(failed=True)
            return
        self.logger.debug(f"Read {len(data)} bytes")

        content_range = format_content_range(index, self.chunk_size, part_size, total_size)

        def send_chunk() -> ChunkResponse:
            response = self.transport.send(
                self.method,
                self.url,
                self.session_id,
                data,
                content_range,
                file_name,
                self.headers,
            )
            return response.raise_for_status()

        def log_retry(attempt: int, error: Exception) -> None:
            self.logger.warning(
                f"Part {index} failed (attempt {attempt}/{self.max_attempts}): {error}"
            )

        try:
            result = call_with_retry(send_chunk, self.max_attempts, on_retry=log_retry)
        except UploadFailed as e:
            self.logger.error(f"Part {index} ({content_range}): {e}")
            self._finish(failed=True)
            return

        try:
            transferred = reconcile_transferred_size(result.value.text, part_size, self._status)
        except RangeParseError as e:
            self.logger.error(str(e))
            self._finish(failed=True)
            return

        with self.status_lock:
            self._status.transferred_size += transferred
            self._status.transferred_parts = index + 1
            if result.retried:
                self._status.retried_parts += 1

        self.logger.debug(f"Part: {index + 1} of: {self._status.total_parts}")
        if progress_callback:
            progress_callback(self.status)

    def _finish(self, failed: bool) -> None:
        """Move to a terminal state. Later calls change nothing."""
        with self.status_lock:
            if self._status.is_done:
                return
            self._status.is_done = True
            self._status.failed = failed
            self._status.finish_time = time.time()

        if failed:
            self._state = UploadState.FAILED
            self.logger.error("Upload process done by exception")
        else:
            self._state = UploadState.SUCCEEDED
            self.logger.info("Upload process done")
