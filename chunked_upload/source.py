"""
Sequential byte sources for chunked uploads.

A source hands out the payload one chunk at a time. File sources are owned by
the uploader and closed when it finishes; stream sources belong to the caller
and are never closed here.
"""

import io
import os
from abc import ABC, abstractmethod
from typing import IO, Optional

from chunked_upload.exceptions import InitError, ShortReadError, UploadIOError


class ByteSource(ABC):
    """Base class for payload sources."""

    size: int
    name: str = ""

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - release the source if we own it."""
        self.close()

    @abstractmethod
    def _stream(self) -> IO[bytes]:
        """Underlying binary stream."""

    def close(self) -> None:
        """Release the source. The default does nothing."""

    def read_exact(self, n: int) -> bytes:
        """Read exactly ``n`` bytes.

        Raises:
            ShortReadError: If the stream ends first
            UploadIOError: If the stream cannot be read
        """
        stream = self._stream()
        buffer = bytearray()
        try:
            while len(buffer) < n:
                data = stream.read(n - len(buffer))
                if not data:
                    break
                buffer += data
        except (OSError, ValueError) as e:
            raise UploadIOError(f"Failed to read from {self.name or 'stream'}: {e}") from e

        if len(buffer) != n:
            raise ShortReadError(expected=n, received=len(buffer))
        return bytes(buffer)


class FileSource(ByteSource):
    """Source backed by a file on disk, opened on construction."""

    def __init__(self, file_path: str):
        """Open ``file_path`` for reading.

        Raises:
            InitError: If the file cannot be stat'ed or opened
        """
        self.file_path = file_path
        self.name = os.path.basename(file_path)
        try:
            self._file_handle = open(file_path, "rb")  # noqa: SIM115
        except OSError as e:
            raise InitError(f"Cannot open {file_path}: {e}") from e

        try:
            self.size = os.fstat(self._file_handle.fileno()).st_size
        except OSError as e:
            self._file_handle.close()
            raise InitError(f"Cannot stat {file_path}: {e}") from e

    def _stream(self) -> IO[bytes]:
        return self._file_handle

    def close(self) -> None:
        """Close the file handle."""
        if not self._file_handle.closed:
            self._file_handle.close()


class StreamSource(ByteSource):
    """Source backed by a caller-supplied binary stream."""

    def __init__(self, stream: IO[bytes], size: Optional[int] = None):
        """Adopt ``stream`` without taking ownership of it.

        Args:
            stream: Readable binary stream, read from its current position
            size: Number of bytes to upload. Measured up to the end of the
                stream when omitted and the stream is seekable.

        Raises:
            InitError: If the size is missing and cannot be measured
        """
        self.stream = stream
        name = getattr(stream, "name", "")
        self.name = os.path.basename(name) if isinstance(name, str) else ""
        self.size = size if size is not None else self._remaining_size(stream)
        if self.size < 0:
            raise InitError(f"Upload size must not be negative, got {self.size}")

    @staticmethod
    def _remaining_size(stream: IO[bytes]) -> int:
        try:
            if not stream.seekable():
                raise InitError("Stream is not seekable; an explicit size is required")
            current_pos = stream.tell()
            end = stream.seek(0, io.SEEK_END)
            stream.seek(current_pos)
        except (OSError, AttributeError) as e:
            raise InitError(f"Cannot determine stream size: {e}") from e
        return end - current_pos

    def _stream(self) -> IO[bytes]:
        return self.stream
