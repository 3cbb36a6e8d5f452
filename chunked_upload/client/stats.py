"""Upload status tracking for chunked uploads."""

import time
from dataclasses import dataclass
from typing import Optional


@dataclass
class UploadStatus:
    """Progress of one chunked upload.

    Only the uploader that owns a status mutates it. Once ``is_done`` is set
    every field stays fixed.

    Attributes:
        total_size: Total number of bytes to upload
        transferred_size: Bytes acknowledged by the server so far
        total_parts: Number of chunks the payload splits into
        transferred_parts: Number of chunks completed (index of last one + 1)
        is_done: True once the upload succeeded or failed
        failed: True if the upload ended because of an unrecoverable error
        retried_parts: Number of chunks that needed more than one attempt
        start_time: Timestamp when the status was created
        finish_time: Timestamp when the upload reached a terminal state
    """

    total_size: int = 0
    transferred_size: int = 0
    total_parts: int = 0
    transferred_parts: int = 0
    is_done: bool = False
    failed: bool = False
    retried_parts: int = 0
    start_time: float = 0.0
    finish_time: Optional[float] = None

    def __post_init__(self):
        if self.start_time == 0.0:
            self.start_time = time.time()

    @property
    def succeeded(self) -> bool:
        """True if the upload finished without error."""
        return self.is_done and not self.failed

    @property
    def elapsed_time(self) -> float:
        """Get elapsed time in seconds, frozen once the upload is done."""
        end = self.finish_time if self.finish_time is not None else time.time()
        return end - self.start_time

    @property
    def upload_speed(self) -> float:
        """Get upload speed in bytes/second."""
        if self.elapsed_time > 0:
            return self.transferred_size / self.elapsed_time
        return 0.0

    @property
    def upload_speed_mbps(self) -> float:
        """Get upload speed in MB/second."""
        return self.upload_speed / (1024 * 1024)

    @property
    def progress_percent(self) -> float:
        """Get progress as percentage (0-100)."""
        if self.total_size > 0:
            return (self.transferred_size / self.total_size) * 100
        return 100.0 if self.succeeded else 0.0

    @property
    def eta_seconds(self) -> float:
        """Get estimated time to completion in seconds."""
        if self.is_done:
            return 0.0
        if self.upload_speed > 0:
            remaining_bytes = self.total_size - self.transferred_size
            return remaining_bytes / self.upload_speed
        return 0.0
