"""Chunked upload client implementations."""

from chunked_upload.client.retry import MAX_ATTEMPTS, RetryResult, call_with_retry
from chunked_upload.client.stats import UploadStatus
from chunked_upload.client.transport import ChunkResponse, ChunkTransport
from chunked_upload.client.uploader import ChunkedUploader, UploadState

__all__ = [
    "ChunkedUploader",
    "UploadState",
    "UploadStatus",
    "ChunkTransport",
    "ChunkResponse",
    "call_with_retry",
    "RetryResult",
    "MAX_ATTEMPTS",
]
