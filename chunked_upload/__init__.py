"""Chunked Upload Library

Uploads large files or byte streams to an HTTP endpoint as a sequence of
Content-Range requests, with per-chunk retry and session correlation.
"""

__version__ = "0.0.1"

from chunked_upload.client import (
    ChunkedUploader,
    ChunkResponse,
    ChunkTransport,
    UploadState,
    UploadStatus,
)
from chunked_upload.exceptions import (
    ChunkedUploadError,
    InitError,
    RangeParseError,
    ResponseReadError,
    ServerRejected,
    ShortReadError,
    TransportError,
    UploadFailed,
    UploadIOError,
)
from chunked_upload.logger import LoggerConfig
from chunked_upload.ranges import MB, ContentRange
from chunked_upload.session import generate_session_id
from chunked_upload.source import FileSource, StreamSource

__all__ = [
    "ChunkedUploader",
    "UploadState",
    "UploadStatus",
    "ChunkTransport",
    "ChunkResponse",
    "LoggerConfig",
    "ContentRange",
    "MB",
    "generate_session_id",
    "FileSource",
    "StreamSource",
    "ChunkedUploadError",
    "InitError",
    "UploadIOError",
    "ShortReadError",
    "ResponseReadError",
    "TransportError",
    "ServerRejected",
    "RangeParseError",
    "UploadFailed",
]
