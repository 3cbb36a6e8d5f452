"""
Byte range arithmetic for chunked uploads.

Computes how many parts a payload splits into, how large each part is, the
``Content-Range`` value sent with it, and how many bytes a server response
acknowledges.
"""

import re
from dataclasses import dataclass
from typing import Optional

from chunked_upload.exceptions import RangeParseError

MB = 1048576

# "{from}-{to}/{total}", total may be unknown ("*")
_ACCEPTED_RANGE = re.compile(r"^(\d+)-(\d+)/(\d+|\*)$")


@dataclass(frozen=True)
class ContentRange:
    """A byte span of the payload and the payload's total size.

    Attributes:
        start: First byte offset
        end: Last byte offset as declared on the wire
        total: Total payload size, or None when the server reported ``*``
    """

    start: int
    end: int
    total: Optional[int]

    def __str__(self) -> str:
        total = "*" if self.total is None else self.total
        return f"bytes {self.start}-{self.end}/{total}"


def part_count(total_size: int, chunk_size: int) -> int:
    """Number of chunks needed to send ``total_size`` bytes.

    Raises:
        ValueError: If chunk_size is less than 1 or total_size is negative
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be at least 1 byte, got {chunk_size}")
    if total_size < 0:
        raise ValueError(f"total_size must not be negative, got {total_size}")
    return (total_size + chunk_size - 1) // chunk_size


def compute_part_size(index: int, chunk_size: int, total_size: int) -> int:
    """Size of part ``index``; 0 means there is nothing left to send."""
    return max(0, min(chunk_size, total_size - index * chunk_size))


def content_range(index: int, chunk_size: int, part_size: int, total_size: int) -> ContentRange:
    """Byte span declared for part ``index``.

    The first part declares ``0-{part_size}`` rather than ``0-{part_size - 1}``.
    Receivers of this protocol expect that value, so it is kept as is. Later
    parts use an inclusive end clamped to the last byte of the payload.
    """
    if index == 0:
        return ContentRange(0, part_size, total_size)

    start = chunk_size * index
    end = min(chunk_size * (index + 1), total_size - 1)
    return ContentRange(start, end, total_size)


def format_content_range(index: int, chunk_size: int, part_size: int, total_size: int) -> str:
    """Wire value of the ``Content-Range`` header for part ``index``."""
    return str(content_range(index, chunk_size, part_size, total_size))


def parse_accepted_range(body: str) -> Optional[ContentRange]:
    """Parse a ``{from}-{to}/{total}`` range reported in a response body.

    Args:
        body: Decoded response body

    Returns:
        The reported range, or None if the body is empty

    Raises:
        RangeParseError: If the body is not an accepted range
    """
    text = body.strip()
    if not text:
        return None

    match = _ACCEPTED_RANGE.match(text)
    if not match:
        raise RangeParseError(f"Malformed accepted range in response body: {text[:100]!r}")

    start, end, total = match.groups()
    return ContentRange(int(start), int(end), None if total == "*" else int(total))


def reconcile_transferred_size(body: str, part_size: int, status) -> int:
    """Number of bytes to add to ``status.transferred_size`` after a chunk.

    A range reported by the server wins over the size that was sent: its end
    value is taken as the delta. Without one the delta is the part size. The
    result never pushes the transferred size past the total size.

    Args:
        body: Decoded response body of the successful chunk request
        part_size: Number of bytes sent in the chunk
        status: Current UploadStatus

    Raises:
        RangeParseError: If the body holds a malformed range
    """
    accepted = parse_accepted_range(body)
    delta = accepted.end if accepted is not None else part_size

    remaining = status.total_size - status.transferred_size
    return max(0, min(delta, remaining))
