"""
Global chunked_upload exception classes.

Every error carries the HTTP status code and response body of the request that
caused it when there was one, so callers can log or inspect the server's reply.
"""


class ChunkedUploadError(Exception):
    """
    Base exception for chunked uploads.

    Attributes:
        message (str): Main message of the exception
        status_code (int): HTTP status code of response indicating an error
        response_content (bytes): Content of response indicating an error
    """

    def __init__(self, message=None, status_code=None, response_content=None):
        default_message = f"Chunked upload failed with status {status_code}"
        message = message or default_message
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_content = response_content


class InitError(ChunkedUploadError):
    """Raised when the upload source cannot be opened or sized."""

    pass


class UploadIOError(ChunkedUploadError):
    """Raised when reading from the upload source fails."""

    pass


class ShortReadError(UploadIOError):
    """Raised when the source ends before a full chunk could be read."""

    def __init__(self, expected, received):
        super().__init__(f"Read {received} bytes, expected {expected}")
        self.expected = expected
        self.received = received


class ResponseReadError(UploadIOError):
    """Raised when a response body cannot be drained."""

    pass


class TransportError(ChunkedUploadError):
    """Raised on connection, timeout or protocol failures."""

    pass


class ServerRejected(ChunkedUploadError):
    """Raised when the server answers a chunk with a non-2xx status."""

    pass


class RangeParseError(ChunkedUploadError):
    """Raised when a server-reported accepted range is malformed."""

    pass


class UploadFailed(ChunkedUploadError):
    """Raised when a chunk still fails after every retry attempt."""

    def __init__(self, message, attempts, status_code=None, response_content=None):
        super().__init__(message, status_code=status_code, response_content=response_content)
        self.attempts = attempts
