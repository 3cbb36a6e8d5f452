"""HTTP transport for sending single upload chunks."""

import logging
from dataclasses import dataclass
from http.client import HTTPException
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import OpenerDirector, Request, build_opener

from chunked_upload.exceptions import ResponseReadError, ServerRejected, TransportError

logger = logging.getLogger(__name__)

SESSION_HEADER = "Session-ID"


def content_disposition(file_name: str) -> str:
    """Content-Disposition value announcing ``file_name``.

    Non-ASCII names are percent-encoded and repeated in an RFC 6266
    ``filename*`` parameter, since header values must encode as latin-1.
    """
    if file_name.isascii():
        return f'attachment; filename="{file_name}"'
    encoded = quote(file_name, safe="")
    return f"attachment; filename=\"{encoded}\"; filename*=UTF-8''{encoded}"


@dataclass
class ChunkResponse:
    """Response to one chunk request.

    Attributes:
        status_code: HTTP status code
        body: Raw response body
    """

    status_code: int
    body: bytes = b""

    @property
    def success(self) -> bool:
        """True for 2xx status codes."""
        return 200 <= self.status_code <= 299

    @property
    def text(self) -> str:
        """Body decoded as UTF-8."""
        return self.body.decode("utf-8", errors="replace")

    def raise_for_status(self) -> "ChunkResponse":
        """Return self for 2xx responses.

        Raises:
            ServerRejected: If the status code is not 2xx
        """
        if not self.success:
            raise ServerRejected(
                f"Server rejected chunk with status {self.status_code}",
                status_code=self.status_code,
                response_content=self.body,
            )
        return self


class ChunkTransport:
    """Sends chunk requests through a shared urllib opener.

    The opener holds no per-upload state, so one transport can serve any
    number of uploaders.

    Example:
        >>> transport = ChunkTransport(timeout=30)
        >>> response = transport.send(
        ...     "POST",
        ...     "http://localhost:8080/upload",
        ...     session_id="9F86D081884C7D65",
        ...     data=b"hello",
        ...     content_range="bytes 0-5/5",
        ...     file_name="hello.txt",
        ... )
        >>> response.success
        True
    """

    def __init__(self, opener: Optional[OpenerDirector] = None, timeout: Optional[float] = None):
        """Initialize transport.

        Args:
            opener: urllib opener used for every request (default: build_opener())
            timeout: Per-request timeout in seconds (default: opener default)
        """
        self.opener = opener or build_opener()
        self.timeout = timeout

    def send(
        self,
        method: str,
        url: str,
        session_id: str,
        data: bytes,
        content_range: str,
        file_name: str,
        headers: Optional[dict[str, str]] = None,
    ) -> ChunkResponse:
        """Send one chunk.

        Caller headers are applied after the standard ones and replace them on
        a case-insensitive name match.

        Args:
            method: HTTP method
            url: Destination URL
            session_id: Upload session identifier
            data: Chunk bytes
            content_range: Content-Range header value
            file_name: File name announced in Content-Disposition
            headers: Additional request headers

        Returns:
            ChunkResponse for any received response, including non-2xx ones

        Raises:
            TransportError: If no response was received
            ResponseReadError: If the response body could not be read
        """
        request_headers = {
            "Content-Type": "application/octet-stream",
            "Content-Disposition": content_disposition(file_name),
            "Content-Range": content_range,
            SESSION_HEADER: session_id,
        }
        # Request capitalizes header names, so later keys overwrite earlier ones
        # regardless of case.
        req = Request(url, data=data, headers=request_headers, method=method)
        for key, value in (headers or {}).items():
            req.add_header(key, value)

        try:
            response = self._open(req)
        except HTTPError as e:
            try:
                body = e.read()
            except (OSError, HTTPException) as read_error:
                raise ResponseReadError(
                    f"Failed to read error response body: {read_error}", status_code=e.code
                ) from read_error
            finally:
                e.close()
            logger.debug(f"  {content_range} HTTP code {e.code}")
            return ChunkResponse(status_code=e.code, body=body)
        except (URLError, HTTPException, OSError, ValueError) as e:
            # ValueError covers header values http.client refuses to encode
            raise TransportError(f"Failed to send chunk {content_range}: {e}") from e

        with response:
            status_code = response.status
            logger.debug(f"  {content_range} HTTP code {status_code}")
            try:
                body = response.read()
            except (OSError, HTTPException) as e:
                raise ResponseReadError(
                    f"Failed to read response body: {e}", status_code=status_code
                ) from e

        logger.debug(f"  Body {body[:200]!r}")
        return ChunkResponse(status_code=status_code, body=body)

    def _open(self, req: Request):
        if self.timeout is None:
            return self.opener.open(req)
        return self.opener.open(req, timeout=self.timeout)
