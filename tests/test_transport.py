"""Tests for the chunk transport."""

import io
import socket
from unittest.mock import MagicMock
from urllib.error import HTTPError, URLError

import pytest

from chunked_upload.client.transport import ChunkResponse, ChunkTransport, content_disposition
from chunked_upload.exceptions import ResponseReadError, ServerRejected, TransportError


def make_response(status=200, body=b""):
    """Create a mock urllib response usable as a context manager."""
    response = MagicMock()
    response.status = status
    response.read.return_value = body
    response.__enter__.return_value = response
    response.__exit__.return_value = None
    return response


def send(transport, headers=None, data=b"hello"):
    return transport.send(
        "POST",
        "http://localhost:8080/upload",
        session_id="0123456789ABCDEF",
        data=data,
        content_range="bytes 0-5/5",
        file_name="hello.txt",
        headers=headers,
    )


def sent_request(opener):
    return opener.open.call_args[0][0]


def lower_headers(request):
    return {k.lower(): v for k, v in request.headers.items()}


class TestChunkResponse:
    """Test ChunkResponse."""

    @pytest.mark.parametrize("status_code", [200, 201, 204, 299])
    def test_success(self, status_code):
        """2xx codes are successful."""
        response = ChunkResponse(status_code)
        assert response.success
        assert response.raise_for_status() is response

    @pytest.mark.parametrize("status_code", [199, 300, 404, 500])
    def test_rejected(self, status_code):
        """Other codes raise ServerRejected with the response attached."""
        response = ChunkResponse(status_code, b"nope")
        assert not response.success
        with pytest.raises(ServerRejected) as exc_info:
            response.raise_for_status()
        assert exc_info.value.status_code == status_code
        assert exc_info.value.response_content == b"nope"

    def test_text(self):
        """Bodies decode as UTF-8, replacing invalid bytes."""
        assert ChunkResponse(200, b"0-9/10").text == "0-9/10"
        assert ChunkResponse(200, b"\xff").text == "�"


class TestChunkTransport:
    """Test ChunkTransport with a mocked opener."""

    def test_request_headers(self):
        """Standard headers are set on every chunk request."""
        opener = MagicMock()
        opener.open.return_value = make_response()
        send(ChunkTransport(opener=opener))

        request = sent_request(opener)
        headers = lower_headers(request)
        assert request.get_method() == "POST"
        assert request.full_url == "http://localhost:8080/upload"
        assert request.data == b"hello"
        assert headers["content-type"] == "application/octet-stream"
        assert headers["content-disposition"] == 'attachment; filename="hello.txt"'
        assert headers["content-range"] == "bytes 0-5/5"
        assert headers["session-id"] == "0123456789ABCDEF"

    def test_extra_headers_merged(self):
        """Caller headers are added to the request."""
        opener = MagicMock()
        opener.open.return_value = make_response()
        send(ChunkTransport(opener=opener), headers={"Authorization": "Bearer token"})

        headers = lower_headers(sent_request(opener))
        assert headers["authorization"] == "Bearer token"
        assert headers["content-range"] == "bytes 0-5/5"

    def test_extra_headers_override_standard(self):
        """Conflicting caller headers win regardless of case."""
        opener = MagicMock()
        opener.open.return_value = make_response()
        send(ChunkTransport(opener=opener), headers={"content-type": "video/mp4"})

        headers = lower_headers(sent_request(opener))
        assert headers["content-type"] == "video/mp4"
        assert list(headers).count("content-type") == 1

    def test_success_response(self):
        """A 2xx response is returned with its body."""
        opener = MagicMock()
        opener.open.return_value = make_response(201, b"0-5/5")
        response = send(ChunkTransport(opener=opener))

        assert response.success
        assert response.status_code == 201
        assert response.text == "0-5/5"

    def test_error_response(self):
        """HTTP errors are returned as unsuccessful responses with their body."""
        opener = MagicMock()
        opener.open.side_effect = HTTPError(
            "http://localhost:8080/upload", 503, "Unavailable", None, io.BytesIO(b"busy")
        )
        response = send(ChunkTransport(opener=opener))

        assert not response.success
        assert response.status_code == 503
        assert response.body == b"busy"

    @pytest.mark.parametrize(
        "error",
        [URLError("Connection refused"), socket.timeout("timed out"), ConnectionResetError()],
    )
    def test_transport_failure(self, error):
        """Failures without a response raise TransportError."""
        opener = MagicMock()
        opener.open.side_effect = error
        with pytest.raises(TransportError, match="Failed to send chunk"):
            send(ChunkTransport(opener=opener))

    def test_body_read_failure(self):
        """A body that cannot be read raises ResponseReadError."""
        opener = MagicMock()
        response = make_response()
        response.read.side_effect = ConnectionResetError("reset")
        opener.open.return_value = response

        with pytest.raises(ResponseReadError) as exc_info:
            send(ChunkTransport(opener=opener))
        assert exc_info.value.status_code == 200

    def test_timeout_forwarded(self):
        """A configured timeout is passed to the opener."""
        opener = MagicMock()
        opener.open.return_value = make_response()
        send(ChunkTransport(opener=opener, timeout=2.5))
        assert opener.open.call_args[1] == {"timeout": 2.5}

    def test_no_timeout_by_default(self):
        """Without a timeout the opener's default applies."""
        opener = MagicMock()
        opener.open.return_value = make_response()
        send(ChunkTransport(opener=opener))
        assert opener.open.call_args[1] == {}


class TestChunkTransportLive:
    """Test ChunkTransport against a real HTTP server."""

    def test_send_chunk(self, receiver):
        """The server receives the body and headers."""
        url, chunk_receiver = receiver
        chunk_receiver.reply_body = lambda headers, body: b"0-5/5"

        response = ChunkTransport().send(
            "PUT",
            url,
            session_id="0123456789ABCDEF",
            data=b"hello",
            content_range="bytes 0-5/5",
            file_name="hello.txt",
            headers={"X-Upload-Token": "secret"},
        )

        assert response.success
        assert response.text == "0-5/5"
        method, path, headers, body = chunk_receiver.requests[0]
        assert method == "PUT"
        assert path == "/upload"
        assert body == b"hello"
        assert headers["content-range"] == "bytes 0-5/5"
        assert headers["session-id"] == "0123456789ABCDEF"
        assert headers["x-upload-token"] == "secret"

    def test_server_error(self, receiver):
        """A 500 answer is an unsuccessful response, not an exception."""
        url, chunk_receiver = receiver
        chunk_receiver.always_fail = True

        response = ChunkTransport().send(
            "POST", url, "0123456789ABCDEF", b"x", "bytes 0-1/1", "x.bin"
        )
        assert response.status_code == 500
        assert response.body == b"server error"

    def test_connection_refused(self):
        """No server listening raises TransportError."""
        with socket.socket() as s:
            s.bind(("127.0.0.1", 0))
            port = s.getsockname()[1]

        url = f"http://127.0.0.1:{port}/upload"
        with pytest.raises(TransportError):
            ChunkTransport(timeout=2).send(
                "POST", url, "0123456789ABCDEF", b"x", "bytes 0-1/1", "x.bin"
            )


class TestContentDisposition:
    """Test content_disposition."""

    def test_ascii_name(self):
        """ASCII names are quoted as is."""
        assert content_disposition("report.csv") == 'attachment; filename="report.csv"'

    def test_non_ascii_name(self):
        """Non-ASCII names are percent-encoded and sent as filename* too."""
        value = content_disposition("café.txt")
        assert value == (
            "attachment; filename=\"caf%C3%A9.txt\"; filename*=UTF-8''caf%C3%A9.txt"
        )
        value.encode("latin-1")

    def test_unencodable_header_value(self):
        """Header values http.client refuses raise TransportError."""
        opener = MagicMock()
        opener.open.side_effect = ValueError("Invalid header value b'a\\r\\nb'")
        with pytest.raises(TransportError, match="Invalid header value"):
            send(ChunkTransport(opener=opener), headers={"X-Note": "a\r\nb"})
