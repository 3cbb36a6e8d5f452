"""Shared fixtures: an HTTP server that receives Content-Range chunks."""

import logging
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from threading import Thread
from typing import Any, Optional

import pytest

from chunked_upload import LoggerConfig


class ChunkReceiver:
    """Records chunk requests and answers them.

    Attributes:
        requests: (method, path, headers, body) tuples in arrival order, with
            lower-cased header names
        fail_first: Number of leading requests answered with error_status
        error_status: Status code used for failures
        always_fail: Answer every request with error_status
        reply_body: Optional callable(headers, body) returning a response body
    """

    def __init__(self):
        self.requests: list[tuple[str, str, dict[str, str], bytes]] = []
        self.fail_first = 0
        self.error_status = 500
        self.always_fail = False
        self.reply_body = None
        self.lock = threading.Lock()

    def handle(self, method: str, path: str, headers: dict[str, str], body: bytes):
        with self.lock:
            self.requests.append((method, path, headers, body))
            count = len(self.requests)

        if self.always_fail or count <= self.fail_first:
            return self.error_status, b"server error"
        reply = self.reply_body(headers, body) if self.reply_body else b""
        return 200, reply

    @property
    def payload(self) -> bytes:
        """Bodies of all 2xx-answered requests, joined."""
        if self.always_fail:
            return b""
        return b"".join(body for _, _, _, body in self.requests[self.fail_first :])


class ChunkRequestHandler(BaseHTTPRequestHandler):
    """HTTP request handler forwarding to a ChunkReceiver."""

    receiver: Optional[ChunkReceiver] = None

    def do_POST(self) -> None:
        """Handle POST request."""
        self._handle_request("POST")

    def do_PUT(self) -> None:
        """Handle PUT request."""
        self._handle_request("PUT")

    def _handle_request(self, method: str) -> None:
        content_length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(content_length) if content_length > 0 else b""

        headers = {key.lower(): value for key, value in self.headers.items()}
        status, response_body = self.receiver.handle(method, self.path, headers, body)

        self.send_response(status)
        self.send_header("Content-Length", str(len(response_body)))
        self.end_headers()
        if response_body:
            self.wfile.write(response_body)

    def log_message(self, format: str, *args: Any) -> None:
        """Suppress default logging."""
        pass


@pytest.fixture
def receiver():
    """Start a chunk receiving server.

    Yields:
        (upload URL, ChunkReceiver)
    """
    chunk_receiver = ChunkReceiver()

    class CustomHandler(ChunkRequestHandler):
        pass

    CustomHandler.receiver = chunk_receiver

    server = HTTPServer(("127.0.0.1", 0), CustomHandler)
    port = server.server_address[1]
    thread = Thread(target=server.serve_forever, daemon=True)
    thread.start()

    yield f"http://127.0.0.1:{port}/upload", chunk_receiver

    server.shutdown()
    server.server_close()


@pytest.fixture
def quiet_logger() -> logging.Logger:
    """Logger that discards every channel."""
    return LoggerConfig(debug_sink=None, info_sink=None, error_sink=None).build()
