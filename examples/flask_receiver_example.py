#!/usr/bin/env python3
"""Flask example receiving chunked uploads.

Chunks are appended to ``uploads/<Session-ID>`` and every accepted chunk is
answered with its range so the client can account for it.
"""

import logging
import os
import re

from flask import Flask, make_response, request

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

UPLOAD_DIR = "uploads"
CONTENT_RANGE = re.compile(r"^bytes (\d+)-(\d+)/(\d+)$")
SESSION_ID = re.compile(r"^[0-9A-F]{16}$")

# Create Flask app
app = Flask(__name__)


@app.route("/upload", methods=["POST", "PUT"])
def handle_chunk():
    """Append one chunk to the upload named by its Session-ID."""
    session_id = request.headers.get("Session-ID", "")
    match = CONTENT_RANGE.match(request.headers.get("Content-Range", ""))
    if not SESSION_ID.match(session_id) or not match:
        return make_response("missing or invalid upload headers", 400)

    start, _, total = (int(value) for value in match.groups())
    body = request.get_data()
    path = os.path.join(UPLOAD_DIR, session_id)

    received = os.path.getsize(path) if os.path.exists(path) else 0
    if start != received:
        logger.warning(f"Session {session_id}: chunk at {start}, expected {received}")
        return make_response("unexpected offset", 409)

    with open(path, "ab") as f:
        f.write(body)

    logger.info(f"Session {session_id}: {received + len(body)}/{total} bytes")
    return make_response(f"{start}-{len(body)}/{total}", 200)


if __name__ == "__main__":
    os.makedirs(UPLOAD_DIR, exist_ok=True)
    print("Chunk receiver with Flask running on http://0.0.0.0:5000")
    print("Upload endpoint: http://0.0.0.0:5000/upload")
    print("Press Ctrl+C to stop")
    app.run(host="0.0.0.0", port=5000, debug=False)
