#!/usr/bin/env python3
"""Example chunked upload of a file with a progress bar."""

import os
import sys

from chunked_upload import MB, ChunkedUploader, UploadStatus


def progress_callback(status: UploadStatus):
    """Display upload progress."""
    bar_length = 50
    filled = int(bar_length * status.progress_percent / 100)
    bar = "=" * filled + "-" * (bar_length - filled)
    print(
        f"\rProgress: [{bar}] {status.progress_percent:.1f}% "
        f"(part {status.transferred_parts}/{status.total_parts}, "
        f"{status.upload_speed_mbps:.2f} MB/s)",
        end="",
    )
    if status.transferred_parts == status.total_parts:
        print()


def main():
    """Run the upload example."""
    if len(sys.argv) < 3:
        print("Usage: python upload_example.py <upload_url> <file_path> [chunk_size_mb]")
        print("Example: python upload_example.py http://localhost:5000/upload /path/to/file.bin")
        sys.exit(1)

    upload_url = sys.argv[1]
    file_path = sys.argv[2]
    chunk_size = int(float(sys.argv[3]) * MB) if len(sys.argv) > 3 else MB

    if not os.path.exists(file_path):
        print(f"Error: File not found: {file_path}")
        sys.exit(1)

    uploader = ChunkedUploader.from_file(
        "POST",
        upload_url,
        file_path,
        chunk_size=chunk_size,
        headers={"Authorization": "Bearer token"},  # Optional headers
        timeout=60,
    )
    print(f"Session ID: {uploader.session_id}")

    status = uploader.upload(progress_callback=progress_callback)

    if status.failed:
        print(
            f"Upload failed after {status.transferred_parts}/{status.total_parts} parts "
            f"({status.transferred_size}/{status.total_size} bytes)"
        )
        sys.exit(1)

    print(f"Uploaded {status.total_size} bytes in {status.elapsed_time:.2f}s")


if __name__ == "__main__":
    main()
