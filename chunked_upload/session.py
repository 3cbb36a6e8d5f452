"""
Session identifiers for grouping the chunks of one upload.

Every chunk request carries the same identifier in its ``Session-ID`` header so
the receiver can tell which logical upload a chunk belongs to.
"""

import secrets

SESSION_ID_BYTES = 8


def generate_session_id() -> str:
    """
    Generate a new random session identifier.

    Returns:
        str: 16 upper-case hexadecimal characters, e.g. "9F86D081884C7D65"
    """
    return secrets.token_hex(SESSION_ID_BYTES).upper()
