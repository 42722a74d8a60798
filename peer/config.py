"""Configuration settings for a peer node."""

import os
from common.constants import (
    BASE_PORT,
    DEFAULT_PEER_IP,
    REQUEST_TIMEOUT_SECONDS,
    RESPONSE_TIMEOUT_SECONDS,
    TRACKER_PORT,
    TRANSFER_CHUNK_SIZE_BYTES
)


PEER_HOST = os.environ.get("P2P_PEER_HOST", DEFAULT_PEER_IP)

PEER_BASE_PORT = int(os.environ.get("P2P_BASE_PORT", str(BASE_PORT)))

PEER_CHUNK_SIZE = int(os.environ.get("P2P_CHUNK_SIZE", str(TRANSFER_CHUNK_SIZE_BYTES)))

# Wait for the first bytes of a peer's answer
PEER_RESPONSE_TIMEOUT = float(os.environ.get("P2P_RESPONSE_TIMEOUT", str(RESPONSE_TIMEOUT_SECONDS)))

# Wait for a requester to send its request
PEER_REQUEST_TIMEOUT = float(os.environ.get("P2P_REQUEST_TIMEOUT", str(REQUEST_TIMEOUT_SECONDS)))

# Per-read limit while streaming; unset means wait indefinitely
_stream_timeout = os.environ.get("P2P_STREAM_TIMEOUT")
PEER_STREAM_TIMEOUT = float(_stream_timeout) if _stream_timeout else None

TRACKER_URL = os.environ.get("P2P_TRACKER_URL", f"http://localhost:{TRACKER_PORT}")

TRACKER_TIMEOUT = float(os.environ.get("P2P_TRACKER_TIMEOUT", "10"))

TRACKER_MAX_RETRIES = int(os.environ.get("P2P_TRACKER_MAX_RETRIES", "3"))
