"""Project-wide constants (ports, chunk size, timeouts, wire sentinels)."""

DEFAULT_PEER_IP: str = "127.0.0.1"
BASE_PORT: int = 4040
MIN_PORT: int = 0
MAX_PORT: int = 65535

TRANSFER_CHUNK_SIZE_BYTES: int = 1024  # 1 KiB stream piece
RESPONSE_TIMEOUT_SECONDS: float = 5.0
REQUEST_TIMEOUT_SECONDS: float = 30.0

NOT_FOUND_RESPONSE: bytes = b"File not found"

FRAME_HEADER_SIZE: int = 4
MAX_FRAME_BYTES: int = 64 * 1024

FILE_LIST_DELIMITER: str = ", "

TRACKER_PORT: int = 8000
