"""Local file access for transfers: streaming shared files out, saving downloads."""

from pathlib import Path
from typing import BinaryIO, Iterator

from common.constants import TRANSFER_CHUNK_SIZE_BYTES
from common.logging_config import get_logger

logger = get_logger(__name__)


def stream_file(path: str, piece_size: int = TRANSFER_CHUNK_SIZE_BYTES) -> Iterator[bytes]:
    """
    Stream file data in pieces.

    Args:
        path: Absolute path of the shared file
        piece_size: Size of each piece in bytes (default 1KB)

    Yields:
        File data pieces

    Raises:
        FileNotFoundError: If the file does not exist
        OSError: If opening or reading fails
    """
    with open(path, 'rb') as f:
        while True:
            piece = f.read(piece_size)
            if not piece:
                break
            yield piece


def open_destination(path: str) -> BinaryIO:
    """
    Open a download destination for writing, creating parent directories.

    An existing file is truncated.
    """
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    return open(destination, 'wb')


def discard_partial(path: str) -> bool:
    """
    Remove an incomplete download.

    Returns:
        True if a file was removed, False if there was nothing to remove
    """
    destination = Path(path)
    try:
        destination.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning(f"Could not remove partial download {path}: {e}")
        return False
    return True
