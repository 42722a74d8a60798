"""Outbound side of the transfer protocol: fetch a file from another peer."""

import asyncio
from typing import Optional

from common.constants import NOT_FOUND_RESPONSE
from common.exceptions import (
    NotFoundError,
    P2PShareError,
    TransferError,
    TransferTimeoutError
)
from common.logging_config import get_logger
from common.protocol import TransferRequest, encode_request
from common.types import PeerAddress
from peer.config import PEER_CHUNK_SIZE, PEER_RESPONSE_TIMEOUT, PEER_STREAM_TIMEOUT
from peer.file_storage import discard_partial, open_destination

logger = get_logger(__name__)


class TransferClient:
    """
    Downloads files straight from the owning peer's listener.

    Only the wait for the first response is bounded (response_timeout).
    After that the transfer runs until the peer closes the connection;
    stream_timeout, when set, limits how long a single read may stall.
    """

    def __init__(
        self,
        response_timeout: float = PEER_RESPONSE_TIMEOUT,
        chunk_size: int = PEER_CHUNK_SIZE,
        stream_timeout: Optional[float] = PEER_STREAM_TIMEOUT
    ):
        self.response_timeout = response_timeout
        self.chunk_size = chunk_size
        self.stream_timeout = stream_timeout

    async def download(
        self,
        address: PeerAddress,
        owner: str,
        path: str,
        destination: str
    ) -> int:
        """
        Fetch path, as shared by owner, from the listener at address.

        Args:
            address: Listener address of the owning peer
            owner: Peer the file is registered under
            path: Absolute path as registered by owner
            destination: Local file to write the received bytes to

        Returns:
            Number of bytes written to destination

        Raises:
            TransferTimeoutError: No response within response_timeout
            NotFoundError: The peer does not serve this file
            TransferError: Connection failed or broke during streaming
        """
        logger.info(f"Requesting {path} of {owner} from {address}")

        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(address.ip, address.port),
                timeout=self.response_timeout
            )
        except asyncio.TimeoutError as e:
            raise TransferTimeoutError(f"Timed out connecting to peer at {address}") from e
        except OSError as e:
            raise TransferError(f"Cannot connect to peer at {address}: {e}") from e

        try:
            writer.write(encode_request(TransferRequest(owner=owner, path=path)))
            await writer.drain()

            first = await self._await_response(reader, address)
            if first == NOT_FOUND_RESPONSE:
                raise NotFoundError(f"File not found on peer: {path} of {owner}")

            written = await self._save_stream(reader, first, destination)
            logger.info(f"Downloaded {path} of {owner} to {destination} ({written} bytes)")
            return written
        except P2PShareError:
            raise
        except OSError as e:
            raise TransferError(f"Transfer of {path} from {address} failed: {e}") from e
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                logger.debug(f"Error while closing connection to {address}: {e}")

    async def _await_response(self, reader: asyncio.StreamReader, address: PeerAddress) -> bytes:
        """
        Wait for the first bytes of the answer.

        When those bytes are a strict prefix of the not-found sentinel, keep
        reading until the answer can be told apart from file data.
        """
        try:
            buffer = await asyncio.wait_for(reader.read(self.chunk_size), timeout=self.response_timeout)
        except asyncio.TimeoutError as e:
            raise TransferTimeoutError(
                f"No response from peer at {address} within {self.response_timeout}s"
            ) from e

        while buffer and len(buffer) < len(NOT_FOUND_RESPONSE) and NOT_FOUND_RESPONSE.startswith(buffer):
            data = await self._read_stream(reader)
            if not data:
                break
            buffer += data

        return buffer

    async def _read_stream(self, reader: asyncio.StreamReader) -> bytes:
        if self.stream_timeout is None:
            return await reader.read(self.chunk_size)
        try:
            return await asyncio.wait_for(reader.read(self.chunk_size), timeout=self.stream_timeout)
        except asyncio.TimeoutError as e:
            raise TransferError(f"Peer stalled for more than {self.stream_timeout}s") from e

    async def _save_stream(self, reader: asyncio.StreamReader, first: bytes, destination: str) -> int:
        """Write everything received, in order, until the peer closes."""
        written = 0
        try:
            with open_destination(destination) as out:
                data = first
                while data:
                    out.write(data)
                    written += len(data)
                    data = await self._read_stream(reader)
        except (P2PShareError, OSError):
            discard_partial(destination)
            raise
        return written
