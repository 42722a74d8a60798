"""Inbound side of the transfer protocol: serve shared files to other peers."""

import asyncio
import socket
import struct
from typing import Optional, Set

from common.constants import NOT_FOUND_RESPONSE
from common.exceptions import P2PShareError, ProtocolError
from common.logging_config import get_logger
from common.protocol import TransferRequest, read_request
from peer.config import PEER_CHUNK_SIZE, PEER_HOST, PEER_REQUEST_TIMEOUT
from peer.file_storage import stream_file

logger = get_logger(__name__)


class PeerListener:
    """
    Accepts transfer requests and streams the requested files back.

    Each connection is served by its own task with no limit on how many run
    at once. A request is honoured only if the path is currently registered
    under the named owner. The requester itself is never identified, so
    anyone who can reach the listener can fetch any file the owner shares.

    Args:
        registry: Registry or TrackerClient used to authorize requests
        host: Interface to bind
        port: Port to bind (0 picks an ephemeral port)
        chunk_size: Bytes written per piece while streaming
        request_timeout: Seconds to wait for a requester's request
    """

    def __init__(
        self,
        registry,
        host: str = PEER_HOST,
        port: int = 0,
        chunk_size: int = PEER_CHUNK_SIZE,
        request_timeout: Optional[float] = PEER_REQUEST_TIMEOUT
    ):
        self.registry = registry
        self.host = host
        self.port = port
        self.chunk_size = chunk_size
        self.request_timeout = request_timeout
        self.server: Optional[asyncio.AbstractServer] = None
        self._connections: Set[asyncio.StreamWriter] = set()

    async def start(self) -> None:
        """
        Bind and start accepting connections.

        Raises:
            OSError: If the address cannot be bound
        """
        if self.server is not None:
            raise RuntimeError("Listener already started")

        self.server = await asyncio.start_server(
            self._handle_connection,
            self.host,
            self.port
        )
        logger.info(f"Listening on {self.host}:{self.bound_port}")

    async def stop(self) -> None:
        """Stop accepting connections and close the ones in flight."""
        if self.server is None:
            return

        port = self.bound_port
        server, self.server = self.server, None
        server.close()
        for writer in list(self._connections):
            writer.close()
        await server.wait_closed()
        logger.info(f"Listener on {self.host}:{port} stopped")

    @property
    def is_serving(self) -> bool:
        return self.server is not None and self.server.is_serving()

    @property
    def bound_port(self) -> int:
        """Actual listening port (differs from port when port was 0)."""
        if self.server is None or not self.server.sockets:
            return self.port
        return self.server.sockets[0].getsockname()[1]

    async def __aenter__(self) -> 'PeerListener':
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def _handle_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter
    ) -> None:
        peername = writer.get_extra_info('peername')
        self._connections.add(writer)
        try:
            await self._serve(reader, writer, peername)
        except ConnectionError as e:
            logger.warning(f"Connection with {peername} lost: {e}")
        finally:
            self._connections.discard(writer)
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError as e:
                logger.debug(f"Error while closing connection with {peername}: {e}")

    async def _serve(self, reader, writer, peername) -> None:
        try:
            request = await asyncio.wait_for(read_request(reader), timeout=self.request_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"No request from {peername} within {self.request_timeout}s, closing")
            return
        except ProtocolError as e:
            logger.warning(f"Malformed request from {peername}: {e}")
            await self._reject(writer)
            return

        logger.info(f"Request from {peername}: {request.path} of {request.owner}")

        if not await self._is_authorized(request):
            logger.info(f"Refused {request.path} of {request.owner}: not registered")
            await self._reject(writer)
            return

        await self._send_file(writer, request, peername)

    async def _is_authorized(self, request: TransferRequest) -> bool:
        try:
            files = await self.registry.files_of(request.owner)
        except P2PShareError as e:
            logger.error(f"Cannot authorize {request.path} of {request.owner}: {e}")
            return False
        return request.path in files

    async def _reject(self, writer: asyncio.StreamWriter) -> None:
        if writer.is_closing():
            return
        writer.write(NOT_FOUND_RESPONSE)
        await writer.drain()

    async def _send_file(self, writer, request: TransferRequest, peername) -> None:
        """
        Stream the file, then return so the caller closes the connection.

        A file that cannot be opened is answered like an unregistered one,
        since nothing has been sent yet. A read error part way through
        resets the connection.
        """
        sent = 0
        try:
            for piece in stream_file(request.path, self.chunk_size):
                writer.write(piece)
                await writer.drain()
                sent += len(piece)
        except ConnectionError:
            raise
        except OSError as e:
            if sent == 0:
                logger.error(f"Cannot read shared file {request.path}: {e}")
                await self._reject(writer)
            else:
                logger.error(f"Read error on {request.path} after {sent} bytes, aborting transfer: {e}")
                self._reset(writer)
            return

        logger.info(f"Sent {request.path} ({sent} bytes) to {peername}")

    @staticmethod
    def _reset(writer: asyncio.StreamWriter) -> None:
        """Drop the connection with an RST so the receiver cannot mistake it for EOF."""
        sock = writer.get_extra_info('socket')
        if sock is not None:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack('ii', 1, 0))
        writer.transport.abort()
