"""A peer: its listener, its membership in the tracker and its downloads."""

import errno
from typing import Optional, Set

from common.exceptions import NoPortAvailableError, NotFoundError
from common.logging_config import get_logger
from common.types import PeerAddress
from peer.config import PEER_BASE_PORT, PEER_CHUNK_SIZE, PEER_HOST, PEER_REQUEST_TIMEOUT
from peer.listener import PeerListener
from peer.port_allocator import allocate_port
from peer.transfer_client import TransferClient

logger = get_logger(__name__)

MAX_BIND_ATTEMPTS = 16


class PeerNode:
    """
    Ties one named peer to a registry (local Registry or remote TrackerClient).

    start() picks a port, brings the listener up and joins the registry;
    stop() reverses both. Downloads resolve the owner's address through the
    registry and then talk to the owner's listener directly.
    """

    def __init__(
        self,
        name: str,
        registry,
        host: str = PEER_HOST,
        base_port: int = PEER_BASE_PORT,
        transfer_client: Optional[TransferClient] = None,
        chunk_size: int = PEER_CHUNK_SIZE,
        request_timeout: Optional[float] = PEER_REQUEST_TIMEOUT
    ):
        self.name = name
        self.registry = registry
        self.host = host
        self.base_port = base_port
        self.transfer_client = transfer_client or TransferClient(chunk_size=chunk_size)
        self.chunk_size = chunk_size
        self.request_timeout = request_timeout
        self.listener: Optional[PeerListener] = None
        self.address: Optional[PeerAddress] = None

    @property
    def is_running(self) -> bool:
        return self.listener is not None

    async def start(self) -> PeerAddress:
        """
        Start the listener on a free port and join the registry.

        A port that turns out to be bound by another process is skipped and
        allocation is retried, up to MAX_BIND_ATTEMPTS times.

        Returns:
            Address the listener is reachable at

        Raises:
            NoPortAvailableError: If no port could be bound
        """
        if self.listener is not None:
            raise RuntimeError(f"Peer {self.name} is already running")

        listener = await self._bind_listener()
        address = PeerAddress(self.host, listener.bound_port)

        try:
            await self.registry.add_peer(self.name, address)
        except Exception:
            await listener.stop()
            raise

        self.listener = listener
        self.address = address
        logger.info(f"Peer {self.name} started at {address}")
        return address

    async def _bind_listener(self) -> PeerListener:
        base_port = self.base_port
        in_use: Set[int] = set()

        for _ in range(MAX_BIND_ATTEMPTS):
            port = await allocate_port(self.registry, base_port)
            listener = PeerListener(
                self.registry,
                host=self.host,
                port=port,
                chunk_size=self.chunk_size,
                request_timeout=self.request_timeout
            )
            try:
                await listener.start()
                return listener
            except OSError as e:
                if e.errno != errno.EADDRINUSE:
                    raise
                logger.warning(f"Port {port} is bound by another process, trying the next one")
                in_use.add(port)
                base_port = port + 1

        raise NoPortAvailableError(
            f"Could not bind a listener after {MAX_BIND_ATTEMPTS} attempts (ports in use: {sorted(in_use)})"
        )

    async def stop(self) -> None:
        """Stop the listener and leave the registry."""
        if self.listener is not None:
            await self.listener.stop()
            self.listener = None
        await self.registry.remove_peer(self.name)
        self.address = None
        logger.info(f"Peer {self.name} stopped")

    def _require_running(self) -> PeerAddress:
        if self.address is None:
            raise RuntimeError(f"Peer {self.name} is not running")
        return self.address

    async def share(self, files: str) -> None:
        """Register files (a comma-space separated list) under this peer."""
        address = self._require_running()
        await self.registry.register(self.name, files, address)

    async def unshare(self, files: str) -> None:
        self._require_running()
        await self.registry.unregister(self.name, files)

    async def download(self, owner: str, path: str, destination: str) -> int:
        """
        Download path from owner into destination.

        Returns:
            Number of bytes written

        Raises:
            NotFoundError: Owner unknown to the registry, or file not served
            TransferTimeoutError: Owner's listener did not answer in time
            TransferError: Transfer failed part way
        """
        address = await self.registry.address_of(owner)
        if address is None:
            raise NotFoundError(f"Unknown peer: {owner}")
        return await self.transfer_client.download(address, owner, path, destination)
