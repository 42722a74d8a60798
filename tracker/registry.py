"""In-memory registry of peers, the files they share and their addresses."""

import asyncio
from typing import Dict, List, Optional, Tuple

from common.constants import BASE_PORT, DEFAULT_PEER_IP
from common.logging_config import get_logger
from common.types import FileRecord, PeerAddress
from tracker.validation import parse_file_list, validate_owner

logger = get_logger(__name__)

DEFAULT_ADDRESS = PeerAddress(DEFAULT_PEER_IP, BASE_PORT)


class _Entry:
    """Mutable per-owner state. Never handed out; callers get FileRecord snapshots."""

    __slots__ = ("paths", "address")

    def __init__(self, paths: List[str], address: PeerAddress):
        self.paths = paths
        self.address = address

    def snapshot(self, owner: str) -> FileRecord:
        return FileRecord(owner=owner, paths=tuple(self.paths), address=self.address)


class Registry:
    """
    Directory of owner -> (shared paths, listener address).

    Every operation, reads included, runs while holding one asyncio.Lock.
    The lock hands itself to waiters in FIFO order, so operations are
    applied one at a time in the order they arrived and a read always sees
    the state left by all earlier operations.

    There is deliberately no read-modify-write primitive: a caller that
    reads a snapshot and then writes based on it (the port allocator)
    races against other writers.
    """

    def __init__(self):
        self._records: Dict[str, _Entry] = {}
        self.lock = asyncio.Lock()

    async def register(
        self,
        owner: str,
        files: Optional[str],
        address: PeerAddress = DEFAULT_ADDRESS
    ) -> None:
        """
        Register shared files for owner.

        Creates the record on first use. For an existing record only paths
        not yet present are appended, and the stored address is kept (the
        address argument is ignored).

        Raises:
            ValidationError: If owner or files is malformed. Nothing is changed.
        """
        validate_owner(owner)
        paths = parse_file_list(files)

        async with self.lock:
            entry = self._records.get(owner)
            if entry is None:
                self._records[owner] = _Entry(paths, address)
                logger.info(f"Registered new owner {owner} @ {address} with {len(paths)} file(s)")
                return

            known = set(entry.paths)
            added = [path for path in paths if path not in known]
            entry.paths.extend(added)
            logger.info(f"Registered {len(added)} new file(s) for {owner}")

    async def unregister(self, owner: str, files: Optional[str]) -> None:
        """
        Stop sharing the named files.

        Unknown owners are a no-op. If no paths remain, the whole record is
        dropped, address included, even if the owner originally joined with
        add_peer.

        Raises:
            ValidationError: If owner or files is malformed. Nothing is changed.
        """
        validate_owner(owner)
        paths = set(parse_file_list(files))

        async with self.lock:
            entry = self._records.get(owner)
            if entry is None:
                logger.debug(f"Unregister for unknown owner {owner} ignored")
                return

            entry.paths = [path for path in entry.paths if path not in paths]
            if not entry.paths:
                del self._records[owner]
                logger.info(f"Owner {owner} has no files left, record removed")
            else:
                logger.info(f"Unregistered files for {owner}, {len(entry.paths)} remaining")

    async def add_peer(self, owner: str, address: PeerAddress) -> None:
        """Create an empty record for owner. Existing records are left untouched."""
        validate_owner(owner)

        async with self.lock:
            if owner in self._records:
                logger.debug(f"Peer {owner} already known, address not changed")
                return
            self._records[owner] = _Entry([], address)
            logger.info(f"Peer joined: {owner} @ {address}")

    async def remove_peer(self, owner: str) -> None:
        """Drop the record for owner if there is one."""
        async with self.lock:
            if self._records.pop(owner, None) is not None:
                logger.info(f"Peer left: {owner}")

    async def list_all(self) -> List[Tuple[str, List[str]]]:
        async with self.lock:
            return [(owner, list(entry.paths)) for owner, entry in self._records.items()]

    async def records(self) -> List[FileRecord]:
        async with self.lock:
            return [entry.snapshot(owner) for owner, entry in self._records.items()]

    async def files_of(self, owner: str) -> List[str]:
        async with self.lock:
            entry = self._records.get(owner)
            return list(entry.paths) if entry else []

    async def address_of(self, owner: str) -> Optional[PeerAddress]:
        async with self.lock:
            entry = self._records.get(owner)
            return entry.address if entry else None

    async def port_of(self, owner: str) -> Optional[int]:
        address = await self.address_of(owner)
        return address.port if address else None

    async def all_correspondence(self) -> Dict[str, PeerAddress]:
        """Map every known owner to its address."""
        return {record.owner: record.address for record in await self.records()}
