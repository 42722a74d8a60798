"""Shared data type definitions (PeerAddress, FileRecord)."""

from dataclasses import dataclass
from typing import Tuple

from common.constants import MAX_PORT, MIN_PORT
from common.exceptions import ValidationError


@dataclass(frozen=True)
class PeerAddress:
    """
    Network address at which a peer's listener can be reached.
    """
    ip: str
    port: int

    def __post_init__(self):
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ValidationError(f"Port must be an integer, got {self.port!r}", code="INVALID_ADDRESS")
        if not MIN_PORT <= self.port <= MAX_PORT:
            raise ValidationError(
                f"Port must be in [{MIN_PORT}, {MAX_PORT}], got {self.port}",
                code="INVALID_ADDRESS"
            )

    def to_dict(self) -> dict:
        return {"ip": self.ip, "port": self.port}

    def __str__(self) -> str:
        return f"{self.ip}:{self.port}"


@dataclass(frozen=True)
class FileRecord:
    """
    Point-in-time snapshot of one peer's sharing state.
    """
    owner: str
    paths: Tuple[str, ...]
    address: PeerAddress
