"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class StartCommand:
    """Start the local peer under a name."""

    name: str
    command: Literal["start"] = "start"


@dataclass(frozen=True)
class StopCommand:
    """Stop the local peer."""

    command: Literal["stop"] = "stop"


@dataclass(frozen=True)
class ShareCommand:
    """Share files, kept exactly as typed so the tracker validates spacing."""

    file_list: str
    command: Literal["share"] = "share"


@dataclass(frozen=True)
class UnshareCommand:
    """Stop sharing files."""

    file_list: str
    command: Literal["unshare"] = "unshare"


@dataclass(frozen=True)
class ListCommand:
    """List every shared file."""

    command: Literal["list"] = "list"


@dataclass(frozen=True)
class FilesCommand:
    """List files shared by one owner."""

    owner: str
    command: Literal["files"] = "files"


@dataclass(frozen=True)
class PeersCommand:
    """List known peers."""

    command: Literal["peers"] = "peers"


@dataclass(frozen=True)
class DownloadCommand:
    """Download a file from its owner."""

    owner: str
    path: str
    save_path: str
    command: Literal["download"] = "download"


CommandRequest = (
    StartCommand
    | StopCommand
    | ShareCommand
    | UnshareCommand
    | ListCommand
    | FilesCommand
    | PeersCommand
    | DownloadCommand
)
