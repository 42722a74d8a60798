"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from cli.config import Config
from cli.models import (
    DownloadCommand,
    FilesCommand,
    ListCommand,
    PeersCommand,
    ShareCommand,
    StartCommand,
    StopCommand,
    UnshareCommand,
)
from cli.peer_session import PeerSession

logger = get_logger(__name__)


_session: Optional[PeerSession] = None


def get_session() -> PeerSession:
    """
    Get or create global PeerSession instance.

    Returns:
        PeerSession instance
    """
    global _session
    if _session is None:
        logger.debug("Creating new PeerSession instance")
        config = Config(Path.home() / '.p2pshare' / 'config.json')
        _session = PeerSession(config)
    return _session


def close_session() -> None:
    """Close the global session, stopping its peer."""
    global _session
    if _session is not None:
        _session.close()
        _session = None


def handle_start(cmd: StartCommand, session: Optional[PeerSession] = None) -> str:
    """
    Handle 'start' command.

    Args:
        cmd: StartCommand with the peer name
        session: Optional PeerSession for dependency injection (testing)

    Returns:
        Listening address or error message
    """
    logger.info(f"Executing start command: name={cmd.name}")
    if session is None:
        session = get_session()
    return session.start(cmd.name)


def handle_stop(cmd: StopCommand, session: Optional[PeerSession] = None) -> str:
    if session is None:
        session = get_session()
    return session.stop()


def handle_share(cmd: ShareCommand, session: Optional[PeerSession] = None) -> str:
    """
    Handle 'share' command.

    Args:
        cmd: ShareCommand with the raw file list
        session: Optional PeerSession for dependency injection (testing)

    Returns:
        Success or error message
    """
    logger.info(f"Executing share command: files={cmd.file_list!r}")
    if session is None:
        session = get_session()
    return session.share(cmd.file_list)


def handle_unshare(cmd: UnshareCommand, session: Optional[PeerSession] = None) -> str:
    if session is None:
        session = get_session()
    return session.unshare(cmd.file_list)


def handle_list(cmd: ListCommand, session: Optional[PeerSession] = None) -> str:
    """
    Handle 'list' command.

    Returns:
        One "owner - path" line per shared file
    """
    if session is None:
        session = get_session()
    return session.list_files()


def handle_files(cmd: FilesCommand, session: Optional[PeerSession] = None) -> str:
    if session is None:
        session = get_session()
    return session.files_of(cmd.owner)


def handle_peers(cmd: PeersCommand, session: Optional[PeerSession] = None) -> str:
    if session is None:
        session = get_session()
    return session.peers()


def handle_download(cmd: DownloadCommand, session: Optional[PeerSession] = None) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with owner, remote path and local save path
        session: Optional PeerSession for dependency injection (testing)

    Returns:
        Success or error message with download results
    """
    logger.info(f"Executing download command: owner={cmd.owner} path={cmd.path} save_path={cmd.save_path}")
    if session is None:
        session = get_session()
    result = session.download(cmd.owner, cmd.path, cmd.save_path)
    logger.debug("Download command completed")
    return result
