"""Runs the shell's peer node on a background event loop.

The REPL is synchronous, while the peer node, its listener and the tracker
client are asyncio code. The session owns a dedicated loop thread and
submits coroutines to it, so the listener keeps serving other peers while
the prompt waits for input.
"""

import asyncio
import threading
from typing import Optional

from common.exceptions import P2PShareError
from common.logging_config import get_logger
from cli.config import Config
from cli.utils import format_correspondence, format_file_size, format_listing, format_owner_files
from peer.node import PeerNode
from peer.tracker_client import TrackerClient

logger = get_logger(__name__)


class PeerSession:
    """Peer node plus tracker client, driven from the REPL. Methods return display text."""

    def __init__(self, config: Config, tracker: Optional[TrackerClient] = None):
        """
        Initialize the session and its loop thread.

        Args:
            config: Configuration instance
            tracker: Optional registry view (tests pass a local Registry)
        """
        self.config = config
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever,
            daemon=True,
            name="PeerSessionLoop"
        )
        self._thread.start()

        if tracker is None:
            retry_config = config.get_retry_config()
            tracker = self._run(self._create_tracker(
                config.get_tracker_url(),
                config.get_timeout(),
                retry_config['max_retries'],
                retry_config['retry_backoff_multiplier']
            ))
        self.tracker = tracker
        self.node: Optional[PeerNode] = None
        logger.info(f"Peer session ready [tracker={config.get_tracker_url()}]")

    @staticmethod
    async def _create_tracker(base_url, timeout, max_retries, backoff) -> TrackerClient:
        return TrackerClient(
            base_url,
            timeout=timeout,
            max_retries=max_retries,
            retry_backoff_multiplier=backoff
        )

    def _run(self, coro):
        """Run a coroutine on the session loop and wait for its result."""
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result()

    def start(self, name: str) -> str:
        if self.node is not None:
            return f"Already running as {self.node.name}. Use 'stop' first."

        node = PeerNode(
            name,
            self.tracker,
            host=self.config.get_peer_host(),
            base_port=self.config.get_base_port()
        )
        try:
            address = self._run(node.start())
        except P2PShareError as e:
            return f"Failed to start peer: {e}"
        except OSError as e:
            return f"Failed to start listener: {e}"

        self.node = node
        return f"Peer {name} listening on {address}"

    def stop(self) -> str:
        if self.node is None:
            return "No peer running."

        name = self.node.name
        try:
            self._run(self.node.stop())
        except P2PShareError as e:
            return f"Listener stopped, but leaving the tracker failed: {e}"
        finally:
            self.node = None
        return f"Peer {name} stopped."

    def share(self, file_list: str) -> str:
        if self.node is None:
            return "Start a peer first: start <name>"
        try:
            self._run(self.node.share(file_list))
        except P2PShareError as e:
            return f"Failed to register due to: {e}"
        return "Successfully registered files with the tracker."

    def unshare(self, file_list: str) -> str:
        if self.node is None:
            return "Start a peer first: start <name>"
        try:
            self._run(self.node.unshare(file_list))
        except P2PShareError as e:
            return f"Failed to unregister due to: {e}"
        return "Successfully unregistered files with the tracker."

    def list_files(self) -> str:
        try:
            return format_listing(self._run(self.tracker.list_all()))
        except P2PShareError as e:
            return f"Failed to list files: {e}"

    def files_of(self, owner: str) -> str:
        try:
            return format_owner_files(owner, self._run(self.tracker.files_of(owner)))
        except P2PShareError as e:
            return f"Failed to list files: {e}"

    def peers(self) -> str:
        try:
            return format_correspondence(self._run(self.tracker.all_correspondence()))
        except P2PShareError as e:
            return f"Failed to list peers: {e}"

    def download(self, owner: str, path: str, save_path: str) -> str:
        if self.node is None:
            return "Start a peer first: start <name>"
        try:
            size = self._run(self.node.download(owner, path, save_path))
        except P2PShareError as e:
            return f"Download failed: {e}"
        return f"File download completed! Saved {path} to {save_path} ({format_file_size(size)})"

    def close(self) -> None:
        """Stop the peer if running, close the tracker client and the loop thread."""
        if self.node is not None:
            self.stop()
        if isinstance(self.tracker, TrackerClient):
            self._run(self.tracker.close())
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5.0)
        self._loop.close()
        logger.info("Peer session closed")
