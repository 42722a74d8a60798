"""Entry point for a headless peer.
Joins the tracker, shares the given files and serves them until stopped.
"""

import argparse
import asyncio
import signal
import sys

from common.exceptions import P2PShareError
from common.logging_config import setup_logging
from peer.config import PEER_BASE_PORT, PEER_HOST, TRACKER_URL
from peer.node import PeerNode
from peer.tracker_client import TrackerClient

logger = setup_logging('peer')


async def serve(name: str, files: str, tracker_url: str, host: str, base_port: int) -> None:
    """
    Run one peer until SIGINT/SIGTERM.

    Args:
        name: Peer identifier
        files: Comma-space separated absolute paths to share (may be empty)
        tracker_url: Tracker base URL
        host: Interface for the listener
        base_port: First port tried for the listener
    """
    stop_event = asyncio.Event()

    if sys.platform != 'win32':
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, stop_event.set)

    async with TrackerClient(tracker_url) as tracker:
        node = PeerNode(name, tracker, host=host, base_port=base_port)
        await node.start()
        try:
            if files:
                await node.share(files)
                logger.info(f"Sharing: {files}")
            await stop_event.wait()
            logger.info("Received stop signal, shutting down...")
        finally:
            await node.stop()


def main() -> None:
    """Bootstrap a peer from command line arguments."""
    parser = argparse.ArgumentParser(description="Run a p2pshare peer")
    parser.add_argument("name", help="peer identifier")
    parser.add_argument("files", nargs="?", default="", help='files to share, e.g. "/a/b.txt, /c/d.txt"')
    parser.add_argument("--tracker", default=TRACKER_URL, help="tracker base URL")
    parser.add_argument("--host", default=PEER_HOST, help="listener interface")
    parser.add_argument("--base-port", type=int, default=PEER_BASE_PORT, help="first listener port to try")
    args = parser.parse_args()

    logger.info(f"Initializing peer {args.name}...")

    try:
        asyncio.run(serve(args.name, args.files, args.tracker, args.host, args.base_port))
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except P2PShareError as e:
        logger.error(f"Peer failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
