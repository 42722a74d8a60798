"""Pick an unused listener port from a snapshot of the registry."""

from typing import Iterable

from common.constants import BASE_PORT, MAX_PORT, MIN_PORT
from common.exceptions import NoPortAvailableError
from common.logging_config import get_logger

logger = get_logger(__name__)


def find_free_port(known_ports: Iterable[int], base_port: int = BASE_PORT) -> int:
    """
    Return the smallest port >= base_port that is not in known_ports.

    Args:
        known_ports: Ports already handed out to peers
        base_port: First candidate port

    Returns:
        Free port number

    Raises:
        NoPortAvailableError: If every port from base_port to MAX_PORT is taken
    """
    if base_port < MIN_PORT:
        raise NoPortAvailableError(f"Base port {base_port} is below {MIN_PORT}")

    taken = set(known_ports)
    port = base_port
    while port in taken:
        port += 1

    if port > MAX_PORT:
        raise NoPortAvailableError(f"No available port in [{base_port}, {MAX_PORT}]")

    return port


async def allocate_port(registry, base_port: int = BASE_PORT) -> int:
    """
    Choose a port for a new peer listener.

    Reads one all_correspondence() snapshot from registry (a Registry or
    TrackerClient) and picks the first port not in it. The result is not
    re-checked, so two peers allocating at the same time can get the same
    port; binding the listener is what finally detects the clash.

    Raises:
        NoPortAvailableError: If no port is left
    """
    correspondence = await registry.all_correspondence()
    port = find_free_port((address.port for address in correspondence.values()), base_port)
    logger.debug(f"Allocated port {port} ({len(correspondence)} peer(s) known)")
    return port
