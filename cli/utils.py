"""Formatting helpers for CLI output."""

from typing import Dict, List, Tuple

from common.types import PeerAddress


def format_listing(records: List[Tuple[str, List[str]]]) -> str:
    """
    Format every owner's shared files as "owner - path" lines.

    Args:
        records: (owner, paths) pairs as returned by list_all

    Returns:
        One line per shared file, or a notice when nothing is shared
    """
    lines = [f"{owner} - {path}" for owner, paths in records for path in paths]
    if not lines:
        return "No files shared."
    return "\n".join(lines)


def format_owner_files(owner: str, paths: List[str]) -> str:
    if not paths:
        return f"{owner} shares no files."
    return "\n".join(f"{owner} - {path}" for path in paths)


def format_correspondence(correspondence: Dict[str, PeerAddress]) -> str:
    if not correspondence:
        return "No peers known."
    return "\n".join(
        f"{owner} @ {address}" for owner, address in sorted(correspondence.items())
    )


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"
