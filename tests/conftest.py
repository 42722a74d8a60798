"""Shared pytest fixtures for all tests."""

import socket

import pytest
from cli.config import Config
from tracker.registry import Registry


@pytest.fixture
def registry():
    """Fresh, empty in-memory registry."""
    return Registry()


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .p2pshare directory
    """
    config_dir = tmp_path / '.p2pshare'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """Config instance backed by a file in the temp directory."""
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def shared_file(tmp_path):
    """
    Create a file larger than one transfer chunk.

    Returns:
        Path to the file
    """
    file_path = tmp_path / 'shared' / 'notes.txt'
    file_path.parent.mkdir()
    file_path.write_bytes(b'p2pshare test payload\n' * 200)
    return file_path


@pytest.fixture
def free_port():
    """A port that was free on 127.0.0.1 when the fixture ran."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(('127.0.0.1', 0))
        return sock.getsockname()[1]
