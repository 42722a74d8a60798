"""Tests for the peer node lifecycle and downloads between nodes."""

import pytest

from common.exceptions import NotFoundError, ValidationError
from peer.node import PeerNode


@pytest.fixture
def base_port(free_port):
    return free_port


class TestLifecycle:
    """Test start/stop."""

    @pytest.mark.asyncio
    async def test_start_joins_registry(self, registry, base_port):
        node = PeerNode("alice", registry, host="127.0.0.1", base_port=base_port)

        address = await node.start()
        try:
            assert node.is_running
            assert address.port >= base_port
            assert await registry.address_of("alice") == address
            assert await registry.files_of("alice") == []
        finally:
            await node.stop()

        assert not node.is_running
        assert await registry.address_of("alice") is None

    @pytest.mark.asyncio
    async def test_two_nodes_get_distinct_ports(self, registry, base_port):
        alice = PeerNode("alice", registry, host="127.0.0.1", base_port=base_port)
        bob = PeerNode("bob", registry, host="127.0.0.1", base_port=base_port)

        first = await alice.start()
        second = await bob.start()
        try:
            assert first.port != second.port
        finally:
            await bob.stop()
            await alice.stop()

    @pytest.mark.asyncio
    async def test_start_twice_raises(self, registry, base_port):
        node = PeerNode("alice", registry, host="127.0.0.1", base_port=base_port)
        await node.start()
        try:
            with pytest.raises(RuntimeError):
                await node.start()
        finally:
            await node.stop()

    @pytest.mark.asyncio
    async def test_failed_join_stops_listener(self, registry, base_port):
        node = PeerNode("", registry, host="127.0.0.1", base_port=base_port)

        with pytest.raises(ValidationError):
            await node.start()

        assert not node.is_running

    @pytest.mark.asyncio
    async def test_share_requires_running_node(self, registry):
        node = PeerNode("alice", registry)

        with pytest.raises(RuntimeError):
            await node.share("/a.txt")


class TestSharing:
    """Test sharing and downloading between two nodes."""

    @pytest.mark.asyncio
    async def test_share_uses_node_address(self, registry, base_port):
        node = PeerNode("alice", registry, host="127.0.0.1", base_port=base_port)
        address = await node.start()
        try:
            await node.share("/a.txt, /b.txt")
            await node.unshare("/a.txt")

            assert await registry.files_of("alice") == ["/b.txt"]
            assert await registry.address_of("alice") == address
        finally:
            await node.stop()

    @pytest.mark.asyncio
    async def test_download_between_nodes(self, registry, base_port, shared_file, tmp_path):
        alice = PeerNode("alice", registry, host="127.0.0.1", base_port=base_port)
        bob = PeerNode("bob", registry, host="127.0.0.1", base_port=base_port)
        await alice.start()
        await bob.start()
        destination = tmp_path / "bob" / "notes.txt"

        try:
            await alice.share(str(shared_file))
            written = await bob.download("alice", str(shared_file), str(destination))
        finally:
            await bob.stop()
            await alice.stop()

        assert written == shared_file.stat().st_size
        assert destination.read_bytes() == shared_file.read_bytes()

    @pytest.mark.asyncio
    async def test_download_from_unknown_peer(self, registry, tmp_path):
        node = PeerNode("bob", registry)

        with pytest.raises(NotFoundError, match="Unknown peer"):
            await node.download("alice", "/a.txt", str(tmp_path / "a.txt"))
