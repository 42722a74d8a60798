"""End-to-end tests for the listener and the transfer client."""

import asyncio

import httpx
import pytest

from common.constants import NOT_FOUND_RESPONSE
from common.exceptions import NotFoundError, TransferError, TransferTimeoutError
from common.protocol import encode_frame, read_request
from common.types import PeerAddress
from peer.listener import PeerListener
from peer.tracker_client import TrackerClient
from peer.transfer_client import TransferClient


def _listener(registry, **kwargs) -> PeerListener:
    return PeerListener(registry, host="127.0.0.1", port=0, **kwargs)


class TestDownload:
    """Test downloading from a live listener."""

    @pytest.mark.asyncio
    async def test_transfer_copies_file(self, registry, shared_file, tmp_path):
        await registry.register("alice", str(shared_file))
        listener = _listener(registry)
        await listener.start()
        destination = tmp_path / "downloads" / "copy.txt"

        try:
            written = await TransferClient().download(
                PeerAddress("127.0.0.1", listener.bound_port), "alice", str(shared_file), str(destination)
            )
        finally:
            await listener.stop()

        assert destination.read_bytes() == shared_file.read_bytes()
        assert written == shared_file.stat().st_size

    @pytest.mark.asyncio
    async def test_unregistered_file_not_found(self, registry, shared_file, tmp_path):
        await registry.register("alice", "/other.txt")
        destination = tmp_path / "copy.txt"

        async with _listener(registry) as listener:
            with pytest.raises(NotFoundError):
                await TransferClient().download(
                    PeerAddress("127.0.0.1", listener.bound_port), "alice", str(shared_file), str(destination)
                )

        assert not destination.exists()

    @pytest.mark.asyncio
    async def test_wrong_owner_not_found(self, registry, shared_file, tmp_path):
        await registry.register("alice", str(shared_file))

        async with _listener(registry) as listener:
            with pytest.raises(NotFoundError):
                await TransferClient().download(
                    PeerAddress("127.0.0.1", listener.bound_port), "bob", str(shared_file), str(tmp_path / "x")
                )

    @pytest.mark.asyncio
    async def test_registered_but_missing_file_not_found(self, registry, tmp_path):
        missing = tmp_path / "gone.txt"
        await registry.register("alice", str(missing))

        async with _listener(registry) as listener:
            with pytest.raises(NotFoundError):
                await TransferClient().download(
                    PeerAddress("127.0.0.1", listener.bound_port), "alice", str(missing), str(tmp_path / "x")
                )

    @pytest.mark.asyncio
    async def test_empty_file(self, registry, tmp_path):
        empty = tmp_path / "empty.txt"
        empty.write_bytes(b"")
        await registry.register("alice", str(empty))
        destination = tmp_path / "copy.txt"

        async with _listener(registry) as listener:
            written = await TransferClient().download(
                PeerAddress("127.0.0.1", listener.bound_port), "alice", str(empty), str(destination)
            )

        assert written == 0
        assert destination.read_bytes() == b""

    @pytest.mark.asyncio
    async def test_concurrent_downloads(self, registry, shared_file, tmp_path):
        await registry.register("alice", str(shared_file))
        client = TransferClient(chunk_size=64)

        async with _listener(registry, chunk_size=100) as listener:
            address = PeerAddress("127.0.0.1", listener.bound_port)
            sizes = await asyncio.gather(*(
                client.download(address, "alice", str(shared_file), str(tmp_path / f"copy{i}.txt"))
                for i in range(5)
            ))

        assert sizes == [shared_file.stat().st_size] * 5
        for i in range(5):
            assert (tmp_path / f"copy{i}.txt").read_bytes() == shared_file.read_bytes()


class TestFailures:
    """Test timeouts and broken connections."""

    @pytest.mark.asyncio
    async def test_silent_peer_times_out(self, tmp_path):
        async def silent(reader, writer):
            await reader.read()
            writer.close()

        server = await asyncio.start_server(silent, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        destination = tmp_path / "copy.txt"

        try:
            with pytest.raises(TransferTimeoutError):
                await TransferClient(response_timeout=0.2).download(
                    PeerAddress("127.0.0.1", port), "alice", "/a.txt", str(destination)
                )
        finally:
            server.close()
            await server.wait_closed()

        assert not destination.exists()

    @pytest.mark.asyncio
    async def test_refused_connection(self, free_port, tmp_path):
        with pytest.raises(TransferError):
            await TransferClient().download(
                PeerAddress("127.0.0.1", free_port), "alice", "/a.txt", str(tmp_path / "copy.txt")
            )

    @pytest.mark.asyncio
    async def test_sentinel_split_across_writes(self, tmp_path):
        async def slow_sentinel(reader, writer):
            await read_request(reader)
            writer.write(NOT_FOUND_RESPONSE[:4])
            await writer.drain()
            await asyncio.sleep(0.05)
            writer.write(NOT_FOUND_RESPONSE[4:])
            await writer.drain()
            writer.close()

        server = await asyncio.start_server(slow_sentinel, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]

        try:
            with pytest.raises(NotFoundError):
                await TransferClient().download(
                    PeerAddress("127.0.0.1", port), "alice", "/a.txt", str(tmp_path / "copy.txt")
                )
        finally:
            server.close()
            await server.wait_closed()

    @pytest.mark.asyncio
    async def test_listener_rejects_malformed_request(self, registry):
        async with _listener(registry) as listener:
            reader, writer = await asyncio.open_connection("127.0.0.1", listener.bound_port)
            writer.write(encode_frame(b"garbage"))
            await writer.drain()

            response = await asyncio.wait_for(reader.read(), timeout=2)
            writer.close()
            await writer.wait_closed()

        assert response == NOT_FOUND_RESPONSE

    @pytest.mark.asyncio
    async def test_listener_drops_idle_connection(self, registry):
        async with _listener(registry, request_timeout=0.1) as listener:
            reader, writer = await asyncio.open_connection("127.0.0.1", listener.bound_port)

            response = await asyncio.wait_for(reader.read(), timeout=2)
            writer.close()
            await writer.wait_closed()

        assert response == b""


class TestListenerLifecycle:
    """Test starting and stopping the listener."""

    @pytest.mark.asyncio
    async def test_start_stop(self, registry):
        listener = PeerListener(registry, host="127.0.0.1", port=0)
        await listener.start()

        assert listener.is_serving
        assert listener.bound_port > 0

        await listener.stop()
        assert not listener.is_serving
        await listener.stop()

    @pytest.mark.asyncio
    async def test_double_start_raises(self, registry):
        async with _listener(registry) as listener:
            with pytest.raises(RuntimeError):
                await listener.start()


class TestBrokenStreams:
    """Test failures after file data has started flowing."""

    @pytest.mark.asyncio
    async def test_reset_mid_stream_discards_partial_file(self, tmp_path):
        async def send_then_reset(reader, writer):
            await read_request(reader)
            writer.write(b"x" * 5000)
            await writer.drain()
            PeerListener._reset(writer)

        server = await asyncio.start_server(send_then_reset, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        destination = tmp_path / "copy.txt"

        try:
            with pytest.raises(TransferError) as exc_info:
                await TransferClient().download(
                    PeerAddress("127.0.0.1", port), "alice", "/a.txt", str(destination)
                )
        finally:
            server.close()
            await server.wait_closed()

        assert isinstance(exc_info.value.__cause__, OSError)
        assert not destination.exists()

    @pytest.mark.asyncio
    async def test_listener_read_error_after_first_chunk(self, registry, shared_file, tmp_path, monkeypatch):
        def failing_stream(path, piece_size):
            yield b"first chunk"
            raise OSError("disk read failed")

        monkeypatch.setattr("peer.listener.stream_file", failing_stream)
        await registry.register("alice", str(shared_file))
        destination = tmp_path / "copy.txt"

        async with _listener(registry) as listener:
            with pytest.raises(TransferError):
                await TransferClient().download(
                    PeerAddress("127.0.0.1", listener.bound_port), "alice", str(shared_file), str(destination)
                )

        assert not destination.exists()

    @pytest.mark.asyncio
    async def test_unreachable_tracker_refuses_request(self, shared_file, tmp_path):
        def handler(request):
            raise httpx.ReadError("connection dropped", request=request)

        tracker = TrackerClient("http://tracker", max_retries=0, transport=httpx.MockTransport(handler))
        destination = tmp_path / "copy.txt"

        try:
            async with _listener(tracker) as listener:
                with pytest.raises(NotFoundError):
                    await TransferClient().download(
                        PeerAddress("127.0.0.1", listener.bound_port), "alice", str(shared_file), str(destination)
                    )
        finally:
            await tracker.close()

        assert not destination.exists()
