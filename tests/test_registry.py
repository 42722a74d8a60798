"""Tests for the in-memory registry."""

import asyncio

import pytest

from common.exceptions import ValidationError
from common.types import FileRecord, PeerAddress
from tracker.registry import DEFAULT_ADDRESS, Registry


class TestRegister:
    """Test sharing files."""

    @pytest.mark.asyncio
    async def test_first_registration_keeps_order(self, registry):
        await registry.register("alice", "/b.txt, /a.txt")

        assert await registry.list_all() == [("alice", ["/b.txt", "/a.txt"])]
        assert await registry.address_of("alice") == DEFAULT_ADDRESS

    @pytest.mark.asyncio
    async def test_reregistration_is_idempotent(self, registry):
        await registry.register("alice", "/a.txt, /b.txt")
        await registry.register("alice", "/a.txt, /b.txt")

        assert await registry.files_of("alice") == ["/a.txt", "/b.txt"]

    @pytest.mark.asyncio
    async def test_new_paths_are_appended_in_order(self, registry):
        await registry.register("alice", "/a.txt")
        await registry.register("alice", "/c.txt, /a.txt, /b.txt")

        assert await registry.files_of("alice") == ["/a.txt", "/c.txt", "/b.txt"]

    @pytest.mark.asyncio
    async def test_existing_address_is_kept(self, registry):
        await registry.register("alice", "/a.txt", PeerAddress("10.0.0.1", 5000))
        await registry.register("alice", "/b.txt", PeerAddress("10.0.0.2", 6000))

        assert await registry.address_of("alice") == PeerAddress("10.0.0.1", 5000)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("files,message", [
        (None, "Files cannot be nil"),
        ("", "Files cannot be empty"),
        ("/a.txt,  /b.txt", "Invalid format for files"),
        ("/a.txt, b.txt", "Files must be absolute paths"),
    ])
    async def test_invalid_files_change_nothing(self, registry, files, message):
        await registry.register("alice", "/a.txt")

        with pytest.raises(ValidationError, match=message):
            await registry.register("alice", files)
        with pytest.raises(ValidationError, match=message):
            await registry.register("bob", files)

        assert await registry.list_all() == [("alice", ["/a.txt"])]

    @pytest.mark.asyncio
    async def test_owners_listed_in_insertion_order(self, registry):
        await registry.register("bob", "/b.txt")
        await registry.register("alice", "/a.txt")

        assert [owner for owner, _ in await registry.list_all()] == ["bob", "alice"]


class TestUnregister:
    """Test withdrawing files."""

    @pytest.mark.asyncio
    async def test_subset_keeps_record(self, registry):
        await registry.register("alice", "/a.txt, /b.txt, /c.txt")
        await registry.unregister("alice", "/b.txt")

        assert await registry.files_of("alice") == ["/a.txt", "/c.txt"]
        assert await registry.address_of("alice") == DEFAULT_ADDRESS

    @pytest.mark.asyncio
    async def test_last_file_removes_record_and_address(self, registry):
        await registry.add_peer("alice", PeerAddress("127.0.0.1", 4041))
        await registry.register("alice", "/a.txt")
        await registry.unregister("alice", "/a.txt")

        assert await registry.list_all() == []
        assert await registry.address_of("alice") is None
        assert await registry.all_correspondence() == {}

    @pytest.mark.asyncio
    async def test_unknown_owner_is_noop(self, registry):
        await registry.register("alice", "/a.txt")
        await registry.unregister("bob", "/a.txt")

        assert await registry.list_all() == [("alice", ["/a.txt"])]

    @pytest.mark.asyncio
    async def test_unknown_paths_are_ignored(self, registry):
        await registry.register("alice", "/a.txt")
        await registry.unregister("alice", "/zzz.txt")

        assert await registry.files_of("alice") == ["/a.txt"]

    @pytest.mark.asyncio
    async def test_invalid_files_rejected(self, registry):
        await registry.register("alice", "/a.txt")

        with pytest.raises(ValidationError, match="Files must be absolute paths"):
            await registry.unregister("alice", "a.txt")

        assert await registry.files_of("alice") == ["/a.txt"]


class TestMembership:
    """Test add_peer / remove_peer and lookups."""

    @pytest.mark.asyncio
    async def test_add_peer_creates_empty_record(self, registry):
        address = PeerAddress("127.0.0.1", 4040)
        await registry.add_peer("alice", address)

        assert await registry.list_all() == [("alice", [])]
        assert await registry.address_of("alice") == address
        assert await registry.port_of("alice") == 4040

    @pytest.mark.asyncio
    async def test_add_peer_does_not_overwrite(self, registry):
        await registry.register("alice", "/a.txt", PeerAddress("127.0.0.1", 4040))
        await registry.add_peer("alice", PeerAddress("127.0.0.1", 9999))

        assert await registry.address_of("alice") == PeerAddress("127.0.0.1", 4040)
        assert await registry.files_of("alice") == ["/a.txt"]

    @pytest.mark.asyncio
    async def test_remove_peer(self, registry):
        await registry.register("alice", "/a.txt")
        await registry.remove_peer("alice")
        await registry.remove_peer("alice")

        assert await registry.list_all() == []

    @pytest.mark.asyncio
    async def test_unknown_owner_lookups(self, registry):
        assert await registry.files_of("nobody") == []
        assert await registry.address_of("nobody") is None
        assert await registry.port_of("nobody") is None

    @pytest.mark.asyncio
    async def test_correspondence_with_two_default_peers(self, registry):
        await registry.register("alice", "/a.txt")
        await registry.register("bob", "/b.txt")

        assert await registry.all_correspondence() == {
            "alice": DEFAULT_ADDRESS,
            "bob": DEFAULT_ADDRESS,
        }

    @pytest.mark.asyncio
    async def test_records_are_snapshots(self, registry):
        await registry.register("alice", "/a.txt")
        records = await registry.records()
        listing = await registry.list_all()

        await registry.register("alice", "/b.txt")
        listing[0][1].append("/mutated.txt")

        assert records == [FileRecord("alice", ("/a.txt",), DEFAULT_ADDRESS)]
        assert await registry.files_of("alice") == ["/a.txt", "/b.txt"]

    @pytest.mark.asyncio
    async def test_empty_owner_rejected(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            await registry.add_peer("", DEFAULT_ADDRESS)
        assert exc_info.value.code == "INVALID_OWNER"


@pytest.mark.asyncio
async def test_concurrent_registrations_are_all_applied():
    registry = Registry()

    await asyncio.gather(*(
        registry.register("alice", f"/file{i}.txt") for i in range(50)
    ))

    assert len(await registry.files_of("alice")) == 50
