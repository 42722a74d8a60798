"""Registry routes: peer membership and shared file lists."""

from fastapi import APIRouter, Depends, Request, status

from common.exceptions import NotFoundError
from common.logging_config import get_logger
from common.types import PeerAddress
from tracker.registry import DEFAULT_ADDRESS, Registry
from tracker.schemas import (
    AddPeerRequest,
    AddressResponse,
    ListFilesResponse,
    ListPeersResponse,
    OwnerFilesResponse,
    RegisterFilesRequest,
    StatusResponse,
    UnregisterFilesRequest
)

logger = get_logger(__name__)

router = APIRouter()


def get_registry(request: Request) -> Registry:
    """Dependency to get the registry bound to the running app"""
    return request.app.state.registry


@router.post("/peers", response_model=StatusResponse, status_code=status.HTTP_201_CREATED)
async def add_peer(body: AddPeerRequest, registry: Registry = Depends(get_registry)):
    """
    Join the tracker with no shared files.
    An already known owner keeps its stored address.
    """
    await registry.add_peer(body.owner, PeerAddress(body.ip, body.port))
    return StatusResponse(status="added")


@router.delete("/peers/{owner:path}", response_model=StatusResponse)
async def remove_peer(owner: str, registry: Registry = Depends(get_registry)):
    """Leave the tracker, dropping every shared file of owner."""
    await registry.remove_peer(owner)
    return StatusResponse(status="removed")


@router.get("/peers", response_model=ListPeersResponse)
async def list_peers(registry: Registry = Depends(get_registry)):
    """Return the owner -> address correspondence."""
    correspondence = await registry.all_correspondence()
    return ListPeersResponse(peers={
        owner: AddressResponse(ip=address.ip, port=address.port)
        for owner, address in correspondence.items()
    })


@router.get("/peers/{owner:path}/address", response_model=AddressResponse)
async def get_address(owner: str, registry: Registry = Depends(get_registry)):
    address = await registry.address_of(owner)
    if address is None:
        logger.debug(f"Address lookup for unknown peer {owner}")
        raise NotFoundError(f"Unknown peer: {owner}")
    return AddressResponse(ip=address.ip, port=address.port)


@router.post("/files", response_model=StatusResponse, status_code=status.HTTP_201_CREATED)
async def register_files(body: RegisterFilesRequest, registry: Registry = Depends(get_registry)):
    """
    Share files. Creates the owner on first registration using ip/port
    (defaulting to the local base address); later calls only merge paths.
    """
    address = PeerAddress(
        body.ip if body.ip is not None else DEFAULT_ADDRESS.ip,
        body.port if body.port is not None else DEFAULT_ADDRESS.port
    )
    await registry.register(body.owner, body.files, address)
    return StatusResponse(status="registered")


@router.post("/files/unregister", response_model=StatusResponse)
async def unregister_files(body: UnregisterFilesRequest, registry: Registry = Depends(get_registry)):
    await registry.unregister(body.owner, body.files)
    return StatusResponse(status="unregistered")


@router.get("/files", response_model=ListFilesResponse)
async def list_files(registry: Registry = Depends(get_registry)):
    """List every owner with its shared paths."""
    return ListFilesResponse(records=[
        OwnerFilesResponse(owner=owner, paths=paths)
        for owner, paths in await registry.list_all()
    ])


@router.get("/files/{owner:path}", response_model=OwnerFilesResponse)
async def get_files(owner: str, registry: Registry = Depends(get_registry)):
    """Files shared by owner (empty for unknown owners)."""
    return OwnerFilesResponse(owner=owner, paths=await registry.files_of(owner))
