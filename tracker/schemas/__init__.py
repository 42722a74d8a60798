"""Pydantic schemas for API requests and responses."""

from tracker.schemas.peers import (
    AddPeerRequest,
    AddressResponse,
    ListPeersResponse
)
from tracker.schemas.files import (
    RegisterFilesRequest,
    UnregisterFilesRequest,
    OwnerFilesResponse,
    ListFilesResponse
)
from tracker.schemas.common import ErrorResponse, StatusResponse

__all__ = [
    "AddPeerRequest",
    "AddressResponse",
    "ListPeersResponse",
    "RegisterFilesRequest",
    "UnregisterFilesRequest",
    "OwnerFilesResponse",
    "ListFilesResponse",
    "ErrorResponse",
    "StatusResponse"
]
