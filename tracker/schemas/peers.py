"""Pydantic schemas for peer membership endpoints."""

from typing import Dict
from pydantic import BaseModel, Field

from common.constants import MAX_PORT, MIN_PORT


class AddressResponse(BaseModel):
    """Network address of a peer listener."""
    ip: str
    port: int = Field(ge=MIN_PORT, le=MAX_PORT)


class AddPeerRequest(BaseModel):
    """Request model for a peer joining the tracker."""
    owner: str
    ip: str
    port: int = Field(ge=MIN_PORT, le=MAX_PORT)


class ListPeersResponse(BaseModel):
    """Owner to address correspondence."""
    peers: Dict[str, AddressResponse]
