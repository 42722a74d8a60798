"""Pydantic schemas for file registration endpoints."""

from typing import List, Optional
from pydantic import BaseModel, Field

from common.constants import MAX_PORT, MIN_PORT


class RegisterFilesRequest(BaseModel):
    """
    Request model for sharing files.

    files is the raw comma-space separated list; it is validated by the
    registry so that nil and empty lists get their specific errors.
    ip/port only apply when the owner is not yet known.
    """
    owner: str
    files: Optional[str] = None
    ip: Optional[str] = None
    port: Optional[int] = Field(default=None, ge=MIN_PORT, le=MAX_PORT)


class UnregisterFilesRequest(BaseModel):
    """Request model for withdrawing shared files."""
    owner: str
    files: Optional[str] = None


class OwnerFilesResponse(BaseModel):
    """Files shared by a single owner."""
    owner: str
    paths: List[str]


class ListFilesResponse(BaseModel):
    """Files shared by every owner."""
    records: List[OwnerFilesResponse]
