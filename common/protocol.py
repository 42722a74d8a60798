"""Peer transfer wire protocol: request message and its framing.

A request travels as one frame: a 4-byte big-endian length followed by that
many bytes of UTF-8 JSON. The response is not framed at all; it is either
the literal NOT_FOUND_RESPONSE or the raw file bytes, ended by the sender
closing the connection.
"""

import asyncio
import json
import struct
from dataclasses import dataclass

from common.constants import FRAME_HEADER_SIZE, MAX_FRAME_BYTES
from common.exceptions import ProtocolError

REQUEST_TYPE = "transfer_request"

_HEADER = struct.Struct(">I")


@dataclass
class TransferRequest:
    """Request message asking a peer to stream one of its owner's files."""
    owner: str
    path: str

    def to_json(self) -> bytes:
        """Serialize to JSON bytes."""
        return json.dumps({
            'type': REQUEST_TYPE,
            'owner': self.owner,
            'path': self.path
        }).encode('utf-8')

    @classmethod
    def from_json(cls, data: bytes) -> 'TransferRequest':
        """Deserialize from JSON bytes."""
        try:
            obj = json.loads(data.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ProtocolError(f"Request is not valid JSON: {e}") from e

        if not isinstance(obj, dict) or obj.get('type') != REQUEST_TYPE:
            raise ProtocolError("Unexpected message type")

        owner = obj.get('owner')
        path = obj.get('path')
        if not isinstance(owner, str) or not isinstance(path, str):
            raise ProtocolError("Request must carry string 'owner' and 'path' fields")

        return cls(owner=owner, path=path)


def encode_frame(payload: bytes) -> bytes:
    """
    Prefix payload with its length.

    Raises:
        ProtocolError: If payload exceeds MAX_FRAME_BYTES
    """
    if len(payload) > MAX_FRAME_BYTES:
        raise ProtocolError(f"Frame of {len(payload)} bytes exceeds limit of {MAX_FRAME_BYTES}")
    return _HEADER.pack(len(payload)) + payload


async def read_frame(reader: asyncio.StreamReader) -> bytes:
    """
    Read one length-prefixed frame from the stream.

    Raises:
        ProtocolError: If the stream ends early or the frame is oversized
    """
    try:
        header = await reader.readexactly(FRAME_HEADER_SIZE)
        (length,) = _HEADER.unpack(header)
        if length > MAX_FRAME_BYTES:
            raise ProtocolError(f"Frame of {length} bytes exceeds limit of {MAX_FRAME_BYTES}")
        return await reader.readexactly(length)
    except asyncio.IncompleteReadError as e:
        raise ProtocolError(
            f"Connection closed after {len(e.partial)} of {e.expected} expected bytes"
        ) from e


def encode_request(request: TransferRequest) -> bytes:
    """Serialize and frame a transfer request."""
    return encode_frame(request.to_json())


async def read_request(reader: asyncio.StreamReader) -> TransferRequest:
    """Read and decode one framed transfer request."""
    return TransferRequest.from_json(await read_frame(reader))
