"""Framing of chat messages: a type byte, a big-endian length, then the payload."""

from __future__ import annotations

import asyncio
import struct
from enum import IntEnum

_HEADER = struct.Struct(">BI")
_MAX_PAYLOAD = 0xFFFFFFFF
PUBLIC_KEY_SIZE = 8


class MessageType(IntEnum):
    KEY_EXCHANGE = 1
    DATA = 2
    DISCONNECT = 3
    CLIENT_LIST = 4


class ProtocolError(ValueError):
    """Raised for malformed frames or payloads."""


def encode_message(msg_type: MessageType, data: bytes) -> bytes:
    """Return the wire form of one message."""
    data = bytes(data)
    if len(data) > _MAX_PAYLOAD:
        raise ProtocolError("payload too large")
    return _HEADER.pack(MessageType(msg_type), len(data)) + data


async def send_message(writer, msg_type: MessageType, data: bytes) -> None:
    """Write one message and wait until it has been flushed."""
    writer.write(encode_message(msg_type, data))
    await writer.drain()


async def receive_message(reader: asyncio.StreamReader) -> tuple[MessageType, bytes]:
    """Read one whole message.

    The payload is consumed even when the type byte is unknown, so the
    stream stays in step. A stream that ends mid-frame raises
    ``asyncio.IncompleteReadError``.
    """
    header = await reader.readexactly(_HEADER.size)
    type_byte, length = _HEADER.unpack(header)
    payload = await reader.readexactly(length)
    try:
        msg_type = MessageType(type_byte)
    except ValueError:
        raise ProtocolError("Unknown message type") from None
    return msg_type, payload


def encode_public_key(key: int) -> bytes:
    """Encode a public key as eight little-endian bytes."""
    return key.to_bytes(PUBLIC_KEY_SIZE, "little")


def decode_public_key(data: bytes) -> int:
    """Decode an eight-byte little-endian public key."""
    if len(data) != PUBLIC_KEY_SIZE:
        raise ProtocolError("Invalid key exchange data")
    return int.from_bytes(data, "little")