"""Interactive chat client."""

from __future__ import annotations

import asyncio
import sys
from contextlib import suppress
from dataclasses import dataclass
from enum import Enum, auto

from .crypto import DiffieHellman, XorCipher
from .protocol import (
    MessageType,
    ProtocolError,
    decode_public_key,
    encode_public_key,
    receive_message,
    send_message,
)

HELP_TEXT = """\
Available commands:
  /list - Show online clients
  /msg <client_id> <message> - Send a private message to a client
  /exit - Disconnect from chat
Any other text will be sent as a public message to all clients"""

MSG_USAGE = "Usage: /msg <client_id> <message>"


class CommandKind(Enum):
    EXIT = auto()
    LIST = auto()
    PRIVATE = auto()
    PUBLIC = auto()
    USAGE = auto()


@dataclass(frozen=True)
class Command:
    """One line of user input, interpreted."""

    kind: CommandKind
    target: str | None = None
    text: str = ""


def parse_command(line: str) -> Command | None:
    """Interpret a line of input; return None for a blank line."""
    text = line.strip()
    if not text:
        return None
    if text == "/exit":
        return Command(CommandKind.EXIT)
    if text == "/list":
        return Command(CommandKind.LIST)
    if text.startswith("/msg "):
        parts = text.split(" ", 2)
        if len(parts) < 3:
            return Command(CommandKind.USAGE)
        return Command(CommandKind.PRIVATE, target=parts[1], text=parts[2])
    return Command(CommandKind.PUBLIC, text=text)


def _outgoing(command: Command, cipher: XorCipher) -> tuple[MessageType, bytes]:
    if command.kind is CommandKind.EXIT:
        return MessageType.DISCONNECT, b""
    if command.kind is CommandKind.LIST:
        return MessageType.CLIENT_LIST, b""
    if command.kind is CommandKind.PRIVATE:
        return MessageType.DATA, cipher.encrypt(f"DM:{command.target} {command.text}".encode())
    if command.kind is CommandKind.PUBLIC:
        return MessageType.DATA, cipher.encrypt(command.text.encode())
    raise ValueError(f"command {command.kind.name} has no message")


async def perform_key_exchange(reader: asyncio.StreamReader, writer) -> XorCipher:
    """Answer the server's public key with ours and return the session cipher."""
    msg_type, data = await receive_message(reader)
    if msg_type is not MessageType.KEY_EXCHANGE or len(data) != 8:
        raise ProtocolError("Invalid key exchange data from server")
    server_key = decode_public_key(data)
    dh = DiffieHellman()
    await send_message(writer, MessageType.KEY_EXCHANGE, encode_public_key(dh.public_key))
    dh.compute_shared_secret(server_key)
    return XorCipher(dh.derive_key())


def _split_address(server_addr: str) -> tuple[str, int]:
    host, sep, port = server_addr.rpartition(":")
    if not sep or not host or not port.isdigit() or int(port) > 0xFFFF:
        raise ValueError("invalid socket address syntax")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, int(port)


def _prompt() -> None:
    print("> ", end="", flush=True)


async def _receive_loop(reader: asyncio.StreamReader, cipher: XorCipher) -> None:
    while True:
        try:
            msg_type, payload = await receive_message(reader)
        except (asyncio.IncompleteReadError, ProtocolError, OSError) as exc:
            print(f"\nError receiving message: {exc}")
            return
        if msg_type is MessageType.DATA:
            print("\n" + cipher.decrypt(payload).decode("utf-8", errors="replace"))
            _prompt()
        elif msg_type is MessageType.CLIENT_LIST:
            clients = cipher.decrypt(payload).decode("utf-8", errors="replace")
            print(f"\nOnline clients:\n{clients}")
            _prompt()
        elif msg_type is MessageType.DISCONNECT:
            print("\nServer disconnected")
            return


async def _input_loop(writer, cipher: XorCipher) -> None:
    while True:
        _prompt()
        line = await asyncio.to_thread(sys.stdin.readline)
        # End of input is treated as a request to leave.
        command = parse_command(line) if line else Command(CommandKind.EXIT)
        if command is None:
            continue
        if command.kind is CommandKind.USAGE:
            print(MSG_USAGE)
            continue
        await send_message(writer, *_outgoing(command, cipher))
        if command.kind is CommandKind.EXIT:
            return


async def run_client(server_addr: str) -> None:
    """Connect to a server and chat using lines read from standard input."""
    print(f"Connecting to server at {server_addr}...")
    host, port = _split_address(server_addr)
    reader, writer = await asyncio.open_connection(host, port)
    print("Connected to server!")
    try:
        cipher = await perform_key_exchange(reader, writer)
        print("Secure channel established!")
        print(HELP_TEXT)
        listener = asyncio.create_task(_receive_loop(reader, cipher))
        try:
            await _input_loop(writer, cipher)
        finally:
            listener.cancel()
            with suppress(asyncio.CancelledError):
                await listener
    finally:
        writer.close()
    print("Connection closed")