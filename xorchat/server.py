"""Chat server: per-connection key exchange and a shared table of clients."""

from __future__ import annotations

import asyncio
import sys
from dataclasses import dataclass

from .crypto import DiffieHellman, XorCipher
from .protocol import (
    MessageType,
    ProtocolError,
    decode_public_key,
    encode_public_key,
    receive_message,
    send_message,
)

QUEUE_CAPACITY = 100
ACK_TEXT = "Message received"


@dataclass(frozen=True)
class ClientMessage:
    """A message addressed to every connected client."""

    sender: str
    content: bytes
    exclude_sender: bool = True


class ServerState:
    """Connected clients with their ciphers, plus the outgoing broadcast queue."""

    def __init__(self) -> None:
        self.clients: dict[str, XorCipher] = {}
        self.queue: asyncio.Queue[ClientMessage] = asyncio.Queue(QUEUE_CAPACITY)
        self.lock = asyncio.Lock()

    async def add_client(self, client_id: str, cipher: XorCipher) -> None:
        """Register a client and announce it to the others."""
        async with self.lock:
            self.clients[client_id] = cipher
        await self.broadcast(
            ClientMessage(client_id, f"* New client connected: {client_id}".encode())
        )

    async def remove_client(self, client_id: str) -> None:
        """Forget a client and announce its departure."""
        async with self.lock:
            self.clients.pop(client_id, None)
        await self.broadcast(
            ClientMessage(client_id, f"* Client disconnected: {client_id}".encode())
        )

    async def broadcast(self, message: ClientMessage) -> None:
        """Queue a message for the broadcaster."""
        await self.queue.put(message)

    def drain(self) -> list[ClientMessage]:
        """Remove and return every message waiting in the queue."""
        pending = []
        while True:
            try:
                pending.append(self.queue.get_nowait())
            except asyncio.QueueEmpty:
                return pending


def _format_peer(peer) -> str:
    host, port = peer[0], peer[1]
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


async def handle_client(
    reader: asyncio.StreamReader, writer, client_id: str, state: ServerState
) -> None:
    """Run one client session from key exchange to disconnection."""
    dh = DiffieHellman()
    await send_message(writer, MessageType.KEY_EXCHANGE, encode_public_key(dh.public_key))

    msg_type, data = await receive_message(reader)
    if msg_type is not MessageType.KEY_EXCHANGE:
        raise ProtocolError("Invalid key exchange data")
    dh.compute_shared_secret(decode_public_key(data))
    cipher = XorCipher(dh.derive_key())

    await state.add_client(client_id, cipher)
    try:
        print(f"Secure channel established with {client_id}")

        async with state.lock:
            others = len(state.clients) - 1
        welcome = (
            f"Welcome! You are connected as {client_id}. "
            f"There are {others} other clients online."
        )
        await send_message(writer, MessageType.DATA, cipher.encrypt(welcome.encode()))

        while True:
            try:
                msg_type, payload = await receive_message(reader)
            except (asyncio.IncompleteReadError, ProtocolError, ConnectionError) as exc:
                print(f"Client {client_id} disconnected: {exc}")
                break

            if msg_type is MessageType.DATA:
                text = cipher.decrypt(payload).decode("utf-8", errors="replace")
                print(f"Message from {client_id}: {text}")
                await state.broadcast(
                    ClientMessage(client_id, f"{client_id}: {text}".encode())
                )
                await send_message(
                    writer, MessageType.DATA, cipher.encrypt(ACK_TEXT.encode())
                )
            elif msg_type is MessageType.DISCONNECT:
                print(f"Client {client_id} disconnected")
                break
            else:
                print(f"Unexpected message type from {client_id}")
    finally:
        await state.remove_client(client_id)


async def _dispatch(state: ServerState) -> None:
    # Queued broadcasts are consumed here; they are not forwarded to peers.
    while True:
        await state.queue.get()


async def run_server(port: int) -> None:
    """Listen on every interface and serve clients until cancelled."""
    state = ServerState()

    async def on_connect(reader: asyncio.StreamReader, writer) -> None:
        client_id = _format_peer(writer.get_extra_info("peername"))
        print(f"New connection from: {client_id}")
        try:
            await handle_client(reader, writer, client_id, state)
        except (ProtocolError, asyncio.IncompleteReadError, ConnectionError):
            pass
        finally:
            writer.close()

    addr = f"0.0.0.0:{port}"
    try:
        server = await asyncio.start_server(on_connect, "0.0.0.0", port)
    except OSError as exc:
        print(f"Failed to bind to port {port}: {exc}", file=sys.stderr)
        print("The port may already be in use. Try another port.", file=sys.stderr)
        raise SystemExit(1) from None

    print(f"Server listening on {addr}")
    dispatcher = asyncio.create_task(_dispatch(state))
    try:
        async with server:
            await server.serve_forever()
    finally:
        dispatcher.cancel()