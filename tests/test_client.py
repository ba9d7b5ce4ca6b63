import asyncio
import io

import pytest

from xorchat.client import (
    Command,
    CommandKind,
    parse_command,
    perform_key_exchange,
    run_client,
)
from xorchat.crypto import DiffieHellman, XorCipher
from xorchat.protocol import (
    MessageType,
    ProtocolError,
    decode_public_key,
    encode_public_key,
    receive_message,
    send_message,
)


@pytest.mark.parametrize(
    "line, expected",
    [
        ("/exit", Command(CommandKind.EXIT)),
        ("  /list \n", Command(CommandKind.LIST)),
        ("/msg bob hello there", Command(CommandKind.PRIVATE, "bob", "hello there")),
        ("/msg bob", Command(CommandKind.USAGE)),
        ("hello world\n", Command(CommandKind.PUBLIC, text="hello world")),
        ("/msgbob hi", Command(CommandKind.PUBLIC, text="/msgbob hi")),
    ],
)
def test_parse_command(line, expected):
    assert parse_command(line) == expected


def test_parse_blank_line_is_none():
    assert parse_command("   \n") is None


async def _fake_server(handler):
    server = await asyncio.start_server(handler, "127.0.0.1", 0)
    return server, server.sockets[0].getsockname()[1]


@pytest.mark.asyncio
async def test_key_exchange_agrees_with_server():
    result = asyncio.get_running_loop().create_future()

    async def handler(reader, writer):
        dh = DiffieHellman()
        await send_message(writer, MessageType.KEY_EXCHANGE, encode_public_key(dh.public_key))
        _, data = await receive_message(reader)
        dh.compute_shared_secret(decode_public_key(data))
        result.set_result(XorCipher(dh.derive_key()))
        writer.close()

    server, port = await _fake_server(handler)
    try:
        reader, writer = await asyncio.open_connection("127.0.0.1", port)
        cipher = await perform_key_exchange(reader, writer)
        server_cipher = await asyncio.wait_for(result, 5)
        writer.close()
    finally:
        server.close()
        await server.wait_closed()
    assert cipher == server_cipher
    assert server_cipher.decrypt(cipher.encrypt(b"ping")) == b"ping"


@pytest.mark.asyncio
async def test_key_exchange_rejects_wrong_frame():
    async def handler(reader, writer):
        await send_message(writer, MessageType.DATA, bytes(8))
        await writer.drain()

    server, port = await _fake_server(handler)
    try:
        reader, writer = await asyncio.open_connection("127.0.0.1", port)
        with pytest.raises(ProtocolError):
            await perform_key_exchange(reader, writer)
        writer.close()
    finally:
        server.close()
        await server.wait_closed()


@pytest.mark.asyncio
async def test_run_client_sends_commands(monkeypatch, capsys):
    frames = asyncio.get_running_loop().create_future()

    async def handler(reader, writer):
        dh = DiffieHellman()
        await send_message(writer, MessageType.KEY_EXCHANGE, encode_public_key(dh.public_key))
        _, data = await receive_message(reader)
        dh.compute_shared_secret(decode_public_key(data))
        cipher = XorCipher(dh.derive_key())
        await send_message(writer, MessageType.DATA, cipher.encrypt(b"welcome aboard"))
        received = []
        while True:
            msg_type, payload = await receive_message(reader)
            received.append((msg_type, cipher.decrypt(payload)))
            if msg_type is MessageType.DISCONNECT:
                break
        frames.set_result(received)
        writer.close()

    monkeypatch.setattr(
        "sys.stdin", io.StringIO("hello\n\n/msg bob\n/msg bob hi\n/list\n/exit\n")
    )
    server, port = await _fake_server(handler)
    try:
        await asyncio.wait_for(run_client(f"127.0.0.1:{port}"), 10)
        received = await asyncio.wait_for(frames, 5)
    finally:
        server.close()
        await server.wait_closed()

    assert received == [
        (MessageType.DATA, b"hello"),
        (MessageType.DATA, b"DM:bob hi"),
        (MessageType.CLIENT_LIST, b""),
        (MessageType.DISCONNECT, b""),
    ]
    out = capsys.readouterr().out
    assert "Secure channel established!" in out
    assert "Usage: /msg <client_id> <message>" in out
    assert out.rstrip().endswith("Connection closed")


@pytest.mark.asyncio
async def test_run_client_rejects_bad_address():
    with pytest.raises(ValueError):
        await run_client("no-port-here")