# xorchat

xorchat is a small terminal chat program that runs over TCP. One server takes
connections from any number of clients. Each connection starts with a toy
Diffie-Hellman key exchange. After the exchange, every data frame is
enciphered with a repeating-key XOR cipher derived from the shared secret.

The cryptography is for learning only. The group uses the prime 23, so an
attacker can try every key at once. Do not use it for anything that must stay
private.

## Installation

```
pip install .
```

With the test dependencies:

```
pip install ".[test]"
```

## Running a server

```
xorchat server 9000
```

The server binds to every interface (`0.0.0.0`). If the port is missing, or is
not a number from 0 to 65535, the server uses 8080. If the port cannot be
bound, the server prints an error to standard error and exits with status 1.

When a client connects, the server:

1. sends its public key and reads the client's public key,
2. sends an enciphered welcome line that gives the client's id and the number
   of other clients online,
3. answers each data frame with an enciphered `Message received`,
4. ends the session when it gets a disconnect frame or the connection drops.

A client's id is the address and port it connects from, for example
`127.0.0.1:53412`. IPv6 addresses appear in brackets.

## Running a client

```
xorchat client 127.0.0.1:9000
```

After the handshake, the client reads lines from standard input:

| Input                         | What the client sends                                     |
|-------------------------------|-----------------------------------------------------------|
| `/list`                       | a client-list request frame                               |
| `/msg <client_id> <message>`  | a data frame holding `DM:<client_id> <message>`           |
| `/exit`                       | a disconnect frame, then the client quits                 |
| any other text                | a data frame holding the text                             |

Blank lines are ignored. A `/msg` without both a client id and a message prints
a usage line. End of input counts as `/exit`. The client prints every data
frame it receives, and the text of any client-list frame under
`Online clients:`. It stops listening when the server sends a disconnect frame.

If the client cannot connect or the handshake fails, `xorchat` prints
`Client error: ...` to standard error.

## What the server does not do

The server keeps a table of connected clients and puts join, leave and chat
notices on a queue (`ServerState.broadcast`), but nothing takes those notices
off the queue and sends them to other clients. In practice:

- public messages are not passed on to other clients; the sender only gets
  `Message received`;
- `/msg` is handled like any other data frame, so no private message reaches
  its target;
- `/list` gets no reply; the server logs it as an unexpected message type.

## Wire format

Each frame has three parts:

1. one type byte: 1 = key exchange, 2 = data, 3 = disconnect, 4 = client list
2. the payload length as a big-endian 32-bit integer
3. the payload

In a key-exchange frame, the payload is the sender's public key as an 8-byte
little-endian integer. `xorchat.protocol` provides `encode_message`,
`send_message`, `receive_message`, `encode_public_key` and
`decode_public_key`. Malformed frames raise `ProtocolError`.

## Library use

```python
from xorchat.crypto import DiffieHellman, XorCipher

alice = DiffieHellman()
bob = DiffieHellman()
alice.compute_shared_secret(bob.public_key)
bob.compute_shared_secret(alice.public_key)

cipher = XorCipher(alice.derive_key())
assert XorCipher(bob.derive_key()).decrypt(cipher.encrypt(b"hi")) == b"hi"
```

`DiffieHellman.derive_key` raises `KeyNotReadyError` if called before
`compute_shared_secret`. `xorchat.crypto` also provides `CaesarCipher`, which
shifts each byte by the sum of the key bytes modulo 256, and `mod_pow`.

## Tests

```
pytest
```