"""Key agreement and the toy ciphers used to protect chat traffic."""

from __future__ import annotations

import secrets
from itertools import cycle

PRIME = 23
GENERATOR = 5
KEY_LENGTH = 16


class KeyNotReadyError(RuntimeError):
    """Raised when a key is requested before the shared secret exists."""


def mod_pow(base: int, exponent: int, modulus: int) -> int:
    """Return ``base ** exponent % modulus``; a zero exponent always yields 1."""
    if modulus == 0:
        raise ZeroDivisionError("modulus must be non-zero")
    if exponent < 0:
        raise ValueError("exponent must be non-negative")
    if exponent == 0:
        return 1
    return pow(base, exponent, modulus)


class DiffieHellman:
    """One side of a Diffie-Hellman exchange over the fixed small group."""

    def __init__(self, private_key: int | None = None) -> None:
        if private_key is None:
            # Uniform over 2 .. PRIME - 2 inclusive.
            private_key = secrets.randbelow(PRIME - 3) + 2
        self.private_key = private_key
        self.public_key = mod_pow(GENERATOR, private_key, PRIME)
        self.shared_secret: int | None = None

    def compute_shared_secret(self, other_public_key: int) -> int:
        """Combine the peer's public key with ours, store and return the secret."""
        secret = mod_pow(other_public_key, self.private_key, PRIME)
        self.shared_secret = secret
        return secret

    def derive_key(self) -> bytes:
        """Expand the shared secret into a 16-byte key."""
        if self.shared_secret is None:
            raise KeyNotReadyError("Shared secret not computed yet")
        block = (self.shared_secret & 0xFFFFFFFFFFFFFFFF).to_bytes(8, "little")
        return (block * (KEY_LENGTH // len(block) + 1))[:KEY_LENGTH]


class XorCipher:
    """Repeating-key XOR; encryption and decryption are the same operation."""

    def __init__(self, key: bytes) -> None:
        key = bytes(key)
        if not key:
            raise ValueError("key must not be empty")
        self.key = key

    def __repr__(self) -> str:
        return f"XorCipher(key_length={len(self.key)})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, XorCipher):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def encrypt(self, data: bytes) -> bytes:
        return bytes(byte ^ k for byte, k in zip(data, cycle(self.key)))

    def decrypt(self, data: bytes) -> bytes:
        return self.encrypt(data)


class CaesarCipher:
    """Shifts every byte by the wrapping sum of the key bytes."""

    def __init__(self, key: bytes) -> None:
        self.shift = sum(bytes(key)) % 256
        self._forward = bytes((i + self.shift) % 256 for i in range(256))
        self._backward = bytes((i - self.shift) % 256 for i in range(256))

    def __repr__(self) -> str:
        return f"CaesarCipher(shift={self.shift})"

    def encrypt(self, data: bytes) -> bytes:
        return bytes(data).translate(self._forward)

    def decrypt(self, data: bytes) -> bytes:
        return bytes(data).translate(self._backward)