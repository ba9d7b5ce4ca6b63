"""A small TCP chat server and client with a toy Diffie-Hellman handshake and XOR-enciphered messages."""

__version__ = "0.1.0"