"""Ephemeral X25519 keypairs for one handshake each."""

from typing import NamedTuple

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

KEY_SIZE = 32  # Curve25519, raw encoding


class KeyPair(NamedTuple):
    public_key: bytes
    private_key: bytes


def generate_keypair() -> KeyPair:
    """
    Generate a fresh Curve25519 keypair from the OS random source.

    The raw encodings are the same 32-byte keys NaCl crypto_box expects.
    Call once per operation; never cache the result.
    """
    private = X25519PrivateKey.generate()
    private_bytes = private.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_bytes = private.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return KeyPair(public_key=public_bytes, private_key=private_bytes)


def check_key(key: bytes, what: str = "key") -> bytes:
    """Raise ValueError unless `key` is KEY_SIZE raw bytes."""
    if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_SIZE:
        raise ValueError(f"{what} must be exactly {KEY_SIZE} bytes")
    return bytes(key)
