"""NaCl box (Curve25519 + XSalsa20-Poly1305) seal/open of single values.

Wire form (FullText): base64(nonce || ciphertext), nonce = 24 random bytes.
"""

from typing import Any

import nacl.exceptions
import nacl.public
import nacl.utils

from tokenvault.common.errors import DecryptionError
from tokenvault.common.utils import b64_decode, b64_encode, decode_value, encode_value
from tokenvault.crypto.keys import check_key

NONCE_SIZE = nacl.public.Box.NONCE_SIZE  # 24


def _box(server_public_key: bytes, client_private_key: bytes) -> nacl.public.Box:
    server_pk = nacl.public.PublicKey(check_key(server_public_key, "server public key"))
    client_sk = nacl.public.PrivateKey(check_key(client_private_key, "client private key"))
    return nacl.public.Box(client_sk, server_pk)


def box_seal(value: Any, server_public_key: bytes, client_private_key: bytes) -> str:
    """
    Encrypt one value and return its FullText.

    :param value: any JSON-serializable value
    :param server_public_key: 32-byte server ephemeral public key
    :param client_private_key: 32-byte client ephemeral private key
    :return: base64(nonce || ciphertext)
    """
    return box_seal_bytes(encode_value(value), server_public_key, client_private_key)


def box_seal_bytes(plaintext: bytes, server_public_key: bytes, client_private_key: bytes) -> str:
    """Seal an already-encoded value (see encode_value)."""
    nonce = nacl.utils.random(NONCE_SIZE)

    ciphertext = _box(server_public_key, client_private_key).encrypt(plaintext, nonce).ciphertext
    return b64_encode(nonce + ciphertext)


def box_open(full_text: str, server_public_key: bytes, client_private_key: bytes) -> Any:
    """
    Decrypt a FullText back to the value passed to box_seal.

    Raises DecryptionError if the blob is malformed, tampered with,
    or sealed under a different key pair.
    """
    box = _box(server_public_key, client_private_key)

    try:
        raw = b64_decode(full_text)
    except (ValueError, AttributeError) as e:
        raise DecryptionError("decryption failed: fulltext is not base64") from e

    if len(raw) <= NONCE_SIZE:
        raise DecryptionError("decryption failed: fulltext too short")

    nonce, ciphertext = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
    try:
        plaintext = box.decrypt(ciphertext, nonce)
    except nacl.exceptions.CryptoError as e:
        raise DecryptionError("decryption failed") from e

    try:
        return decode_value(plaintext)
    except ValueError as e:
        raise DecryptionError("decryption failed: plaintext is not valid JSON") from e
