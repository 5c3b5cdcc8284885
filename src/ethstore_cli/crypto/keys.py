"""secp256k1 key helpers.

Addresses are the last 20 bytes of keccak256(uncompressed public key).
Secrets, addresses and message digests are accepted as hex with an optional
``0x`` prefix.
"""

from __future__ import annotations

import re

from eth_keys import keys

from ethstore_cli.errors import InvalidAddressError, InvalidMessageError, InvalidSecretError

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

ADDRESS_LEN = 20
SECRET_LEN = 32
MESSAGE_LEN = 32


def _parse_hex(value: str, length: int) -> bytes | None:
    raw = value[2:] if value[:2] in ("0x", "0X") else value
    if not re.fullmatch(rf"[0-9a-fA-F]{{{length * 2}}}", raw):
        return None
    return bytes.fromhex(raw)


def parse_address(value: str) -> bytes:
    parsed = _parse_hex(value, ADDRESS_LEN)
    if parsed is None:
        raise InvalidAddressError()
    return parsed


def parse_secret(value: str) -> bytes:
    parsed = _parse_hex(value, SECRET_LEN)
    if parsed is None or not is_valid_secret(parsed):
        raise InvalidSecretError()
    return parsed


def parse_message(value: str) -> bytes:
    parsed = _parse_hex(value, MESSAGE_LEN)
    if parsed is None:
        raise InvalidMessageError()
    return parsed


def is_valid_secret(secret: bytes) -> bool:
    if len(secret) != SECRET_LEN:
        return False
    scalar = int.from_bytes(secret, "big")
    return 0 < scalar < SECP256K1_N


def address_from_secret(secret: bytes) -> bytes:
    if not is_valid_secret(secret):
        raise InvalidSecretError()
    return keys.PrivateKey(secret).public_key.to_canonical_address()


def public_from_secret(secret: bytes) -> bytes:
    """Return the 64-byte uncompressed public key (without the 0x04 tag)."""
    return keys.PrivateKey(secret).public_key.to_bytes()


def sign_digest(secret: bytes, digest: bytes) -> bytes:
    """Sign a 32-byte digest; returns r || s || v with v in {0, 1}."""
    if len(digest) != MESSAGE_LEN:
        raise InvalidMessageError()
    return keys.PrivateKey(secret).sign_msg_hash(digest).to_bytes()
