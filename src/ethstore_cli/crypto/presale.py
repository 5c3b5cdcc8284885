"""Ethereum presale wallet files.

A presale wallet stores ``encseed`` (AES-128-CBC iv followed by ciphertext of
the seed) and ``ethaddr``. The AES key is the first half of
PBKDF2-HMAC-SHA256(password, salt=password, 2000 rounds) and the account
secret is keccak256(seed).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from eth_utils import keccak

from ethstore_cli.crypto.keys import address_from_secret, is_valid_secret
from ethstore_cli.errors import InvalidKeyFileError, InvalidPasswordError

PRESALE_KDF_ROUNDS = 2000
IV_LEN = 16


def derive_presale_key(password: str) -> bytes:
    password_bytes = password.encode("utf-8")
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=password_bytes,
        iterations=PRESALE_KDF_ROUNDS,
    )
    return kdf.derive(password_bytes)[:16]


@dataclass(frozen=True)
class PresaleWallet:
    iv: bytes
    ciphertext: bytes
    address: bytes

    @classmethod
    def open(cls, path: str | Path) -> PresaleWallet:
        wallet_path = Path(path)
        try:
            payload = json.loads(wallet_path.read_text(encoding="utf-8"))
        except Exception as exc:
            raise InvalidKeyFileError(f"Invalid presale wallet: {wallet_path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise InvalidKeyFileError(f"Invalid presale wallet: {wallet_path}")

        encseed = payload.get("encseed")
        ethaddr = payload.get("ethaddr")
        if not isinstance(encseed, str) or not isinstance(ethaddr, str):
            raise InvalidKeyFileError(
                f"Invalid presale wallet: {wallet_path}: encseed and ethaddr are required"
            )
        try:
            seed_bytes = bytes.fromhex(encseed.removeprefix("0x"))
            address = bytes.fromhex(ethaddr.removeprefix("0x"))
        except ValueError as exc:
            raise InvalidKeyFileError(f"Invalid presale wallet: {wallet_path}: {exc}") from exc

        ciphertext = seed_bytes[IV_LEN:]
        if len(address) != 20 or not ciphertext or len(ciphertext) % 16:
            raise InvalidKeyFileError(f"Invalid presale wallet: {wallet_path}")
        return cls(iv=seed_bytes[:IV_LEN], ciphertext=ciphertext, address=address)

    def decrypt(self, password: str) -> bytes:
        """Return the account secret, or raise InvalidPasswordError."""
        decryptor = Cipher(algorithms.AES(derive_presale_key(password)), modes.CBC(self.iv)).decryptor()
        padded = decryptor.update(self.ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(128).unpadder()
        try:
            seed = unpadder.update(padded) + unpadder.finalize()
        except ValueError as exc:
            raise InvalidPasswordError() from exc

        secret = keccak(seed)
        if not is_valid_secret(secret) or address_from_secret(secret) != self.address:
            raise InvalidPasswordError()
        return secret
