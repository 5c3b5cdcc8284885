from __future__ import annotations

import json
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from eth_keys import keys
from eth_utils import keccak

from ethstore_cli.cli.config import CLIConfig
from ethstore_cli.crypto.keys import address_from_secret
from ethstore_cli.crypto.presale import derive_presale_key

SECRET = "7d29fab185a33e2cd955812397354c472d2b84615b645aa135ff539f6b0d70d5"
ADDRESS = "0xa8fa5dd30a87bb9e3288d604eb74949c515ab66e"
OTHER_SECRET = "17d08f5fe8c77af811caa0c9a187e668ce3b74a99acc3f6d976f075fa8e0be55"


def verify_digest(signature: bytes, digest: bytes, public: bytes) -> bool:
    return keys.Signature(signature).verify_msg_hash(digest, keys.PublicKey(public))


@pytest.fixture
def keys_dir(tmp_path) -> str:
    return str(tmp_path / "keys")


@pytest.fixture
def config(tmp_path) -> CLIConfig:
    return CLIConfig(
        data_dir=str(tmp_path / "data"),
        geth_dir=str(tmp_path / "geth"),
        kdf_iterations=2,
        crack_workers=2,
    )


@pytest.fixture
def write_password(tmp_path):
    def _write(name: str, content: str) -> str:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8", newline="")
        return str(path)

    return _write


@pytest.fixture
def presale_wallet(tmp_path):
    def _build(password: str, *, seed: bytes = b"presale wallet seed", name: str = "wallet.json"):
        iv = bytes(range(16))
        padder = padding.PKCS7(128).padder()
        padded = padder.update(seed) + padder.finalize()
        encryptor = Cipher(algorithms.AES(derive_presale_key(password)), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        secret = keccak(seed)
        address = address_from_secret(secret)
        path = tmp_path / name
        path.write_text(
            json.dumps(
                {
                    "encseed": (iv + ciphertext).hex(),
                    "ethaddr": address.hex(),
                    "email": "presale@example.com",
                    "btcaddr": "1EVknXyFC68kKNLkh6YnKzW41svSRoaAcx",
                }
            ),
            encoding="utf-8",
        )
        return Path(path), secret, address

    return _build
