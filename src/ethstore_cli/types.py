"""Vault and account addressing types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class RootVault:
    """The unscoped key directory."""

    def __str__(self) -> str:
        return "root"


@dataclass(frozen=True)
class NamedVault:
    name: str

    def __str__(self) -> str:
        return f"vault:{self.name}"


VaultRef = Union[RootVault, NamedVault]

ROOT = RootVault()


@dataclass(frozen=True)
class AccountRef:
    address: bytes
    vault: VaultRef = ROOT

    @classmethod
    def root(cls, address: bytes) -> AccountRef:
        return cls(address=address, vault=ROOT)

    @classmethod
    def in_vault(cls, name: str, address: bytes) -> AccountRef:
        return cls(address=address, vault=NamedVault(name))


@dataclass(frozen=True)
class Outcome:
    """Result of a best-effort store operation.

    ``ok`` is False when the store refused the operation; ``reason`` then holds
    the store's error text. Failures that prevent the attempt altogether are
    raised, not reported here.
    """

    ok: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.ok
