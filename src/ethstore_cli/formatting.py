"""Rendering of command results."""

from __future__ import annotations

from collections.abc import Sequence

from ethstore_cli.types import Outcome

OK = "OK"
PASSWORD_NOT_FOUND = "Password not found."


def format_address(address: bytes) -> str:
    return f"0x{address.hex()}"


def format_accounts(addresses: Sequence[bytes]) -> str:
    return "\n".join(f"{index:2}: {format_address(address)}" for index, address in enumerate(addresses))


def format_vaults(vaults: Sequence[str]) -> str:
    return "\n".join(vaults)


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def format_outcome(outcome: Outcome) -> str:
    return format_bool(outcome.ok)


def format_hex(value: bytes) -> str:
    return f"0x{value.hex()}"


def format_found_password(password: str | None) -> str:
    if password is None:
        return PASSWORD_NOT_FOUND
    return f"Found password: {password}"
