"""Command-line interface for ethstore."""

from __future__ import annotations

import argparse
import logging
import re
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from typing import Sequence

from ethstore_cli.cli.config import ConfigError, load_cli_config
from ethstore_cli.commands import (
    ChangePassword,
    ChangeVaultPassword,
    CommandRequest,
    CreateVault,
    FindWalletPassword,
    ImportAccounts,
    ImportWallet,
    Insert,
    ListAccounts,
    ListVaults,
    MoveFromVault,
    MoveToVault,
    PublicKey,
    RemoveAccount,
    SignMessage,
    execute,
)
from ethstore_cli.errors import (
    ArgumentParseError,
    InvalidAddressError,
    InvalidMessageError,
    InvalidSecretError,
    PasswordFileError,
    StoreError,
)

EXIT_SUCCESS = 0
EXIT_VALIDATION_ERROR = 1
EXIT_USAGE_ERROR = 2
EXIT_PASSWORD_FILE_ERROR = 3
EXIT_STORE_ERROR = 4

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
_SECRET_HEX = re.compile(r"(?i)\b(0x)?[0-9a-f]{64}\b")


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise ArgumentParseError(f"{self.prog}: {message}")


def _cli_version() -> str:
    try:
        return pkg_version("ethstore-cli")
    except PackageNotFoundError:
        return "0.0.0+local"


def _add_dir(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dir",
        default=None,
        help=(
            "Secret store directory: parity, parity-<chain>, geth, geth-test or a path "
            "(default from config: parity)"
        ),
    )


def _add_vault_flags(parser: argparse.ArgumentParser) -> None:
    _add_dir(parser)
    parser.add_argument("--vault", default="", help="Vault to use in this operation")
    parser.add_argument(
        "--vault-pwd",
        default="",
        help="Vault password file; required when --vault is set, ignored otherwise",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="ethstore", description="Ethereum key management tool.")
    parser.add_argument(
        "--version",
        action="version",
        version=f"ethstore {_cli_version()}",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to CLI config TOML (default: ~/.ethstore/config.toml)",
    )
    parser.add_argument("--verbose", action="store_true", help="Log debug details to stderr")

    sub = parser.add_subparsers(dest="command", required=True)

    insert = sub.add_parser("insert", help="Save account with password")
    insert.add_argument("secret", help="Account secret as hex")
    insert.add_argument("password", help="Password file")
    _add_vault_flags(insert)

    change_pwd = sub.add_parser("change-pwd", help="Change account password")
    change_pwd.add_argument("address")
    change_pwd.add_argument("old_pwd", metavar="old-pwd", help="Current password file")
    change_pwd.add_argument("new_pwd", metavar="new-pwd", help="New password file")
    _add_vault_flags(change_pwd)

    list_accounts = sub.add_parser("list", help="List accounts")
    _add_vault_flags(list_accounts)

    import_accounts = sub.add_parser("import", help="Import accounts from --src")
    import_accounts.add_argument(
        "password", nargs="?", default="", help="Password file for the source keys"
    )
    import_accounts.add_argument(
        "--src",
        default=None,
        help=(
            "Import source: parity, parity-<chain>, geth, geth-test or a path "
            "(default from config: geth)"
        ),
    )
    _add_dir(import_accounts)

    import_wallet = sub.add_parser("import-wallet", help="Import presale wallet")
    import_wallet.add_argument("path", help="Presale wallet file")
    import_wallet.add_argument("password", help="Password file")
    _add_vault_flags(import_wallet)

    find_wallet_pass = sub.add_parser(
        "find-wallet-pass", help="Try to open a wallet with a list of passwords"
    )
    find_wallet_pass.add_argument("path", help="Presale wallet file")
    find_wallet_pass.add_argument("password", help="File with one candidate password per line")

    remove = sub.add_parser("remove", help="Remove account")
    remove.add_argument("address")
    remove.add_argument("password", help="Password file")
    _add_vault_flags(remove)

    sign = sub.add_parser("sign", help="Sign message")
    sign.add_argument("address")
    sign.add_argument("password", help="Password file")
    sign.add_argument("message", help="32-byte message hash as hex")
    _add_vault_flags(sign)

    public = sub.add_parser("public", help="Display public key for an address")
    public.add_argument("address")
    public.add_argument("password", help="Password file")
    _add_vault_flags(public)

    list_vaults = sub.add_parser("list-vaults", help="List vaults")
    _add_dir(list_vaults)

    create_vault = sub.add_parser("create-vault", help="Create new vault")
    create_vault.add_argument("vault")
    create_vault.add_argument("password", help="Vault password file")
    _add_dir(create_vault)

    change_vault_pwd = sub.add_parser("change-vault-pwd", help="Change vault password")
    change_vault_pwd.add_argument("vault")
    change_vault_pwd.add_argument("old_pwd", metavar="old-pwd", help="Current vault password file")
    change_vault_pwd.add_argument("new_pwd", metavar="new-pwd", help="New vault password file")
    _add_dir(change_vault_pwd)

    move_to_vault = sub.add_parser(
        "move-to-vault", help="Move account to vault from another vault or the root directory"
    )
    move_to_vault.add_argument("address")
    move_to_vault.add_argument("vault_name", metavar="vault", help="Target vault")
    move_to_vault.add_argument("password", help="Target vault password file")
    _add_vault_flags(move_to_vault)

    move_from_vault = sub.add_parser(
        "move-from-vault", help="Move account to the root directory from given vault"
    )
    move_from_vault.add_argument("address")
    move_from_vault.add_argument("vault")
    move_from_vault.add_argument("password", help="Vault password file")
    _add_dir(move_from_vault)

    return parser


def _build_request(args: argparse.Namespace) -> CommandRequest:
    vault_flags = {"dir": getattr(args, "dir", None)}
    if hasattr(args, "vault_pwd"):
        vault_flags.update(vault=args.vault, vault_pwd=args.vault_pwd)

    if args.command == "insert":
        return Insert(secret=args.secret, password=args.password, **vault_flags)
    if args.command == "change-pwd":
        return ChangePassword(
            address=args.address, old_pwd=args.old_pwd, new_pwd=args.new_pwd, **vault_flags
        )
    if args.command == "list":
        return ListAccounts(**vault_flags)
    if args.command == "import":
        return ImportAccounts(password=args.password, src=args.src, dir=args.dir)
    if args.command == "import-wallet":
        return ImportWallet(path=args.path, password=args.password, **vault_flags)
    if args.command == "find-wallet-pass":
        return FindWalletPassword(path=args.path, password=args.password)
    if args.command == "remove":
        return RemoveAccount(address=args.address, password=args.password, **vault_flags)
    if args.command == "sign":
        return SignMessage(
            address=args.address, password=args.password, message=args.message, **vault_flags
        )
    if args.command == "public":
        return PublicKey(address=args.address, password=args.password, **vault_flags)
    if args.command == "list-vaults":
        return ListVaults(dir=args.dir)
    if args.command == "create-vault":
        return CreateVault(name=args.vault, password=args.password, dir=args.dir)
    if args.command == "change-vault-pwd":
        return ChangeVaultPassword(
            name=args.vault, old_pwd=args.old_pwd, new_pwd=args.new_pwd, dir=args.dir
        )
    if args.command == "move-to-vault":
        return MoveToVault(
            address=args.address, name=args.vault_name, password=args.password, **vault_flags
        )
    if args.command == "move-from-vault":
        return MoveFromVault(
            address=args.address, name=args.vault, password=args.password, dir=args.dir
        )
    raise ArgumentParseError(f"unknown command: {args.command}")


def _configure_logging(level_name: str, stream) -> None:
    logger = logging.getLogger("ethstore_cli")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level_name.upper()))


def _sanitize_error_text(value: str) -> str:
    return _SECRET_HEX.sub("[REDACTED]", value)


def _print_error(stderr, prefix: str, message: str, *, code: int) -> int:
    print(f"{prefix}: {_sanitize_error_text(message)}", file=stderr)
    return code


def main(argv: Sequence[str] | None = None, *, stdout=sys.stdout, stderr=sys.stderr) -> int:
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
        request = _build_request(args)
    except ArgumentParseError as exc:
        return _print_error(stderr, "usage error", str(exc), code=EXIT_USAGE_ERROR)

    try:
        config = load_cli_config(args.config)
    except ConfigError as exc:
        return _print_error(stderr, "config error", str(exc), code=EXIT_VALIDATION_ERROR)

    _configure_logging("debug" if args.verbose else config.log_level, stderr)

    try:
        result = execute(request, config=config)
    except PasswordFileError as exc:
        return _print_error(stderr, "password file error", str(exc), code=EXIT_PASSWORD_FILE_ERROR)
    except (InvalidAddressError, InvalidSecretError, InvalidMessageError) as exc:
        return _print_error(stderr, "invalid input", str(exc), code=EXIT_VALIDATION_ERROR)
    except StoreError as exc:
        return _print_error(stderr, "store error", str(exc), code=EXIT_STORE_ERROR)

    print(result, file=stdout)
    return EXIT_SUCCESS


if __name__ == "__main__":
    raise SystemExit(main())
