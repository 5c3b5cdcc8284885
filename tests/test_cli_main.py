from __future__ import annotations

import io
import logging

import pytest

from ethstore_cli.cli.main import main

from conftest import ADDRESS, SECRET


@pytest.fixture
def cli_config(tmp_path, monkeypatch) -> str:
    for var in ("ETHSTORE_DIR", "ETHSTORE_DATA_DIR", "ETHSTORE_GETH_DIR"):
        monkeypatch.delenv(var, raising=False)
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        "\n".join(
            [
                "[ethstore]",
                f'data_dir = "{(tmp_path / "data").as_posix()}"',
                f'geth_dir = "{(tmp_path / "geth").as_posix()}"',
                "kdf_iterations = 2",
                "crack_workers = 1",
                "",
            ]
        ),
        encoding="utf-8",
    )
    return str(config_path)


def _run(*argv: str) -> tuple[int, str, str]:
    out = io.StringIO()
    err = io.StringIO()
    rc = main(list(argv), stdout=out, stderr=err)
    return rc, out.getvalue(), err.getvalue()


def test_insert_prints_address(cli_config, write_password, keys_dir) -> None:
    pwd = write_password("pwd.txt", "pw\n")

    rc, out, err = _run("--config", cli_config, "insert", SECRET, pwd, "--dir", keys_dir)
    assert rc == 0
    assert out == ADDRESS + "\n"
    assert err == ""


def test_insert_without_dir_uses_configured_default(cli_config, write_password, tmp_path) -> None:
    pwd = write_password("pwd.txt", "pw\n")

    rc, out, _ = _run("--config", cli_config, "insert", SECRET, pwd)
    assert rc == 0
    assert out == ADDRESS + "\n"
    assert any((tmp_path / "data" / "keys" / "ethereum").iterdir())


def test_env_dir_overrides_default(cli_config, write_password, tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("ETHSTORE_DIR", "parity-kovan")
    pwd = write_password("pwd.txt", "pw\n")

    rc, _, _ = _run("--config", cli_config, "insert", SECRET, pwd)
    assert rc == 0
    assert any((tmp_path / "data" / "keys" / "kovan").iterdir())


def test_change_pwd_prints_boolean(cli_config, write_password, keys_dir) -> None:
    pwd = write_password("pwd.txt", "pw\n")
    new = write_password("new.txt", "new\n")
    _run("--config", cli_config, "insert", SECRET, pwd, "--dir", keys_dir)

    rc, out, _ = _run("--config", cli_config, "change-pwd", ADDRESS, new, pwd, "--dir", keys_dir)
    assert (rc, out) == (0, "false\n")
    rc, out, _ = _run("--config", cli_config, "change-pwd", ADDRESS, pwd, new, "--dir", keys_dir)
    assert (rc, out) == (0, "true\n")


def test_vault_flow(cli_config, write_password, keys_dir) -> None:
    pwd = write_password("pwd.txt", "pw\n")
    vault_pwd = write_password("vault.txt", "vault\n")

    assert _run("--config", cli_config, "create-vault", "a", vault_pwd, "--dir", keys_dir)[1] == "OK\n"
    assert _run("--config", cli_config, "create-vault", "b", vault_pwd, "--dir", keys_dir)[1] == "OK\n"
    assert _run("--config", cli_config, "list-vaults", "--dir", keys_dir)[1] == "a\nb\n"

    _run("--config", cli_config, "insert", SECRET, pwd, "--dir", keys_dir)
    rc, out, _ = _run("--config", cli_config, "move-to-vault", ADDRESS, "b", vault_pwd, "--dir", keys_dir)
    assert (rc, out) == (0, "OK\n")

    rc, out, _ = _run(
        "--config", cli_config, "list", "--dir", keys_dir, "--vault", "b", "--vault-pwd", vault_pwd
    )
    assert (rc, out) == (0, f" 0: {ADDRESS}\n")

    rc, out, _ = _run("--config", cli_config, "move-from-vault", ADDRESS, "b", vault_pwd, "--dir", keys_dir)
    assert (rc, out) == (0, "OK\n")
    assert _run("--config", cli_config, "list", "--dir", keys_dir)[1] == f" 0: {ADDRESS}\n"


def test_public_and_sign(cli_config, write_password, keys_dir) -> None:
    pwd = write_password("pwd.txt", "pw\n")
    _run("--config", cli_config, "insert", SECRET, pwd, "--dir", keys_dir)

    rc, out, _ = _run("--config", cli_config, "public", ADDRESS, pwd, "--dir", keys_dir)
    assert rc == 0
    assert out.startswith("0x") and len(out.strip()) == 130

    rc, out, _ = _run("--config", cli_config, "sign", ADDRESS, pwd, "11" * 32, "--dir", keys_dir)
    assert rc == 0
    assert out.startswith("0x") and len(out.strip()) == 132


def test_find_wallet_pass(cli_config, write_password, presale_wallet) -> None:
    path, _, _ = presale_wallet("secret")
    candidates = write_password("candidates.txt", "a\nb\nc\n")

    rc, out, err = _run("--config", cli_config, "find-wallet-pass", str(path), candidates)
    assert (rc, out, err) == (0, "Password not found.\n", "")


def test_import_optional_password(cli_config, write_password, tmp_path) -> None:
    pwd = write_password("pwd.txt", "pw\n")
    src = str(tmp_path / "src")
    _run("--config", cli_config, "insert", SECRET, pwd, "--dir", src)

    rc, out, _ = _run("--config", cli_config, "import", "--src", src, "--dir", str(tmp_path / "dst"))
    assert (rc, out) == (0, f" 0: {ADDRESS}\n")


def test_usage_error_for_missing_arguments(cli_config) -> None:
    rc, out, err = _run("--config", cli_config, "insert", SECRET)
    assert rc == 2
    assert out == ""
    assert err.startswith("usage error:")


def test_usage_error_for_unknown_command() -> None:
    rc, _, err = _run("frobnicate")
    assert rc == 2
    assert "usage error" in err


def test_password_file_error(cli_config, keys_dir, tmp_path) -> None:
    missing = str(tmp_path / "missing.txt")
    rc, out, err = _run("--config", cli_config, "insert", SECRET, missing, "--dir", keys_dir)
    assert rc == 3
    assert out == ""
    assert err.startswith("password file error: Error opening password file")
    assert missing in err


def test_invalid_address_is_input_error(cli_config, write_password, keys_dir) -> None:
    pwd = write_password("pwd.txt", "pw\n")
    rc, _, err = _run("--config", cli_config, "sign", "0xnothex", pwd, "11" * 32, "--dir", keys_dir)
    assert rc == 1
    assert err == "invalid input: Invalid address\n"


def test_store_error(cli_config, write_password, keys_dir) -> None:
    pwd = write_password("pwd.txt", "pw\n")
    rc, _, err = _run("--config", cli_config, "public", ADDRESS, pwd, "--dir", keys_dir)
    assert rc == 4
    assert err == "store error: Invalid account\n"


def test_wrong_vault_password_is_error(cli_config, write_password, keys_dir) -> None:
    vault_pwd = write_password("vault.txt", "vault\n")
    wrong = write_password("wrong.txt", "wrong\n")
    _run("--config", cli_config, "create-vault", "a", vault_pwd, "--dir", keys_dir)

    rc, _, err = _run("--config", cli_config, "list", "--dir", keys_dir, "--vault", "a", "--vault-pwd", wrong)
    assert rc == 4
    assert err == "store error: Invalid password\n"


def test_invalid_config_returns_error(tmp_path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('log_level = "loud"\n', encoding="utf-8")

    rc, out, err = _run("--config", str(config_path), "list-vaults")
    assert rc == 1
    assert out == ""
    assert "config error" in err


def test_verbose_logs_to_stderr(cli_config, write_password, keys_dir) -> None:
    pwd = write_password("pwd.txt", "pw\n")
    rc, out, err = _run("--config", cli_config, "--verbose", "insert", SECRET, pwd, "--dir", keys_dir)

    assert rc == 0
    assert out == ADDRESS + "\n"
    assert "DEBUG ethstore_cli" in err
    logging.getLogger("ethstore_cli").setLevel(logging.WARNING)


def test_version_flag(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert capsys.readouterr().out.startswith("ethstore ")
