"""Tests for the command-line entry point."""

import pytest

import main

RFC_SECRET_B32 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


def test_code_command(capsys: pytest.CaptureFixture) -> None:
    assert main.main(["--digits", "8", "code", RFC_SECRET_B32, "--time", "59"]) == 0
    assert capsys.readouterr().out.strip() == "94287082"


def test_code_is_zero_padded(capsys: pytest.CaptureFixture) -> None:
    assert main.main(["--digits", "8", "code", RFC_SECRET_B32, "--time", "1111111109"]) == 0
    assert capsys.readouterr().out.strip() == "07081804"


def test_verify_ok(capsys: pytest.CaptureFixture) -> None:
    assert main.main(["verify", RFC_SECRET_B32, "287082", "--time", "60"]) == 0
    assert capsys.readouterr().out.strip() == "OK"


def test_verify_fail(capsys: pytest.CaptureFixture) -> None:
    assert main.main(["verify", RFC_SECRET_B32, "755224", "--time", "60"]) == 1
    assert capsys.readouterr().out.strip() == "FAIL"


def test_verify_window_flag() -> None:
    assert main.main(["--window", "5", "verify", RFC_SECRET_B32, "755224", "--time", "60"]) == 0


def test_new_command(capsys: pytest.CaptureFixture) -> None:
    assert main.main(["new", "--issuer", "Example", "--account", "alice"]) == 0
    out = capsys.readouterr().out
    assert "Secret:" in out
    assert "Scratch codes:" in out
    assert "otpauth://totp/Example:alice?" in out


def test_uri_command(capsys: pytest.CaptureFixture) -> None:
    assert main.main(["uri", RFC_SECRET_B32, "alice", "--issuer", "Example"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("otpauth://totp/")
    assert lines[1].startswith("https://chart.googleapis.com/chart?")


def test_bad_secret_reports_error(capsys: pytest.CaptureFixture) -> None:
    assert main.main(["code", "!!!"]) == 2
    assert "error:" in capsys.readouterr().err


def test_bad_config_reports_error(capsys: pytest.CaptureFixture) -> None:
    assert main.main(["--digits", "5", "code", RFC_SECRET_B32]) == 2
    assert "digits" in capsys.readouterr().err


def test_env_config(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    monkeypatch.setenv("TOTP_CODE_DIGITS", "8")
    assert main.main(["code", RFC_SECRET_B32, "--time", "59"]) == 0
    assert capsys.readouterr().out.strip() == "94287082"
