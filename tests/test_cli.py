import email.utils
import time

import pytest

from twofactorauth import otp_cli
from twofactorauth.providers import time as time_module
from tests.conftest import RFC_SECRET_SHA1, SECRET, FakeResponse


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    # keep the CLI from installing handlers bound to pytest's captured stdout
    monkeypatch.setattr(otp_cli, "setup_logging", lambda level: None)


def run(capsys, *argv):
    status = otp_cli.main(list(argv))
    out, err = capsys.readouterr()
    return status, out, err


def test_code(capsys):
    status, out, _ = run(capsys, "code", "--secret", SECRET, "--time", "1426847216")
    assert status == 0
    assert "543160" in out
    assert "valid ~ 4s" in out


def test_code_rfc_vector(capsys):
    status, out, _ = run(capsys, "code", "--secret", RFC_SECRET_SHA1, "--digits", "8", "--time", "59")
    assert status == 0
    assert "94287082" in out


def test_verify_valid_and_invalid(capsys):
    status, out, _ = run(capsys, "verify", "--secret", SECRET, "--code", "543160", "--time", "1426847216")
    assert status == 0
    assert "VALID" in out

    status, out, _ = run(capsys, "verify", "--secret", SECRET, "--code", "543160",
                         "--discrepancy", "0", "--time", "1426847220")
    assert status == 1
    assert "INVALID" in out


def test_hotp(capsys):
    status, out, _ = run(capsys, "hotp", "--secret", RFC_SECRET_SHA1, "--counter", "1")
    assert status == 0
    assert "287082" in out


def test_secret(capsys):
    status, out, _ = run(capsys, "secret", "--bits", "160")
    assert status == 0
    assert len(out.strip()) == 32


def test_secret_insecure(capsys):
    status, out, _ = run(capsys, "secret", "--insecure")
    assert status == 0
    assert len(out.strip()) == 16


def test_uri(capsys):
    status, out, _ = run(capsys, "uri", "--secret", SECRET, "--label", "Test&Label", "--issuer", "Test&Issuer")
    assert status == 0
    assert out.strip() == (
        "otpauth://totp/Test%26Label?secret=VMR466AB62ZBOKHE"
        "&issuer=Test%26Issuer&period=30&algorithm=SHA1&digits=6"
    )


def test_qr_data_uri(capsys):
    status, out, _ = run(capsys, "qr", "--secret", SECRET, "--label", "alice")
    assert status == 0
    assert out.startswith("data:image/png;base64,")


def test_qr_file(capsys, tmp_path):
    target = tmp_path / "qr.png"
    status, out, _ = run(capsys, "qr", "--secret", SECRET, "--label", "alice", "--output", str(target))
    assert status == 0
    assert target.read_bytes().startswith(b"\x89PNG")


def test_invalid_secret(capsys):
    status, _, err = run(capsys, "code", "--secret", "mzxw6===")
    assert status == 1
    assert "Invalid base32 string" in err


def test_invalid_configuration(capsys):
    status, _, err = run(capsys, "code", "--secret", SECRET, "--digits", "0")
    assert status == 1
    assert "Digits" in err


def test_check_time(capsys, monkeypatch):
    now = email.utils.formatdate(time.time(), usegmt=True)
    monkeypatch.setattr(time_module.requests, "head", lambda url, **kw: FakeResponse(headers={"Date": now}))
    status, out, _ = run(capsys, "check-time", "--url", "https://example.com")
    assert status == 0
    assert "within 5s" in out


def test_no_subcommand(capsys):
    status, out, _ = run(capsys)
    assert status == 2
    assert "usage" in out
