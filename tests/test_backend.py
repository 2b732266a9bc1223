import base64

import pytest

from twofactorauth import InvalidConfigurationError
from twofactorauth_backend import app as app_module
from twofactorauth_backend import create_app
from tests.conftest import SECRET, EchoQRProvider, FixedTimeProvider, SequentialRNGProvider


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(app_module, "setup_logging", lambda level: None)


@pytest.fixture
def app():
    app = create_app(
        {"TESTING": True, "TWOFACTORAUTH_ISSUER": "Test&Issuer"},
        qrcode_provider=EchoQRProvider(),
        rng_provider=SequentialRNGProvider(secure=True),
        time_provider=FixedTimeProvider(1426847216),
    )
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("TWOFACTORAUTH_DIGITS", "8")
    monkeypatch.setenv("TWOFACTORAUTH_ALGORITHM", "sha256")
    app = create_app({"TESTING": True})
    tfa = app.extensions["twofactorauth"]
    assert (tfa.digits, tfa.period, tfa.algorithm) == (8, 30, "sha256")


def test_invalid_config_fails_fast():
    with pytest.raises(InvalidConfigurationError):
        create_app({"TWOFACTORAUTH_PERIOD": 0})


def test_create_secret(client):
    resp = client.post("/api/secret", json={})
    assert resp.status_code == 200
    assert resp.get_json() == {"secret": "ABCDEFGHIJKLMNOP"}

    resp = client.post("/api/secret", json={"bits": 5})
    assert resp.get_json() == {"secret": "A"}


def test_create_secret_invalid_bits(client):
    resp = client.post("/api/secret", json={"bits": "lots"})
    assert resp.status_code == 400
    assert "bits" in resp.get_json()["error"]


def test_create_secret_bits_capped(client):
    resp = client.post("/api/secret", json={"bits": 10 ** 9})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "bits must be <= 1024"}

    resp = client.post("/api/secret", json={"bits": 1024})
    assert resp.status_code == 200


def test_totp_uses_time_provider(client):
    resp = client.post("/api/totp", json={"secret": SECRET})
    assert resp.status_code == 200
    assert resp.get_json() == {"code": "543160", "remaining": 4}


def test_totp_explicit_time(client):
    resp = client.post("/api/totp", json={"secret": SECRET, "time": 0})
    assert resp.get_json()["code"] == "538532"


def test_totp_requires_secret(client):
    resp = client.post("/api/totp", json={})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "secret is required"}


def test_totp_invalid_secret(client):
    resp = client.post("/api/totp", json={"secret": "FOO1BAR8BAZ9"})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Invalid base32 string"}


def test_verify_totp(client):
    resp = client.post("/api/verify_totp", json={"secret": SECRET, "code": "543160"})
    assert resp.get_json() == {"valid": True}

    resp = client.post("/api/verify_totp", json={"secret": SECRET, "code": "000000"})
    assert resp.get_json() == {"valid": False}

    resp = client.post("/api/verify_totp",
                       json={"secret": SECRET, "code": "543160", "discrepancy": 0, "time": 1426847220})
    assert resp.get_json() == {"valid": False}


def test_verify_totp_discrepancy_bounds(client):
    resp = client.post("/api/verify_totp", json={"secret": SECRET, "code": "543160", "discrepancy": 100000})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "discrepancy must be <= 10"}

    resp = client.post("/api/verify_totp", json={"secret": SECRET, "code": "543160", "discrepancy": -1})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "discrepancy must be >= 0"}

    resp = client.post("/api/verify_totp", json={"secret": SECRET, "code": "543160", "discrepancy": 10})
    assert resp.get_json() == {"valid": True}


def test_verify_totp_requires_code(client):
    resp = client.post("/api/verify_totp", json={"secret": SECRET})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "code is required"}


def test_otpauth_uri(client):
    resp = client.post("/api/otpauth_uri", json={"secret": SECRET, "label": "Test&Label"})
    assert resp.get_json() == {
        "uri": "otpauth://totp/Test%26Label?secret=VMR466AB62ZBOKHE"
               "&issuer=Test%26Issuer&period=30&algorithm=SHA1&digits=6"
    }


def test_qr_code(client):
    resp = client.post("/api/qr_code", json={"secret": SECRET, "label": "Test&Label", "size": 120})
    assert resp.status_code == 200
    data_uri = resp.get_json()["qr_code"]
    prefix = "data:test/test;base64,"
    assert data_uri.startswith(prefix)
    assert base64.b64decode(data_uri[len(prefix):]).endswith(b"digits=6@120")


def test_qr_code_invalid_size(client):
    resp = client.post("/api/qr_code", json={"secret": SECRET, "label": "a", "size": 0})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Size must be int > 0"}


def test_qr_code_size_capped(client):
    resp = client.post("/api/qr_code", json={"secret": SECRET, "label": "a", "size": 100000})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "size must be <= 1000"}


def test_cors_headers(client):
    resp = client.post("/api/secret", json={}, headers={"Origin": "http://localhost:3000"})
    assert resp.headers.get("Access-Control-Allow-Origin") in ("*", "http://localhost:3000")
