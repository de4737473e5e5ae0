import base64
from datetime import datetime, timedelta, timezone

import jwt
from fastapi.testclient import TestClient

from portfolio.auth import AdminAuthenticator, authenticator, build_authenticator
from portfolio.config import Settings, settings
from portfolio.main import app

client = TestClient(app)
ORIGIN = {"Origin": "https://example.com"}


def _basic(username, password):
    return "Basic " + base64.b64encode(f"{username}:{password}".encode()).decode()


def test_login_returns_bearer_token():
    r = client.post("/auth/login", json={"username": "admin", "password": "secret"}, headers=ORIGIN)
    assert r.status_code == 200
    body = r.json()
    assert body["token_type"] == "bearer"
    assert body["expires_in"] == settings.JWT_EXPIRE_HOURS * 3600
    token = body["access_token"]
    r = client.get("/blogs", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200


def test_login_rejects_bad_credentials():
    r = client.post("/auth/login", json={"username": "admin", "password": "nope"}, headers=ORIGIN)
    assert r.status_code == 401
    assert r.json()["message"] == "invalid credentials"


def test_invalid_and_expired_tokens_are_rejected():
    r = client.get("/blogs", headers={**ORIGIN, "Authorization": "Bearer not-a-token"})
    assert r.status_code == 401
    expired = jwt.encode(
        {"sub": "admin", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    r = client.get("/blogs", headers={**ORIGIN, "Authorization": f"Bearer {expired}"})
    assert r.status_code == 401
    assert r.json()["message"] == "token expired"


def test_authenticate_authorization_header():
    assert authenticator.authenticate_authorization(_basic("admin", "secret")) == "admin"
    assert authenticator.authenticate_authorization(_basic("admin", "wrong")) is None
    assert authenticator.authenticate_authorization(_basic("root", "secret")) is None
    assert authenticator.authenticate_authorization("Basic !!!") is None
    assert authenticator.authenticate_authorization("Digest abc") is None
    assert authenticator.authenticate_authorization(None) is None
    token = authenticator.issue_token("admin")
    assert authenticator.authenticate_authorization(f"Bearer {token}") == "admin"


def test_token_for_other_subject_is_rejected():
    other = AdminAuthenticator("someone", "pw")
    token = other.issue_token("someone")
    assert authenticator.authenticate_authorization(f"Bearer {token}") is None


def test_disabled_authenticator_rejects_everything():
    disabled = AdminAuthenticator(None, None)
    assert not disabled.enabled
    assert not disabled.verify("admin", "secret")
    assert disabled.authenticate_authorization(_basic("admin", "secret")) is None


def test_build_authenticator_warns_without_admin_credentials(monkeypatch, caplog):
    monkeypatch.delenv("ADMIN_USERNAME")
    monkeypatch.delenv("ADMIN_PASSWORD")
    built = build_authenticator(Settings())
    assert not built.enabled
    assert "Admin credentials are not configured" in caplog.text


def test_build_authenticator_uses_configured_admin(caplog):
    built = build_authenticator(Settings())
    assert built.enabled
    assert built.verify("admin", "secret")
    assert "Admin credentials are not configured" not in caplog.text
