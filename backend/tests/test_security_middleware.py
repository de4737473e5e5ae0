from types import SimpleNamespace

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from portfolio import main
from portfolio.main import app
from portfolio.security import SensitiveFileProbeMiddleware

client = TestClient(app)
ORIGIN = {"Origin": "https://example.com"}
ADMIN = ("admin", "secret")


def test_sensitive_probe_returns_json_404():
    for path in ("/.env", "/.git/config", "/WP-CONFIG.php", "/.env.production"):
        r = client.get(path)
        assert r.status_code == 404
        assert r.json() == {"error": "Not Found", "status": 404, "message": "The requested resource was not found"}


def test_custom_blocked_paths_replace_defaults():
    probe = SensitiveFileProbeMiddleware([" /Secret ", ""])
    assert probe.patterns == ["/secret"]
    assert probe.is_sensitive("/secret/file")
    assert not probe.is_sensitive("/.env")
    assert SensitiveFileProbeMiddleware(None).is_sensitive("/.aws/credentials")


def test_requests_without_origin_are_forbidden():
    r = client.get("/skills")
    assert r.status_code == 403
    assert r.json() == {"error": "Request origin not authorized", "status": 403}


def test_unknown_origin_is_forbidden():
    r = client.get("/skills", headers={"Origin": "https://evil.example"})
    assert r.status_code == 403


def test_allowed_origin_referer_and_api_key_pass():
    assert client.get("/skills", headers=ORIGIN).status_code == 200
    assert client.get("/skills", headers={"Referer": "https://example.com/about"}).status_code == 200
    assert client.get("/skills", headers={"X-API-Key": "test-key"}).status_code == 200
    assert client.get("/skills", headers={"X-API-Key": "wrong"}).status_code == 403


def test_admin_credentials_pass_origin_check():
    assert client.get("/blogs", auth=ADMIN).status_code == 200
    assert client.get("/blogs", auth=("admin", "wrong")).status_code == 403


def test_excluded_and_public_blog_paths_skip_origin_check():
    assert client.get("/actuator/health").status_code == 200
    assert client.get("/actuator/info").status_code == 200
    assert client.get("/blogs/published").status_code == 200
    assert client.post("/blogs/unknown/view").status_code == 404


def test_options_requests_skip_origin_check():
    r = client.options("/skills")
    assert r.status_code != 403


def test_cors_preflight_for_allowed_origin():
    r = client.options(
        "/contact",
        headers={
            "Origin": "https://example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "https://example.com"


def test_security_and_request_id_headers():
    r = client.get("/skills", headers={**ORIGIN, "X-Request-ID": "abc123"})
    assert r.headers["X-Request-ID"] == "abc123"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["Strict-Transport-Security"] == "max-age=31536000; includeSubDomains"
    assert r.headers["X-XSS-Protection"] == "0"
    generated = client.get("/skills", headers=ORIGIN).headers["X-Request-ID"]
    assert len(generated) == 32


def test_only_published_blog_paths_are_public():
    assert client.get("/blogs/published/missing-post").status_code == 404
    assert client.get("/blogs/published-notes").status_code == 403


def test_lifespan_runs_rate_limit_janitor():
    with TestClient(app):
        assert main._janitor._thread is not None
        assert main._janitor._thread.is_alive()
    assert main._janitor._thread is None


def _client_host_app():
    target = FastAPI()

    @target.get("/whoami")
    def whoami(request: Request):
        return {"client": request.client.host}

    return target


def test_forwarded_headers_set_client_address():
    target = _client_host_app()
    cfg = SimpleNamespace(CORS_ALLOWED_ORIGINS=[], FORWARDED_HEADERS_ENABLED=True, FORWARDED_ALLOW_IPS="*")
    main.install_edge_middleware(target, cfg)
    r = TestClient(target).get("/whoami", headers={"X-Forwarded-For": "203.0.113.7"})
    assert r.json() == {"client": "203.0.113.7"}


def test_forwarded_headers_ignored_when_disabled():
    target = _client_host_app()
    cfg = SimpleNamespace(CORS_ALLOWED_ORIGINS=[], FORWARDED_HEADERS_ENABLED=False, FORWARDED_ALLOW_IPS="*")
    main.install_edge_middleware(target, cfg)
    r = TestClient(target).get("/whoami", headers={"X-Forwarded-For": "203.0.113.7"})
    assert r.json() == {"client": "testclient"}
