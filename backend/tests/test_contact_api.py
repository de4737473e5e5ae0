from fastapi.testclient import TestClient

from portfolio import main
from portfolio.exceptions import EmailServiceError
from portfolio.main import app

client = TestClient(app)
ORIGIN = {"Origin": "https://example.com"}
CONTACT = {"name": "Eve", "email": "eve@example.com", "subject": "Hi", "message": "Hello there"}


class RecordingEmailService:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    def send_contact_email(self, to_email, from_email, subject, body):
        if self.error:
            raise self.error
        self.sent.append((to_email, from_email, subject))


def _configure(monkeypatch, email_service):
    monkeypatch.setattr(main, "email_service", email_service)
    monkeypatch.setattr(main.settings, "CONTACT_EMAIL_FROM", "site@example.com")
    monkeypatch.setattr(main.settings, "CONTACT_EMAIL_TO", "me@example.com")


def test_contact_sends_email(monkeypatch):
    mail = RecordingEmailService()
    _configure(monkeypatch, mail)
    r = client.post("/contact", json=CONTACT, headers=ORIGIN)
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Message sent successfully! I'll get back to you soon."
    assert body["data"] == {"message": body["message"]}
    assert mail.sent == [("me@example.com", "site@example.com", "[Contact Form] Hi - Eve")]


def test_contact_without_mail_configuration_thanks_user():
    r = client.post("/contact", json=CONTACT, headers=ORIGIN)
    assert r.status_code == 200
    assert r.json()["message"] == "Thank you for contacting me. I will get back to you soon."


def test_contact_delivery_failure_is_500(monkeypatch):
    _configure(monkeypatch, RecordingEmailService(error=EmailServiceError("down")))
    r = client.post("/contact", json=CONTACT, headers=ORIGIN)
    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "Email Sending Failed"
    assert body["message"] == "Failed to send message. Please try again later."


def test_contact_validation():
    r = client.post("/contact", json={"name": "", "email": "bad", "message": "x" * 5001}, headers=ORIGIN)
    assert r.status_code == 400
    message = r.json()["message"]
    assert "name - " in message
    assert "email - " in message
    assert "message - " in message


def test_contact_requires_known_origin():
    assert client.post("/contact", json=CONTACT).status_code == 403


def test_contact_rate_limit_per_ip():
    for _ in range(5):
        assert client.post("/contact", json=CONTACT, headers=ORIGIN).status_code == 200
    r = client.post("/contact", json=CONTACT, headers=ORIGIN)
    assert r.status_code == 429
    assert r.json()["retryAfter"] == 900
    assert r.json()["message"] == "Too many requests. Please try again after 15 minutes."
    # reading blogs uses a separate budget
    assert client.get("/blogs/published").status_code == 200


def test_rate_limit_trusts_forwarded_for_only_when_enabled(monkeypatch):
    monkeypatch.setattr(main.rate_limiter, "contact_max_requests", 1)
    first = {**ORIGIN, "X-Forwarded-For": "1.1.1.1"}
    second = {**ORIGIN, "X-Forwarded-For": "2.2.2.2"}
    assert client.post("/contact", json=CONTACT, headers=first).status_code == 200
    assert client.post("/contact", json=CONTACT, headers=second).status_code == 429

    monkeypatch.setattr(main.rate_limiter, "trust_proxy_headers", True)
    assert client.post("/contact", json=CONTACT, headers=first).status_code == 200
    assert client.post("/contact", json=CONTACT, headers=second).status_code == 200
    assert client.post("/contact", json=CONTACT, headers=second).status_code == 429
