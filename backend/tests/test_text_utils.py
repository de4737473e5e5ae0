from types import SimpleNamespace

from portfolio.utils.email_templates import build_contact_email_body, nl2br
from portfolio.utils.text import (
    constant_time_equals,
    is_blank,
    is_configured,
    origin_from_referer,
    sanitize_for_email_body,
    sanitize_for_email_header,
)


def test_blank_and_configured_checks():
    assert is_blank(None)
    assert is_blank("   ")
    assert not is_blank("x")
    assert not is_configured("null")
    assert not is_configured(" ")
    assert is_configured("smtp.example.com")


def test_header_sanitizer_blocks_injection():
    value = "Hello\r\nBcc: victim@example.com\tthere\x07"
    assert sanitize_for_email_header(value) == "HelloBcc: victim@example.com there"
    assert sanitize_for_email_header(None) == ""


def test_body_sanitizer_keeps_newlines():
    assert sanitize_for_email_body("a\r\nb\rc\x00\td") == "a\nb\nc    d"


def test_constant_time_equals():
    assert constant_time_equals("key", "key")
    assert not constant_time_equals("key", "other")
    assert not constant_time_equals(None, "key")


def test_origin_from_referer():
    assert origin_from_referer("https://example.com/blog/post?x=1") == "https://example.com"
    assert origin_from_referer("http://localhost:3000/contact") == "http://localhost:3000"
    assert origin_from_referer("not a url") is None
    assert origin_from_referer("https://example.com:notaport/") is None
    assert origin_from_referer(None) is None


def test_contact_email_body_escapes_and_formats():
    contact = SimpleNamespace(name="<b>Eve</b>", email="eve@example.com", subject="", message="line1\nline2")
    body = build_contact_email_body(contact, "example.com")
    assert "&lt;b&gt;Eve&lt;/b&gt;" in body
    assert "<b>Eve</b>" not in body
    assert "line1<br>line2" in body
    assert "Subject" not in body
    assert 'href="https://example.com"' in body


def test_contact_email_body_includes_subject_when_present():
    contact = SimpleNamespace(name="Eve", email="eve@example.com", subject="Hi there", message="hello")
    body = build_contact_email_body(contact, "example.com")
    assert "Subject" in body
    assert "Hi there" in body


def test_contact_email_message_is_escaped_before_line_breaks():
    contact = SimpleNamespace(
        name="Eve", email="eve@example.com", subject="<script>", message="<i>hi</i>\r\nbye\x07"
    )
    body = build_contact_email_body(contact, 'example.com"')
    assert "&lt;i&gt;hi&lt;/i&gt;<br>bye</div>" in body
    assert "&lt;script&gt;" in body
    assert "<script>" not in body
    assert 'href="https://example.com&#34;"' in body


def test_nl2br_escapes_markup():
    assert str(nl2br("a & b\nc")) == "a &amp; b<br>c"
