"""HTML email templates."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

from .text import is_not_blank, sanitize_for_email_body

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"


def nl2br(value) -> Markup:
    """Escape `value` and turn its line breaks into `<br>` tags."""
    return Markup("<br>").join(escape(value).split("\n"))


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(enabled_extensions=("html", "html.j2")),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["nl2br"] = nl2br
    return env


_env = _environment()


def build_contact_email_body(contact, website_domain: str) -> str:
    """Render the notification email for a contact form submission.

    `contact` is any object with `name`, `email`, `subject` and `message`
    attributes. Control characters are stripped before rendering; the
    template escapes the values.
    """
    subject = sanitize_for_email_body(contact.subject)
    template = _env.get_template("contact_email.html.j2")
    return template.render(
        name=sanitize_for_email_body(contact.name),
        email=sanitize_for_email_body(contact.email),
        subject=subject if is_not_blank(subject) else None,
        message=sanitize_for_email_body(contact.message),
        domain=sanitize_for_email_body(website_domain),
    )
