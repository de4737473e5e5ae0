"""Application settings and validation."""

import os
from pathlib import Path
from typing import List, Optional

from . import __version__

BASE = Path(__file__).resolve().parent.parent
DEFAULT_JWT_SECRET = "change_me_for_prod"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() == "true"


def _env_str(name: str) -> Optional[str]:
    """Return a stripped env value, treating blank and the literal `null` as unset."""
    raw = os.getenv(name, "").strip()
    if not raw or raw == "null":
        return None
    return raw


def _env_list(name: str, default: str = "") -> List[str]:
    raw = os.getenv(name, default)
    if raw.strip() == "null":
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    ENV: str
    LOG_LEVEL: str
    APP_NAME: str
    APP_VERSION: str
    APP_DESCRIPTION: str
    DATABASE_URL: str

    ADMIN_USERNAME: Optional[str]
    ADMIN_PASSWORD: Optional[str]
    JWT_SECRET: str
    JWT_ALGORITHM: str
    JWT_EXPIRE_HOURS: int
    ALLOW_INSECURE_JWT: bool
    API_SERVER_KEY: Optional[str]

    CORS_ALLOWED_ORIGINS: List[str]
    CORS_ALLOWED_METHODS: List[str]
    CORS_ALLOW_CREDENTIALS: bool
    CORS_MAX_AGE: int

    RATE_LIMIT_CONTACT_MAX_REQUESTS: int
    RATE_LIMIT_CONTACT_WINDOW_MINUTES: int
    RATE_LIMIT_BLOG_MAX_REQUESTS: int
    RATE_LIMIT_BLOG_WINDOW_MINUTES: int
    RATE_LIMIT_TRUST_PROXY_HEADERS: bool
    RATE_LIMIT_CLEANUP_SECONDS: int

    SECURITY_BLOCKED_PATHS: List[str]
    FORWARDED_HEADERS_ENABLED: bool
    FORWARDED_ALLOW_IPS: str

    CONTACT_EMAIL_FROM: Optional[str]
    CONTACT_EMAIL_TO: Optional[str]
    CONTACT_EMAIL_DOMAIN: str
    EMAIL_PROVIDER: str
    EMAIL_HTTP_PROVIDER: str
    EMAIL_HTTP_API_URL: Optional[str]
    EMAIL_HTTP_API_KEY: Optional[str]
    EMAIL_HTTP_TIMEOUT_SECONDS: float
    SMTP_HOST: Optional[str]
    SMTP_PORT: int
    SMTP_USERNAME: Optional[str]
    SMTP_PASSWORD: Optional[str]
    SMTP_STARTTLS: bool
    SMTP_TIMEOUT_SECONDS: float

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.APP_NAME = os.getenv("APP_NAME", "personal-website")
        self.APP_VERSION = os.getenv("APP_VERSION", __version__)
        self.APP_DESCRIPTION = os.getenv("APP_DESCRIPTION", "Backend code for Personal Website")
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'portfolio.db'}")

        self.ADMIN_USERNAME = _env_str("ADMIN_USERNAME")
        self.ADMIN_PASSWORD = _env_str("ADMIN_PASSWORD")
        self.JWT_SECRET = os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET)
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.JWT_EXPIRE_HOURS = int(os.getenv("JWT_EXPIRE_HOURS", "12"))
        self.ALLOW_INSECURE_JWT = _env_bool("ALLOW_INSECURE_JWT", "false")
        self.API_SERVER_KEY = _env_str("API_SERVER_KEY")

        self.CORS_ALLOWED_ORIGINS = _env_list("CORS_ALLOWED_ORIGINS")
        self.CORS_ALLOWED_METHODS = _env_list("CORS_ALLOWED_METHODS", "GET,POST,PUT,DELETE,OPTIONS")
        self.CORS_ALLOW_CREDENTIALS = _env_bool("CORS_ALLOW_CREDENTIALS", "true")
        self.CORS_MAX_AGE = int(os.getenv("CORS_MAX_AGE", "3600"))

        self.RATE_LIMIT_CONTACT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_CONTACT_MAX_REQUESTS", "5"))
        self.RATE_LIMIT_CONTACT_WINDOW_MINUTES = int(os.getenv("RATE_LIMIT_CONTACT_WINDOW_MINUTES", "15"))
        self.RATE_LIMIT_BLOG_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_BLOG_MAX_REQUESTS", "100"))
        self.RATE_LIMIT_BLOG_WINDOW_MINUTES = int(os.getenv("RATE_LIMIT_BLOG_WINDOW_MINUTES", "1"))
        self.RATE_LIMIT_TRUST_PROXY_HEADERS = _env_bool("RATE_LIMIT_TRUST_PROXY_HEADERS", "false")
        self.RATE_LIMIT_CLEANUP_SECONDS = int(os.getenv("RATE_LIMIT_CLEANUP_SECONDS", "120"))

        self.SECURITY_BLOCKED_PATHS = _env_list("SECURITY_BLOCKED_PATHS")
        self.FORWARDED_HEADERS_ENABLED = _env_bool("FORWARDED_HEADERS_ENABLED", "false")
        self.FORWARDED_ALLOW_IPS = os.getenv("FORWARDED_ALLOW_IPS", "127.0.0.1")

        self.CONTACT_EMAIL_FROM = _env_str("CONTACT_EMAIL_FROM")
        self.CONTACT_EMAIL_TO = _env_str("CONTACT_EMAIL_TO")
        self.CONTACT_EMAIL_DOMAIN = os.getenv("CONTACT_EMAIL_DOMAIN", "localhost")
        self.EMAIL_PROVIDER = os.getenv("EMAIL_PROVIDER", "http").strip().lower()
        self.EMAIL_HTTP_PROVIDER = os.getenv("EMAIL_HTTP_PROVIDER", "brevo")
        self.EMAIL_HTTP_API_URL = _env_str("EMAIL_HTTP_API_URL")
        self.EMAIL_HTTP_API_KEY = _env_str("EMAIL_HTTP_API_KEY")
        self.EMAIL_HTTP_TIMEOUT_SECONDS = float(os.getenv("EMAIL_HTTP_TIMEOUT_SECONDS", "10"))
        self.SMTP_HOST = _env_str("SMTP_HOST")
        self.SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
        self.SMTP_USERNAME = _env_str("SMTP_USERNAME")
        self.SMTP_PASSWORD = _env_str("SMTP_PASSWORD")
        self.SMTP_STARTTLS = _env_bool("SMTP_STARTTLS", "true")
        self.SMTP_TIMEOUT_SECONDS = float(os.getenv("SMTP_TIMEOUT_SECONDS", "10"))
        self._validate()

    def _validate(self):
        if self.ADMIN_USERNAME and not self.ADMIN_PASSWORD:
            raise RuntimeError(
                "Admin password is required when admin username is configured. "
                "Please set the ADMIN_PASSWORD environment variable."
            )
        if self.ADMIN_PASSWORD and not self.ADMIN_USERNAME:
            raise RuntimeError(
                "Admin username is required when admin password is configured. "
                "Please set the ADMIN_USERNAME environment variable."
            )
        if self.ENV != "dev" and not self.ALLOW_INSECURE_JWT and self.JWT_SECRET == DEFAULT_JWT_SECRET:
            raise RuntimeError("JWT_SECRET must be set to a non-default value in non-dev environments")

    @property
    def admin_enabled(self) -> bool:
        return bool(self.ADMIN_USERNAME and self.ADMIN_PASSWORD)


settings = Settings()
