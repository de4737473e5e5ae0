from pathlib import Path
import os
import tempfile

import pytest

# Settings are read at import time, so the environment must be ready before `portfolio` loads.
_DB_DIR = Path(tempfile.mkdtemp(prefix="portfolio-tests-"))
os.environ["ENV"] = "dev"
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "secret"
os.environ["API_SERVER_KEY"] = "test-key"
os.environ["JWT_SECRET"] = "test-jwt-secret-that-is-long-enough-for-hs256"
os.environ["CORS_ALLOWED_ORIGINS"] = "https://example.com"
os.environ["RATE_LIMIT_BLOG_MAX_REQUESTS"] = "1000"
os.environ["EMAIL_PROVIDER"] = "http"
os.environ["CONTACT_EMAIL_DOMAIN"] = "example.com"
for _name in (
    "APP_NAME", "APP_VERSION", "CONTACT_EMAIL_FROM", "CONTACT_EMAIL_TO", "EMAIL_HTTP_API_KEY", "EMAIL_HTTP_API_URL",
    "SECURITY_BLOCKED_PATHS", "FORWARDED_HEADERS_ENABLED", "RATE_LIMIT_TRUST_PROXY_HEADERS",
):
    os.environ.pop(_name, None)

from sqlmodel import Session, SQLModel  # noqa: E402

from portfolio import database, main  # noqa: E402
from portfolio.utils.rate_limit import InMemoryRateLimiter  # noqa: E402


@pytest.fixture(autouse=True)
def reset_db():
    """Give every test empty tables and a fresh rate limiter."""
    SQLModel.metadata.drop_all(database.engine)
    SQLModel.metadata.create_all(database.engine)
    main.rate_limiter.limiter = InMemoryRateLimiter()
    yield

@pytest.fixture
def session():
    with Session(database.engine) as s:
        yield s
