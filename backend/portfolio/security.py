"""HTTP request filters protecting the API.

Each filter is a small callable class registered with
`app.middleware("http")`, in the same shape as a function middleware
(`async def __call__(request, call_next)`). Filters short-circuit with a
JSON response when a request is rejected.
"""

import logging
import re
from typing import Iterable, List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from .auth import AdminAuthenticator
from .utils.rate_limit import InMemoryRateLimiter
from .utils.text import constant_time_equals, is_configured, is_not_blank, origin_from_referer

logger = logging.getLogger("portfolio.security")

API_KEY_HEADER = "X-API-Key"
CONTACT_PATHS = ("/contact", "/contact/")
PUBLISHED_BLOGS_PREFIX = "/blogs/published"
BLOG_VIEW_PATH = re.compile(r"^/blogs/[^/]+/view/?$")
EXCLUDED_ORIGIN_VERIFICATION_PATHS = ("/actuator/health", "/actuator/info", "/docs", "/openapi.json", "/redoc")

DEFAULT_SENSITIVE_PATTERNS = [
    "/.env",
    "/.git/",
    "/.git/config",
    "/.gitignore",
    "/wp-config.php",
    "/wp-config.inc.php",
    "/wp-config.bak",
    "/wp-config.txt",
    "/settings.py",
    "/config.php",
    "/config.inc.php",
    "/config.bak",
    "/.htaccess",
    "/.htpasswd",
    "/.ssh/",
    "/.aws/",
    "/.docker/",
    "/docker-compose.yml",
    "/docker-compose.yaml",
    "/.env.local",
    "/.env.production",
    "/.env.development",
    "/.env.test",
    "/.env.backup",
    "/composer.json",
    "/package.json",
    "/yarn.lock",
    "/package-lock.json",
    "/.idea/",
    "/.vscode/",
    "/.ds_store",
    "/web.config",
    "/application.properties",
    "/application.yml",
    "/application.yaml",
    "/application-dev.properties",
    "/application-prod.properties",
    "/application-local.properties",
]

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-XSS-Protection": "0",
}


def is_public_blog_request(request: Request) -> bool:
    path = request.url.path
    if path == PUBLISHED_BLOGS_PREFIX or path.startswith(PUBLISHED_BLOGS_PREFIX + "/"):
        return True
    return request.method == "POST" and bool(BLOG_VIEW_PATH.match(path))


def is_contact_request(request: Request) -> bool:
    return request.method == "POST" and request.url.path in CONTACT_PATHS


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class SensitiveFileProbeMiddleware:
    """Answer probes for secrets and config files with a bland 404."""

    def __init__(self, blocked_paths: Optional[Iterable[str]] = None):
        custom = [p.strip().lower() for p in (blocked_paths or []) if p and p.strip()]
        self.patterns: List[str] = custom or [p.lower() for p in DEFAULT_SENSITIVE_PATTERNS]
        logger.info(
            "Sensitive file probe filter initialized with %s %s blocked paths",
            len(self.patterns),
            "custom" if custom else "default",
        )

    def is_sensitive(self, path: str) -> bool:
        normalized = path.lower()
        return any(normalized.startswith(p) for p in self.patterns)

    async def __call__(self, request: Request, call_next):
        if self.is_sensitive(request.url.path):
            logger.warning(
                "Sensitive file probe blocked - Path: %s, IP: %s, User-Agent: %s",
                request.url.path,
                _client_host(request),
                request.headers.get("User-Agent"),
            )
            return JSONResponse(
                status_code=404,
                content={"error": "Not Found", "status": 404, "message": "The requested resource was not found"},
            )
        return await call_next(request)


class OriginVerificationMiddleware:
    """Only let requests through that come from a known frontend or a trusted caller.

    Health, docs and public blog endpoints are open. Everything else
    needs admin credentials, the server API key, or an allowed
    `Origin`/`Referer`.
    """

    def __init__(self, allowed_origins: Iterable[str], api_key: Optional[str], authenticator: AdminAuthenticator):
        self.allowed_origins = {o.strip() for o in allowed_origins if o and o.strip()}
        self.api_key = api_key
        self.authenticator = authenticator
        if self.allowed_origins:
            logger.info("Origin verification initialized with %s allowed origins", len(self.allowed_origins))
        else:
            logger.warning("No allowed origins configured. All non-API key requests will be blocked.")

    def is_exempt(self, request: Request) -> bool:
        if request.method == "OPTIONS":
            return True
        if request.url.path.startswith(EXCLUDED_ORIGIN_VERIFICATION_PATHS):
            return True
        return is_public_blog_request(request)

    def is_allowed_origin(self, origin: Optional[str]) -> bool:
        return is_not_blank(origin) and origin in self.allowed_origins

    def has_valid_api_key(self, request: Request) -> bool:
        provided = request.headers.get(API_KEY_HEADER)
        return is_not_blank(provided) and is_configured(self.api_key) and constant_time_equals(self.api_key, provided)

    def is_authorized(self, request: Request) -> bool:
        if self.authenticator.authenticate_authorization(request.headers.get("Authorization")):
            return True
        if self.has_valid_api_key(request):
            return True
        if self.is_allowed_origin(request.headers.get("Origin")):
            return True
        return self.is_allowed_origin(origin_from_referer(request.headers.get("Referer")))

    async def __call__(self, request: Request, call_next):
        if self.is_exempt(request) or self.is_authorized(request):
            return await call_next(request)
        logger.warning(
            "Unauthorized request blocked - Path: %s, Origin: %s, Referer: %s, RemoteAddr: %s, User-Agent: %s",
            request.url.path,
            request.headers.get("Origin"),
            request.headers.get("Referer"),
            _client_host(request),
            request.headers.get("User-Agent"),
        )
        return JSONResponse(status_code=403, content={"error": "Request origin not authorized", "status": 403})


class RateLimitMiddleware:
    """Per-IP limits for the contact form and the public blog endpoints."""

    def __init__(
        self,
        contact_max_requests: int,
        contact_window_minutes: int,
        blog_max_requests: int,
        blog_window_minutes: int,
        trust_proxy_headers: bool = False,
        limiter: Optional[InMemoryRateLimiter] = None,
    ):
        self.contact_max_requests = contact_max_requests
        self.contact_window_minutes = contact_window_minutes
        self.blog_max_requests = blog_max_requests
        self.blog_window_minutes = blog_window_minutes
        self.trust_proxy_headers = trust_proxy_headers
        self.limiter = limiter or InMemoryRateLimiter()
        if trust_proxy_headers:
            logger.warning(
                "Rate limiting trusts X-Forwarded-For and X-Real-IP headers. Only enable this behind "
                "a reverse proxy that strips client-supplied values, or the limit can be bypassed."
            )

    def client_ip(self, request: Request) -> str:
        if self.trust_proxy_headers:
            forwarded = request.headers.get("X-Forwarded-For", "")
            if forwarded.strip():
                return forwarded.split(",")[0].strip()
            real_ip = request.headers.get("X-Real-IP", "")
            if real_ip.strip():
                return real_ip.strip()
        return _client_host(request)

    def cleanup_expired(self) -> int:
        """Drop clients idle for longer than the largest window plus a minute."""
        window_minutes = max(self.contact_window_minutes, self.blog_window_minutes) + 1
        return self.limiter.cleanup(window_minutes * 60)

    async def __call__(self, request: Request, call_next):
        if is_contact_request(request):
            kind, max_requests, window_minutes = "CONTACT", self.contact_max_requests, self.contact_window_minutes
        elif is_public_blog_request(request):
            kind, max_requests, window_minutes = "BLOG", self.blog_max_requests, self.blog_window_minutes
        else:
            return await call_next(request)
        ip = self.client_ip(request)
        allowed, _ = self.limiter.allow(f"{ip}:{kind}", max_requests, window_minutes * 60)
        if not allowed:
            logger.warning("Rate limit exceeded for %s endpoint - IP: %s - Path: %s", kind.lower(), ip, request.url.path)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Rate limit exceeded",
                    "message": f"Too many requests. Please try again after {window_minutes} minutes.",
                    "retryAfter": window_minutes * 60,
                },
                headers={"Retry-After": str(window_minutes * 60)},
            )
        return await call_next(request)


def add_security_headers(response):
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


async def security_headers_middleware(request: Request, call_next):
    return add_security_headers(await call_next(request))
