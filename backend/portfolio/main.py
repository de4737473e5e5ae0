"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the personal website
backend. Controllers are intentionally thin: they accept requests,
delegate to services, and return JSON responses. Public content
endpoints wrap their payload in the `ApiResponse` envelope; admin blog
endpoints return the blog objects directly.

Endpoints implemented:
- GET/PUT /portfolio
- GET /skills, /projects, /experiences, /educations, /certifications
- POST /contact
- /blogs admin CRUD, publish and unpublish
- GET /blogs/published..., POST /blogs/{id}/view
- POST /auth/login
- GET /actuator/health, /actuator/info
"""

import json
import logging
import os
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from . import database, models, services
from .auth import authenticator, require_admin
from .config import settings
from .database import create_db_and_tables, get_session
from .exceptions import internal_error_response, is_client_disconnect, register_exception_handlers
from .mailer import build_email_service
from .schemas import (
    ApiResponse,
    BlogIn,
    ContactRequest,
    LoginIn,
    PersonalInfoIn,
    TokenOut,
)
from .security import (
    OriginVerificationMiddleware,
    RateLimitMiddleware,
    SensitiveFileProbeMiddleware,
    add_security_headers,
    security_headers_middleware,
)
from .utils.rate_limit import RateLimitJanitor

logger = logging.getLogger("portfolio.api")
if not logging.getLogger().handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

email_service = build_email_service(settings)
rate_limiter = RateLimitMiddleware(
    contact_max_requests=settings.RATE_LIMIT_CONTACT_MAX_REQUESTS,
    contact_window_minutes=settings.RATE_LIMIT_CONTACT_WINDOW_MINUTES,
    blog_max_requests=settings.RATE_LIMIT_BLOG_MAX_REQUESTS,
    blog_window_minutes=settings.RATE_LIMIT_BLOG_WINDOW_MINUTES,
    trust_proxy_headers=settings.RATE_LIMIT_TRUST_PROXY_HEADERS,
)
_janitor = RateLimitJanitor(rate_limiter.cleanup_expired, settings.RATE_LIMIT_CLEANUP_SECONDS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _janitor.start()
    try:
        yield
    finally:
        _janitor.stop()


app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, description=settings.APP_DESCRIPTION, lifespan=lifespan)
register_exception_handlers(app)

create_db_and_tables()

# Registered innermost first: each registration wraps the ones before it.
app.middleware("http")(security_headers_middleware)
app.middleware("http")(rate_limiter)
app.middleware("http")(OriginVerificationMiddleware(settings.CORS_ALLOWED_ORIGINS, settings.API_SERVER_KEY, authenticator))
app.middleware("http")(SensitiveFileProbeMiddleware(settings.SECURITY_BLOCKED_PATHS))


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception as exc:
        if is_client_disconnect(exc):
            logger.debug("Client disconnected during %s %s: %s", request.method, request.url.path, exc)
            return Response(status_code=499)
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                    "client": request.client.host if request.client else "unknown",
                },
                ensure_ascii=True,
            ),
        )
        response = add_security_headers(internal_error_response(request))
        response.headers["X-Request-ID"] = req_id
        return response
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info(
        "request_done %s",
        json.dumps(
            {
                "request_id": req_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
                "client": request.client.host if request.client else "unknown",
            },
            ensure_ascii=True,
        ),
    )
    return response


def install_edge_middleware(target: FastAPI, cfg) -> None:
    """Add CORS and, when enabled, proxy-header handling outside the request filters."""
    if cfg.CORS_ALLOWED_ORIGINS:
        target.add_middleware(
            CORSMiddleware,
            allow_origins=cfg.CORS_ALLOWED_ORIGINS,
            allow_credentials=cfg.CORS_ALLOW_CREDENTIALS,
            allow_methods=cfg.CORS_ALLOWED_METHODS,
            allow_headers=["Content-Type", "Authorization", "X-API-Key", "Origin", "Referer", "Accept"],
            max_age=cfg.CORS_MAX_AGE,
        )
    else:
        logger.warning("No CORS allowed origins configured; cross-origin browser requests will be refused")
    if cfg.FORWARDED_HEADERS_ENABLED:
        target.add_middleware(ProxyHeadersMiddleware, trusted_hosts=cfg.FORWARDED_ALLOW_IPS)


install_edge_middleware(app, settings)


def _not_found(message: str) -> JSONResponse:
    return JSONResponse(status_code=404, content=jsonable_encoder(ApiResponse.error(message, 404)))


@app.get("/portfolio")
def get_personal_info(db: Session = Depends(get_session)):
    info = services.PersonalInfoService(db).get()
    if info is None:
        return _not_found("Personal information not found")
    return ApiResponse.ok(info, "Personal information retrieved successfully")


@app.put("/portfolio")
def update_personal_info(payload: PersonalInfoIn, db: Session = Depends(get_session), admin: str = Depends(require_admin)):
    """Replace the site owner's profile (admin only)."""
    info = services.PersonalInfoService(db).update(payload)
    return ApiResponse.ok(info, "Personal information updated successfully")


@app.get("/skills")
def list_skills(db: Session = Depends(get_session)):
    return ApiResponse.ok(services.SkillService(db).list_skills(), "Skills retrieved successfully")


@app.get("/projects")
def list_projects(db: Session = Depends(get_session)):
    return ApiResponse.ok(services.ProjectService(db).list_projects(), "Projects retrieved successfully")


@app.get("/experiences")
def list_experiences(db: Session = Depends(get_session)):
    return ApiResponse.ok(services.ExperienceService(db).list_experiences(), "Experiences retrieved successfully")


@app.get("/educations")
def list_educations(db: Session = Depends(get_session)):
    return ApiResponse.ok(services.EducationService(db).list_educations(), "Educations retrieved successfully")


@app.get("/certifications")
def list_certifications(db: Session = Depends(get_session)):
    return ApiResponse.ok(
        services.CertificationService(db).list_certifications(), "Certifications retrieved successfully"
    )


@app.post("/contact")
def submit_contact(payload: ContactRequest, db: Session = Depends(get_session)):
    """Forward a contact form submission to the site owner by email.

    Rate limited per client IP. Missing email configuration still
    answers 200 with a thank-you message; a delivery failure is a 500.
    """
    logger.info("Contact form submission received")
    svc = services.ContactService(
        db,
        email_service,
        sender_email=settings.CONTACT_EMAIL_FROM,
        recipient_email=settings.CONTACT_EMAIL_TO,
        website_domain=settings.CONTACT_EMAIL_DOMAIN,
    )
    message = svc.submit(payload)
    return ApiResponse.ok({"message": message}, message)


@app.get("/blogs")
def list_blogs(db: Session = Depends(get_session), admin: str = Depends(require_admin)):
    return services.BlogAdminService(db).list_blogs()


@app.get("/blogs/published")
def list_published_blogs(db: Session = Depends(get_session)):
    blogs = services.BlogPublicService(db).list_published()
    return ApiResponse.ok(blogs, "Published blogs retrieved successfully")


@app.get("/blogs/published/category/{category}")
def list_published_blogs_by_category(category: models.BlogCategory, db: Session = Depends(get_session)):
    blogs = services.BlogPublicService(db).list_published_by_category(category)
    return ApiResponse.ok(blogs, f"Published blogs in category '{category.value}' retrieved successfully")


@app.get("/blogs/published/{slug}")
def get_published_blog(slug: str, db: Session = Depends(get_session)):
    blog = services.BlogPublicService(db).get_published_by_slug(slug)
    if blog is None:
        return _not_found(f"Blog with slug '{slug}' not found")
    return ApiResponse.ok(blog, f"Blog with slug '{slug}' retrieved successfully")


@app.post("/blogs/{blog_id}/view")
def increment_blog_view(blog_id: str, db: Session = Depends(get_session)):
    blog = services.BlogAnalyticsService(db).increment_view_count(blog_id)
    if blog is None:
        return _not_found(f"Blog with ID '{blog_id}' not found")
    return ApiResponse.ok(blog, "View count incremented successfully")


@app.get("/blogs/id/{blog_id}")
def get_blog_by_id(blog_id: str, db: Session = Depends(get_session), admin: str = Depends(require_admin)):
    blog = services.BlogAdminService(db).get_by_id(blog_id)
    if blog is None:
        raise HTTPException(status_code=404, detail=f"Blog with ID '{blog_id}' not found")
    return blog


@app.get("/blogs/{slug}")
def get_blog_by_slug(slug: str, db: Session = Depends(get_session), admin: str = Depends(require_admin)):
    blog = services.BlogAdminService(db).get_by_slug(slug)
    if blog is None:
        raise HTTPException(status_code=404, detail=f"Blog with slug '{slug}' not found")
    return blog


@app.post("/blogs", status_code=201)
def create_blog(payload: BlogIn, db: Session = Depends(get_session), admin: str = Depends(require_admin)):
    """Create a blog post. A taken slug is answered with 409."""
    return services.BlogAdminService(db).create(payload)


@app.put("/blogs/{blog_id}")
def update_blog(blog_id: str, payload: BlogIn, db: Session = Depends(get_session), admin: str = Depends(require_admin)):
    return services.BlogAdminService(db).update(blog_id, payload)


@app.delete("/blogs/{blog_id}", status_code=204)
def delete_blog(blog_id: str, db: Session = Depends(get_session), admin: str = Depends(require_admin)):
    services.BlogAdminService(db).delete(blog_id)
    return Response(status_code=204)


@app.put("/blogs/{blog_id}/publish")
def publish_blog(blog_id: str, db: Session = Depends(get_session), admin: str = Depends(require_admin)):
    return services.BlogAdminService(db).publish(blog_id)


@app.put("/blogs/{blog_id}/unpublish")
def unpublish_blog(blog_id: str, db: Session = Depends(get_session), admin: str = Depends(require_admin)):
    return services.BlogAdminService(db).unpublish(blog_id)


@app.post("/auth/login", response_model=TokenOut)
def login(payload: LoginIn):
    """Exchange the admin credentials for a short-lived JWT token."""
    if not authenticator.verify(payload.username, payload.password):
        raise HTTPException(status_code=401, detail="invalid credentials")
    token = authenticator.issue_token(payload.username)
    return TokenOut(access_token=token, expires_in=settings.JWT_EXPIRE_HOURS * 3600)


@app.get("/actuator/health")
def health():
    """Liveness plus a database round trip, for uptime monitoring."""
    try:
        database.ping()
    except SQLAlchemyError as exc:
        logger.error("Health check failed: %s", exc)
        return JSONResponse(status_code=503, content={"status": "DOWN"})
    return {"status": "UP"}


@app.get("/actuator/info")
def info():
    return {"app": {"name": settings.APP_NAME, "version": settings.APP_VERSION, "description": settings.APP_DESCRIPTION}}


def run():
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "portfolio.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
        proxy_headers=settings.FORWARDED_HEADERS_ENABLED,
        forwarded_allow_ips=settings.FORWARDED_ALLOW_IPS,
    )
