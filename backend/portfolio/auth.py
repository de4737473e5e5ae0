"""Admin authentication helpers and FastAPI security dependency.

The backend has a single administrator configured through the
environment. Admin routes accept either HTTP Basic credentials or a
bearer JWT obtained from `POST /auth/login`. Verification failures raise
HTTPExceptions so the helpers can be used directly inside route
dependencies.
"""

import base64
import binascii
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBasic, HTTPBasicCredentials, HTTPBearer
from passlib.context import CryptContext

from .config import settings
from .utils.text import constant_time_equals

logger = logging.getLogger("portfolio.auth")

PWD_CTX = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
REALM = "Blog Admin API"

basic_scheme = HTTPBasic(auto_error=False, realm=REALM)
bearer_scheme = HTTPBearer(auto_error=False)


def unauthorized(detail: str = "Authentication required") -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": f'Basic realm="{REALM}"'})


class AdminAuthenticator:
    """Checks credentials against the configured admin account.

    Only a hash of the password is kept in memory after construction.
    """

    def __init__(self, username: Optional[str], password: Optional[str]):
        self.username = username
        self._password_hash = PWD_CTX.hash(password) if username and password else None

    @property
    def enabled(self) -> bool:
        return self._password_hash is not None

    def verify(self, username: Optional[str], password: Optional[str]) -> bool:
        if not self.enabled or username is None or password is None:
            return False
        user_ok = constant_time_equals(self.username, username)
        # always run the hash check so timing does not reveal the username
        password_ok = PWD_CTX.verify(password, self._password_hash)
        return user_ok and password_ok

    def issue_token(self, username: str) -> str:
        expire = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRE_HOURS)
        payload = {"sub": username, "exp": expire}
        return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

    def decode_token(self, token: str) -> dict:
        """Decode and verify a JWT token.

        Returns the decoded payload on success or raises an HTTPException
        with status 401 on failure.
        """
        try:
            payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise unauthorized("token expired")
        except jwt.InvalidTokenError:
            raise unauthorized("invalid token")
        if not self.enabled or not constant_time_equals(self.username, payload.get("sub")):
            raise unauthorized("invalid token payload")
        return payload

    def authenticate_authorization(self, header: Optional[str]) -> Optional[str]:
        """Return the admin username for a valid `Authorization` header value.

        Both `Basic` and `Bearer` schemes are understood; anything else,
        including a missing header, yields None.
        """
        if not header or " " not in header:
            return None
        scheme, _, value = header.partition(" ")
        scheme = scheme.lower()
        value = value.strip()
        if scheme == "basic":
            username, password = _decode_basic(value)
            return username if self.verify(username, password) else None
        if scheme == "bearer":
            try:
                return self.decode_token(value)["sub"]
            except HTTPException:
                return None
        return None


def _decode_basic(value: str):
    try:
        decoded = base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None, None
    username, sep, password = decoded.partition(":")
    if not sep:
        return None, None
    return username, password


def build_authenticator(cfg) -> AdminAuthenticator:
    if not cfg.admin_enabled:
        logger.warning("Admin credentials are not configured; admin endpoints will reject every request")
    return AdminAuthenticator(cfg.ADMIN_USERNAME, cfg.ADMIN_PASSWORD)


authenticator = build_authenticator(settings)


def require_admin(
    request: Request,
    basic: Optional[HTTPBasicCredentials] = Security(basic_scheme),
    bearer: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> str:
    """FastAPI dependency that returns the authenticated admin username.

    Raises HTTPException(401) with a Basic challenge for any
    authentication issue.
    """
    if bearer is not None:
        return authenticator.decode_token(bearer.credentials)["sub"]
    if basic is not None and authenticator.verify(basic.username, basic.password):
        return basic.username
    logger.warning("Rejected admin request to %s", request.url.path)
    raise unauthorized()
