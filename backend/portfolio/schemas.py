"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and carry the field
constraints (required, maximum lengths, `MM-YYYY` dates) that the table
models do not enforce on their own.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, List, Optional

from pydantic import AfterValidator, BaseModel, Field

from .models import BlogCategory, BlogStatus

MONTH_YEAR_REGEX = r"^(0[1-9]|1[0-2])-\d{4}$"
EMAIL_REGEX = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

MonthYear = Annotated[str, Field(max_length=7, pattern=MONTH_YEAR_REGEX)]


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]


class ApiResponse(BaseModel):
    """Envelope returned by the public endpoints."""
    success: bool
    message: str
    data: Optional[Any] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    path: Optional[str] = None
    status: Optional[int] = None

    @classmethod
    def ok(cls, data: Any, message: str) -> "ApiResponse":
        return cls(success=True, message=message, data=data)

    @classmethod
    def error(cls, message: str, status: int) -> "ApiResponse":
        return cls(success=False, message=message, status=status)


class LoginIn(BaseModel):
    """Admin credentials exchanged for a bearer token."""
    username: str
    password: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class ContactRequest(BaseModel):
    """Contact form submission."""
    name: NonBlankStr = Field(max_length=100)
    email: NonBlankStr = Field(max_length=100, pattern=EMAIL_REGEX)
    subject: Optional[str] = Field(default=None, max_length=200)
    message: NonBlankStr = Field(max_length=5000)


class BlogIn(BaseModel):
    """Payload for creating or updating a blog post.

    `status` is honoured on create only; use the publish endpoints to
    change the status of an existing post.
    """
    title: NonBlankStr = Field(max_length=200)
    content: NonBlankStr
    slug: NonBlankStr = Field(max_length=250)
    excerpt: Optional[str] = Field(default=None, max_length=500)
    featured_image: Optional[str] = None
    reading_time: Optional[int] = Field(default=None, ge=0)
    category: Optional[BlogCategory] = None
    status: Optional[BlogStatus] = None


class SocialLinks(BaseModel):
    github: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    website: Optional[str] = None


class PersonalInfoIn(BaseModel):
    name: NonBlankStr = Field(max_length=100)
    tagline: NonBlankStr = Field(max_length=200)
    description: Optional[List[str]] = None
    profile_image: NonBlankStr
    email: Optional[str] = Field(default=None, max_length=100, pattern=EMAIL_REGEX)
    phone: Optional[str] = Field(default=None, max_length=20)
    location: Optional[str] = Field(default=None, max_length=100)
    social_links: Optional[SocialLinks] = None


class SkillIn(BaseModel):
    category_name: NonBlankStr = Field(max_length=200)
    skills: Optional[List[str]] = None
    display_order: Optional[int] = 0


class ProjectIn(BaseModel):
    title: NonBlankStr = Field(max_length=200)
    description: NonBlankStr = Field(max_length=2000)
    short_description: Optional[str] = Field(default=None, max_length=500)
    featured_image: NonBlankStr = Field(max_length=1000)
    technologies: Optional[List[str]] = None
    project_url: Optional[str] = Field(default=None, max_length=1000)
    github_url: Optional[str] = Field(default=None, max_length=1000)
    start_date: Optional[MonthYear] = None
    end_date: Optional[MonthYear] = None
    is_active: bool = True
    display_order: Optional[int] = 0


class ExperienceIn(BaseModel):
    company_name: NonBlankStr = Field(max_length=200)
    position: NonBlankStr = Field(max_length=200)
    location: Optional[str] = Field(default=None, max_length=100)
    start_date: MonthYear
    end_date: Optional[MonthYear] = None
    is_current: bool = False
    description: Optional[List[str]] = None
    technologies: Optional[List[str]] = None
    achievements: Optional[List[str]] = None
    company_logo: Optional[str] = None
    company_website: Optional[str] = Field(default=None, max_length=500)
    display_order: Optional[int] = 0


class EducationIn(BaseModel):
    degree: NonBlankStr = Field(max_length=200)
    field_of_study: NonBlankStr = Field(max_length=200)
    institution_name: NonBlankStr = Field(max_length=200)
    location: Optional[str] = Field(default=None, max_length=100)
    start_date: MonthYear
    end_date: Optional[MonthYear] = None
    is_current: bool = False
    description: Optional[str] = Field(default=None, max_length=2000)
    institution_logo: Optional[str] = Field(default=None, max_length=500)
    institution_website: Optional[str] = Field(default=None, max_length=500)
    display_order: Optional[int] = 0


class CertificationIn(BaseModel):
    certification_name: NonBlankStr = Field(max_length=200)
    issuing_organization: NonBlankStr = Field(max_length=200)
    issue_date: Optional[MonthYear] = None
    expiration_date: Optional[MonthYear] = None
    does_not_expire: bool = False
    credential_id: Optional[str] = Field(default=None, max_length=500)
    credential_url: Optional[str] = Field(default=None, max_length=1000)
    description: Optional[str] = Field(default=None, max_length=2000)
    organization_logo: Optional[str] = Field(default=None, max_length=500)
    organization_website: Optional[str] = Field(default=None, max_length=500)
    display_order: Optional[int] = 0
