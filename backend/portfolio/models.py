"""SQLModel data models.

Each class maps to a table. Content sections were designed as documents,
so list-valued and nested fields (technologies, bullet descriptions,
social links) are stored in JSON columns rather than child tables.
"""

import math
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


def _new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


WORDS_PER_MINUTE = 200


class BlogStatus(str, Enum):
    """Lifecycle state of a blog post. Only PUBLISHED posts are public."""
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"

    @property
    def is_publicly_visible(self) -> bool:
        return self is BlogStatus.PUBLISHED


class BlogCategory(str, Enum):
    TECHNICAL = "TECHNICAL"
    LIFE = "LIFE"
    CAREER = "CAREER"


class Blog(SQLModel, table=True):
    """A blog post addressed publicly by its unique `slug`.

    Deleting a post only clears `is_active`; inactive posts are hidden
    from every query but still reserve their slug.
    """
    __tablename__ = "blogs"

    id: Optional[str] = Field(default_factory=_new_id, primary_key=True)
    title: str
    content: str
    slug: str = Field(index=True, unique=True)
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    reading_time: Optional[int] = None
    view_count: int = 0
    status: BlogStatus = Field(default=BlogStatus.DRAFT, index=True)
    published_at: Optional[datetime] = None
    is_active: bool = Field(default=True, index=True)
    category: Optional[BlogCategory] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def calculate_reading_time(self) -> int:
        """Estimate minutes to read `content` at 200 words per minute."""
        if not self.content or not self.content.strip():
            return 0
        words = len(self.content.split())
        return max(1, math.ceil(words / WORDS_PER_MINUTE))

    def increment_view_count(self) -> None:
        self.view_count = (self.view_count or 0) + 1

    def publish(self) -> None:
        self.status = BlogStatus.PUBLISHED
        self.published_at = utcnow()

    def unpublish(self) -> None:
        self.status = BlogStatus.DRAFT
        self.published_at = None

    @property
    def is_publicly_visible(self) -> bool:
        return bool(self.is_active) and BlogStatus(self.status).is_publicly_visible


class Skill(SQLModel, table=True):
    """A skill category (e.g. `Databases`) holding a list of skill names."""
    __tablename__ = "skills"

    id: Optional[str] = Field(default_factory=_new_id, primary_key=True)
    category_name: str
    skills: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    display_order: Optional[int] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Project(SQLModel, table=True):
    __tablename__ = "projects"

    id: Optional[str] = Field(default_factory=_new_id, primary_key=True)
    title: str
    description: str
    short_description: Optional[str] = None
    featured_image: str
    technologies: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    project_url: Optional[str] = None
    github_url: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_active: bool = Field(default=True, index=True)
    display_order: Optional[int] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Experience(SQLModel, table=True):
    """A work experience entry. Dates use the `MM-YYYY` format."""
    __tablename__ = "experiences"

    id: Optional[str] = Field(default_factory=_new_id, primary_key=True)
    company_name: str
    position: str
    location: Optional[str] = None
    start_date: str
    end_date: Optional[str] = None
    is_current: bool = False
    description: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    technologies: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    achievements: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    company_logo: Optional[str] = None
    company_website: Optional[str] = None
    display_order: Optional[int] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Education(SQLModel, table=True):
    __tablename__ = "educations"

    id: Optional[str] = Field(default_factory=_new_id, primary_key=True)
    degree: str
    field_of_study: str
    institution_name: str
    location: Optional[str] = None
    start_date: str
    end_date: Optional[str] = None
    is_current: bool = False
    description: Optional[str] = None
    institution_logo: Optional[str] = None
    institution_website: Optional[str] = None
    display_order: Optional[int] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Certification(SQLModel, table=True):
    __tablename__ = "certifications"

    id: Optional[str] = Field(default_factory=_new_id, primary_key=True)
    certification_name: str
    issuing_organization: str
    issue_date: Optional[str] = None
    expiration_date: Optional[str] = None
    does_not_expire: bool = False
    credential_id: Optional[str] = None
    credential_url: Optional[str] = None
    description: Optional[str] = None
    organization_logo: Optional[str] = None
    organization_website: Optional[str] = None
    display_order: Optional[int] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class PersonalInfo(SQLModel, table=True):
    """The site owner's profile. The service treats the first row as the only one.

    `social_links` holds a `{github, linkedin, twitter, website}` object.
    """
    __tablename__ = "personal_info"

    id: Optional[str] = Field(default_factory=_new_id, primary_key=True)
    name: str
    tagline: str
    description: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    profile_image: str
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    social_links: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    updated_at: datetime = Field(default_factory=utcnow)
