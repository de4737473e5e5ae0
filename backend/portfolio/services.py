"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate repositories
and auxiliary logic. Services are intentionally thin: they perform
validation, execute domain logic and persist aggregates via
repositories. Admin blog operations raise the domain exceptions from
`portfolio.exceptions`; public lookups return `None` instead.
"""

import logging
from datetime import date
from typing import Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError
from sqlmodel import Session, SQLModel

from . import models, repositories, schemas
from .exceptions import BlogNotFoundError, BlogSlugAlreadyExistsError, EmailSendingError, EmailServiceError
from .mailer import EmailService
from .utils.dates import parse_month_year
from .utils.email_templates import build_contact_email_body
from .utils.text import is_configured, is_not_blank, sanitize_for_email_header

logger = logging.getLogger("portfolio.services")

MESSAGE_SENT_SUCCESS = "Message sent successfully! I'll get back to you soon."
THANK_YOU_FOR_CONTACTING = "Thank you for contacting me. I will get back to you soon."
RECIPIENT_EMAIL_NOT_CONFIGURED = "Recipient email not configured"
SENDER_EMAIL_NOT_CONFIGURED = "Sender email not configured"
EMAIL_SERVICE_NOT_CONFIGURED = "Email service not configured"
CONTACT_SEND_FAILED = "Failed to send message. Please try again later."


def _sorted_desc_nulls_last(items: list, key: Callable[[object], Optional[date]]) -> list:
    """Sort by a date key, newest first, keeping items without a date at the end."""
    dated = [(key(item), item) for item in items]
    with_date = [pair for pair in dated if pair[0] is not None]
    without_date = [item for k, item in dated if k is None]
    with_date.sort(key=lambda pair: pair[0], reverse=True)
    return [item for _, item in with_date] + without_date


class BlogAdminService:
    """Blog management for the authenticated admin."""
    def __init__(self, session: Session):
        self.session = session
        self.blog_repo = repositories.BlogRepository(session)

    def list_blogs(self) -> List[models.Blog]:
        logger.info("Fetching all blogs for admin access")
        return self.blog_repo.list_active_newest_first()

    def get_by_slug(self, slug: str) -> Optional[models.Blog]:
        logger.info("Fetching blog by slug: %s", slug)
        return self.blog_repo.get_active_by_slug(slug)

    def get_by_id(self, blog_id: str) -> Optional[models.Blog]:
        logger.info("Fetching blog by ID: %s", blog_id)
        return self.blog_repo.get_active_by_id(blog_id)

    def create(self, data: schemas.BlogIn) -> models.Blog:
        """Create a blog post.

        The slug must be unused by every blog, including soft-deleted
        ones. A missing `reading_time` is estimated from the content, and
        a `PUBLISHED` status publishes the post immediately.
        """
        logger.info("Creating new blog: %s", data.title)
        if self.blog_repo.exists_by_slug(data.slug):
            raise BlogSlugAlreadyExistsError(f"Blog with slug '{data.slug}' already exists")
        blog = models.Blog(
            title=data.title,
            content=data.content,
            slug=data.slug,
            excerpt=data.excerpt,
            featured_image=data.featured_image,
            reading_time=data.reading_time,
            category=data.category,
        )
        if blog.reading_time is None:
            blog.reading_time = blog.calculate_reading_time()
        if data.status == models.BlogStatus.PUBLISHED:
            blog.publish()
        elif data.status is not None:
            blog.status = data.status
        return self.blog_repo.save(blog)

    def update(self, blog_id: str, data: schemas.BlogIn) -> models.Blog:
        """Replace the editable fields of an active blog.

        The reading time is recomputed when the content changes;
        otherwise an explicit `reading_time` from the payload is kept.
        """
        logger.info("Updating blog: %s", blog_id)
        blog = self._require_active(blog_id)
        if data.slug != blog.slug and self.blog_repo.exists_by_slug(data.slug, exclude_id=blog.id):
            raise BlogSlugAlreadyExistsError(f"Blog with slug '{data.slug}' already exists")
        content_changed = data.content != blog.content
        blog.title = data.title
        blog.content = data.content
        blog.slug = data.slug
        blog.excerpt = data.excerpt
        blog.featured_image = data.featured_image
        blog.category = data.category
        if content_changed:
            blog.reading_time = blog.calculate_reading_time()
        elif data.reading_time is not None:
            blog.reading_time = data.reading_time
        return self.blog_repo.save(blog)

    def delete(self, blog_id: str) -> None:
        logger.info("Deleting blog: %s", blog_id)
        blog = self._require_active(blog_id)
        blog.is_active = False
        self.blog_repo.save(blog)

    def publish(self, blog_id: str) -> models.Blog:
        logger.info("Publishing blog: %s", blog_id)
        blog = self._require_active(blog_id)
        blog.publish()
        return self.blog_repo.save(blog)

    def unpublish(self, blog_id: str) -> models.Blog:
        logger.info("Unpublishing blog: %s", blog_id)
        blog = self._require_active(blog_id)
        blog.unpublish()
        return self.blog_repo.save(blog)

    def _require_active(self, blog_id: str) -> models.Blog:
        blog = self.blog_repo.get_active_by_id(blog_id)
        if blog is None:
            raise BlogNotFoundError(f"Blog with ID '{blog_id}' not found")
        return blog


class BlogPublicService:
    """Read-only access to published, active blogs."""
    def __init__(self, session: Session):
        self.blog_repo = repositories.BlogRepository(session)

    def list_published(self) -> List[models.Blog]:
        logger.info("Fetching all published blogs for public access")
        return self.blog_repo.list_by_status_active_newest_published(models.BlogStatus.PUBLISHED)

    def list_published_by_category(self, category: models.BlogCategory) -> List[models.Blog]:
        logger.info("Fetching published blogs in category: %s", category.value)
        return self.blog_repo.list_by_status_active_newest_published(models.BlogStatus.PUBLISHED, category)

    def get_published_by_slug(self, slug: str) -> Optional[models.Blog]:
        logger.info("Fetching published blog by slug: %s", slug)
        return self.blog_repo.get_by_slug_status_active(slug, models.BlogStatus.PUBLISHED)

    def get_published_by_id(self, blog_id: str) -> Optional[models.Blog]:
        logger.info("Fetching published blog by ID: %s", blog_id)
        return self.blog_repo.get_by_id_status_active(blog_id, models.BlogStatus.PUBLISHED)


class BlogAnalyticsService:
    def __init__(self, session: Session):
        self.blog_repo = repositories.BlogRepository(session)

    def increment_view_count(self, blog_id: str) -> Optional[models.Blog]:
        """Add one view to an active blog; return `None` if it does not exist."""
        logger.info("Incrementing view count for blog: %s", blog_id)
        blog = self.blog_repo.get_active_by_id(blog_id)
        if blog is None:
            return None
        blog.increment_view_count()
        return self.blog_repo.save(blog)

    def get_view_count(self, blog_id: str) -> Optional[int]:
        blog = self.blog_repo.get_active_by_id(blog_id)
        return None if blog is None else blog.view_count


class SkillService:
    def __init__(self, session: Session):
        self.skill_repo = repositories.SkillRepository(session)

    def list_skills(self) -> List[models.Skill]:
        """Return skill categories by ascending `display_order`, unordered ones last."""
        logger.info("Fetching all skills for public access")
        skills = self.skill_repo.list_all()
        return sorted(skills, key=lambda s: (s.display_order is None, s.display_order or 0))


class ProjectService:
    def __init__(self, session: Session):
        self.project_repo = repositories.ProjectRepository(session)

    def list_projects(self) -> List[models.Project]:
        logger.info("Fetching all active projects for public access")
        return self.project_repo.list_active_by_display_order_desc()


class ExperienceService:
    def __init__(self, session: Session):
        self.experience_repo = repositories.ExperienceRepository(session)

    def list_experiences(self) -> List[models.Experience]:
        logger.info("Fetching all experiences for public access")
        return self.experience_repo.list_by_display_order_desc()


class EducationService:
    def __init__(self, session: Session):
        self.education_repo = repositories.EducationRepository(session)

    @staticmethod
    def _sort_date(education: models.Education) -> Optional[date]:
        if education.is_current or not education.end_date:
            return parse_month_year(education.start_date)
        return parse_month_year(education.end_date)

    def list_educations(self) -> List[models.Education]:
        """Return degrees newest first.

        Ongoing degrees (and those without an end date) are placed by
        their start date, finished ones by their end date. Entries whose
        date cannot be parsed go last.
        """
        logger.info("Fetching all educations for public access")
        return _sorted_desc_nulls_last(self.education_repo.list_all(), self._sort_date)


class CertificationService:
    def __init__(self, session: Session):
        self.certification_repo = repositories.CertificationRepository(session)

    def list_certifications(self) -> List[models.Certification]:
        logger.info("Fetching all certifications for public access")
        return _sorted_desc_nulls_last(
            self.certification_repo.list_all(), lambda c: parse_month_year(c.issue_date)
        )


class PersonalInfoService:
    def __init__(self, session: Session):
        self.info_repo = repositories.PersonalInfoRepository(session)

    def get(self) -> Optional[models.PersonalInfo]:
        logger.info("Fetching personal information for public access")
        return self.info_repo.first()

    def update(self, data: schemas.PersonalInfoIn) -> models.PersonalInfo:
        """Overwrite the stored profile with `data`, creating it if absent."""
        logger.info("Updating personal information")
        values = data.model_dump()
        info = self.info_repo.first()
        if info is None:
            info = models.PersonalInfo(**values)
        else:
            for field, value in values.items():
                setattr(info, field, value)
        return self.info_repo.save(info)


class ContactService:
    """Turn contact form submissions into notification emails."""
    def __init__(
        self,
        session: Session,
        email_service: Optional[EmailService],
        sender_email: Optional[str],
        recipient_email: Optional[str],
        website_domain: str,
    ):
        self.info_service = PersonalInfoService(session)
        self.email_service = email_service
        self.sender_email = sender_email
        self.recipient_email = recipient_email
        self.website_domain = website_domain

    def submit(self, contact: schemas.ContactRequest) -> str:
        """Send the submission to the site owner and return the user-facing message.

        Missing email configuration is not an error for the visitor: the
        submission is logged and a thank-you message is returned. A
        delivery failure raises `EmailSendingError`.
        """
        to_email = self._recipient()
        if not is_configured(to_email):
            return self._not_configured(RECIPIENT_EMAIL_NOT_CONFIGURED)
        if self.email_service is None:
            return self._not_configured(EMAIL_SERVICE_NOT_CONFIGURED)
        if not is_configured(self.sender_email):
            return self._not_configured(SENDER_EMAIL_NOT_CONFIGURED)
        subject = self.build_subject(contact)
        body = build_contact_email_body(contact, self.website_domain)
        try:
            self.email_service.send_contact_email(to_email, self.sender_email, subject, body)
        except EmailServiceError as exc:
            logger.error("Failed to send contact form email: %s", exc)
            raise EmailSendingError(CONTACT_SEND_FAILED) from exc
        return MESSAGE_SENT_SUCCESS

    @staticmethod
    def build_subject(contact: schemas.ContactRequest) -> str:
        prefix = (
            sanitize_for_email_header(contact.subject)
            if is_not_blank(contact.subject)
            else "Contact Form Submission"
        )
        return f"[Contact Form] {prefix} - {sanitize_for_email_header(contact.name)}"

    def _recipient(self) -> Optional[str]:
        if is_configured(self.recipient_email):
            return self.recipient_email
        info = self.info_service.get()
        return info.email if info else None

    @staticmethod
    def _not_configured(reason: str) -> str:
        logger.warning("%s. Contact form submission logged but email not sent.", reason)
        return THANK_YOU_FOR_CONTACTING


class PortfolioImportService:
    """Load portfolio content (skills, projects, ...) from a JSON document.

    The document is an object whose optional keys are `personal_info`
    (an object) and `skills`, `projects`, `experiences`, `educations`,
    `certifications` (lists of objects). Items are validated one by one;
    invalid items are reported and skipped.
    """

    SECTIONS: Dict[str, tuple] = {
        "skills": (schemas.SkillIn, models.Skill, repositories.SkillRepository),
        "projects": (schemas.ProjectIn, models.Project, repositories.ProjectRepository),
        "experiences": (schemas.ExperienceIn, models.Experience, repositories.ExperienceRepository),
        "educations": (schemas.EducationIn, models.Education, repositories.EducationRepository),
        "certifications": (schemas.CertificationIn, models.Certification, repositories.CertificationRepository),
    }

    def __init__(self, session: Session):
        self.session = session

    def import_document(self, document: dict, replace: bool = False, dry_run: bool = False) -> dict:
        """Validate and persist every section present in `document`.

        Returns `{section: {created, errors}}`. With `replace`, existing
        rows of each provided section are removed first; with `dry_run`,
        nothing is written.
        """
        if not isinstance(document, dict):
            raise ValueError("portfolio document must be a JSON object")
        summary = {}
        for section, (schema, model, repo_cls) in self.SECTIONS.items():
            if section not in document:
                continue
            items = document[section]
            if not isinstance(items, list):
                summary[section] = {"created": 0, "errors": [{"index": None, "error": "section must be a list"}]}
                continue
            valid, errors = self._validate_items(items, schema, model)
            if not dry_run:
                repo = repo_cls(self.session)
                if replace:
                    repo.delete_all()
                repo.add_all(valid)
            summary[section] = {"created": len(valid), "errors": errors}
        if "personal_info" in document:
            summary["personal_info"] = self._import_personal_info(document["personal_info"], dry_run)
        return summary

    def _import_personal_info(self, raw, dry_run: bool) -> dict:
        try:
            data = schemas.PersonalInfoIn.model_validate(raw)
        except ValidationError as exc:
            return {"created": 0, "errors": [{"index": None, "error": str(exc)}]}
        if not dry_run:
            PersonalInfoService(self.session).update(data)
        return {"created": 1, "errors": []}

    @staticmethod
    def _validate_items(items: list, schema: Type[BaseModel], model: Type[SQLModel]):
        valid = []
        errors = []
        for idx, raw in enumerate(items):
            try:
                data = schema.model_validate(raw)
            except ValidationError as exc:
                errors.append({"index": idx, "error": str(exc)})
                continue
            valid.append(model(**data.model_dump()))
        return valid, errors
