"""Repository classes encapsulating database operations.

Each repository is small and focused on a single aggregate (blogs,
skills, projects, ...). Repositories return SQLModel objects and perform
commits/refreshes where appropriate.
"""

from typing import Generic, List, Optional, Type, TypeVar

from sqlmodel import Session, SQLModel, select

from . import models

T = TypeVar("T", bound=SQLModel)


class _Repository(Generic[T]):
    """Shared persistence helpers; subclasses set `model`."""
    model: Type[T]

    def __init__(self, session: Session):
        self.session = session

    def save(self, obj: T) -> T:
        """Persist `obj`, stamping `updated_at`, and return the refreshed instance."""
        if hasattr(obj, "updated_at"):
            obj.updated_at = models.utcnow()
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def add_all(self, objs: List[T]) -> List[T]:
        for obj in objs:
            self.session.add(obj)
        self.session.commit()
        for obj in objs:
            self.session.refresh(obj)
        return objs

    def list_all(self) -> List[T]:
        return list(self.session.exec(select(self.model)).all())

    def get(self, obj_id: str) -> Optional[T]:
        return self.session.get(self.model, obj_id)

    def delete_all(self) -> None:
        for obj in self.list_all():
            self.session.delete(obj)
        self.session.commit()


class BlogRepository(_Repository[models.Blog]):
    """Queries over blog posts. Every finder ignores soft-deleted posts except `exists_by_slug`."""
    model = models.Blog

    def list_active_newest_first(self) -> List[models.Blog]:
        stmt = select(models.Blog).where(models.Blog.is_active == True).order_by(models.Blog.created_at.desc())  # noqa: E712
        return list(self.session.exec(stmt).all())

    def get_active_by_slug(self, slug: str) -> Optional[models.Blog]:
        stmt = select(models.Blog).where(models.Blog.slug == slug, models.Blog.is_active == True)  # noqa: E712
        return self.session.exec(stmt).first()

    def get_active_by_id(self, blog_id: str) -> Optional[models.Blog]:
        stmt = select(models.Blog).where(models.Blog.id == blog_id, models.Blog.is_active == True)  # noqa: E712
        return self.session.exec(stmt).first()

    def exists_by_slug(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        """Return True if any blog (active or not) uses `slug`, optionally ignoring one id."""
        stmt = select(models.Blog.id).where(models.Blog.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(models.Blog.id != exclude_id)
        return self.session.exec(stmt).first() is not None

    def list_by_status_active_newest_published(
        self, status: models.BlogStatus, category: Optional[models.BlogCategory] = None
    ) -> List[models.Blog]:
        stmt = select(models.Blog).where(models.Blog.status == status, models.Blog.is_active == True)  # noqa: E712
        if category is not None:
            stmt = stmt.where(models.Blog.category == category)
        stmt = stmt.order_by(models.Blog.published_at.desc())
        return list(self.session.exec(stmt).all())

    def get_by_slug_status_active(self, slug: str, status: models.BlogStatus) -> Optional[models.Blog]:
        stmt = select(models.Blog).where(
            models.Blog.slug == slug,
            models.Blog.status == status,
            models.Blog.is_active == True,  # noqa: E712
        )
        return self.session.exec(stmt).first()

    def get_by_id_status_active(self, blog_id: str, status: models.BlogStatus) -> Optional[models.Blog]:
        stmt = select(models.Blog).where(
            models.Blog.id == blog_id,
            models.Blog.status == status,
            models.Blog.is_active == True,  # noqa: E712
        )
        return self.session.exec(stmt).first()


class SkillRepository(_Repository[models.Skill]):
    model = models.Skill


class ProjectRepository(_Repository[models.Project]):
    model = models.Project

    def list_active_by_display_order_desc(self) -> List[models.Project]:
        stmt = (
            select(models.Project)
            .where(models.Project.is_active == True)  # noqa: E712
            .order_by(models.Project.display_order.desc())
        )
        return list(self.session.exec(stmt).all())


class ExperienceRepository(_Repository[models.Experience]):
    model = models.Experience

    def list_by_display_order_desc(self) -> List[models.Experience]:
        stmt = select(models.Experience).order_by(models.Experience.display_order.desc())
        return list(self.session.exec(stmt).all())


class EducationRepository(_Repository[models.Education]):
    model = models.Education


class CertificationRepository(_Repository[models.Certification]):
    model = models.Certification


class PersonalInfoRepository(_Repository[models.PersonalInfo]):
    model = models.PersonalInfo

    def first(self) -> Optional[models.PersonalInfo]:
        """Return the profile row with the lowest id, or `None` when none exists."""
        stmt = select(models.PersonalInfo).order_by(models.PersonalInfo.id.asc()).limit(1)
        return self.session.exec(stmt).first()
