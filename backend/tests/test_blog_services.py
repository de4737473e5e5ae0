import pytest

from portfolio import models, services
from portfolio.exceptions import BlogNotFoundError, BlogSlugAlreadyExistsError
from portfolio.schemas import BlogIn


def _blog_in(**overrides):
    data = {"title": "Hello", "content": "word " * 450, "slug": "hello"}
    data.update(overrides)
    return BlogIn(**data)


def test_reading_time_calculation():
    assert models.Blog(title="t", content="", slug="s").calculate_reading_time() == 0
    assert models.Blog(title="t", content="one two", slug="s").calculate_reading_time() == 1
    assert models.Blog(title="t", content="w " * 401, slug="s").calculate_reading_time() == 3


def test_create_fills_reading_time_and_defaults(session):
    blog = services.BlogAdminService(session).create(_blog_in())
    assert blog.id
    assert blog.reading_time == 3
    assert blog.status == models.BlogStatus.DRAFT
    assert blog.published_at is None
    assert blog.view_count == 0
    assert blog.is_active is True


def test_create_keeps_explicit_reading_time_and_publishes(session):
    blog = services.BlogAdminService(session).create(_blog_in(reading_time=7, status="PUBLISHED"))
    assert blog.reading_time == 7
    assert blog.status == models.BlogStatus.PUBLISHED
    assert blog.published_at is not None


def test_create_rejects_taken_slug_even_when_deleted(session):
    svc = services.BlogAdminService(session)
    blog = svc.create(_blog_in())
    svc.delete(blog.id)
    with pytest.raises(BlogSlugAlreadyExistsError, match="Blog with slug 'hello' already exists"):
        svc.create(_blog_in(title="Other"))


def test_update_recomputes_reading_time_when_content_changes(session):
    svc = services.BlogAdminService(session)
    blog = svc.create(_blog_in())
    updated = svc.update(blog.id, _blog_in(content="short text", reading_time=9))
    assert updated.reading_time == 1
    same = svc.update(blog.id, _blog_in(content="short text", reading_time=9, title="New"))
    assert same.reading_time == 9
    assert same.title == "New"


def test_update_rejects_slug_of_another_blog(session):
    svc = services.BlogAdminService(session)
    svc.create(_blog_in(slug="first"))
    second = svc.create(_blog_in(slug="second"))
    with pytest.raises(BlogSlugAlreadyExistsError):
        svc.update(second.id, _blog_in(slug="first"))
    # keeping its own slug is fine
    assert svc.update(second.id, _blog_in(slug="second", title="Renamed")).title == "Renamed"


def test_admin_operations_on_missing_blog_raise(session):
    svc = services.BlogAdminService(session)
    with pytest.raises(BlogNotFoundError, match="Blog with ID 'nope' not found"):
        svc.update("nope", _blog_in())
    with pytest.raises(BlogNotFoundError):
        svc.delete("nope")
    with pytest.raises(BlogNotFoundError):
        svc.publish("nope")
    with pytest.raises(BlogNotFoundError):
        svc.unpublish("nope")


def test_soft_delete_hides_blog(session):
    svc = services.BlogAdminService(session)
    blog = svc.create(_blog_in(status="PUBLISHED"))
    svc.delete(blog.id)
    assert svc.get_by_id(blog.id) is None
    assert svc.get_by_slug("hello") is None
    assert svc.list_blogs() == []
    assert services.BlogPublicService(session).list_published() == []
    with pytest.raises(BlogNotFoundError):
        svc.delete(blog.id)


def test_publish_and_unpublish(session):
    svc = services.BlogAdminService(session)
    blog = svc.create(_blog_in())
    published = svc.publish(blog.id)
    assert published.status == models.BlogStatus.PUBLISHED
    assert published.published_at is not None
    assert published.is_publicly_visible
    draft = svc.unpublish(blog.id)
    assert draft.status == models.BlogStatus.DRAFT
    assert draft.published_at is None
    assert not draft.is_publicly_visible


def test_public_service_filters_status_and_category(session):
    admin = services.BlogAdminService(session)
    admin.create(_blog_in(slug="tech", category="TECHNICAL", status="PUBLISHED"))
    admin.create(_blog_in(slug="life", category="LIFE", status="PUBLISHED"))
    admin.create(_blog_in(slug="draft", category="TECHNICAL"))
    public = services.BlogPublicService(session)
    assert {b.slug for b in public.list_published()} == {"tech", "life"}
    assert [b.slug for b in public.list_published_by_category(models.BlogCategory.TECHNICAL)] == ["tech"]
    assert public.get_published_by_slug("draft") is None
    tech = public.get_published_by_slug("tech")
    assert public.get_published_by_id(tech.id).slug == "tech"


def test_view_count_increments_on_active_blogs(session):
    blog = services.BlogAdminService(session).create(_blog_in())
    analytics = services.BlogAnalyticsService(session)
    analytics.increment_view_count(blog.id)
    analytics.increment_view_count(blog.id)
    assert analytics.get_view_count(blog.id) == 2
    assert analytics.increment_view_count("missing") is None
    assert analytics.get_view_count("missing") is None
