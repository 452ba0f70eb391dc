"""
test_blogs.py — Blog CRUD, ownership, views, likes and comments.
"""
from __future__ import annotations

import pytest

from teamhub.auth.models import Role
from teamhub.core import blogs
from teamhub.core.errors import ForbiddenError, NotFoundError, ValidationError


@pytest.fixture
def author(make_user):
    return make_user(role=Role.COACH)


def _post(author, **overrides):
    fields = dict(title="Match report", content="We won 3-1.", tags="match, report")
    fields.update(overrides)
    return blogs.create_blog(author, **fields)


def test_create_blog_defaults(author):
    blog = _post(author)
    assert blog.author.id == author.id
    assert blog.tags == ["match", "report"]
    assert blog.status == "draft"
    assert blog.views == 0
    assert blog.likes_count == 0


def test_create_blog_requires_title_and_content(author):
    with pytest.raises(ValidationError, match="Title and content are required"):
        _post(author, content="  ")


def test_create_blog_rejects_unknown_status(author):
    with pytest.raises(ValidationError):
        _post(author, status="archived")


def test_parse_tags_accepts_lists_and_strings():
    assert blogs.parse_tags(["a", " ", "b "]) == ["a", "b"]
    assert blogs.parse_tags("a,,b") == ["a", "b"]
    assert blogs.parse_tags(None) == []


def test_get_blog_counts_views(author):
    blog = _post(author)
    blogs.get_blog(blog.id)
    assert blogs.get_blog(blog.id).views == 2


def test_get_missing_blog_is_not_found():
    with pytest.raises(NotFoundError, match="Blog not found"):
        blogs.get_blog("missing")


def test_only_author_updates_or_deletes(author, make_user):
    blog = _post(author)
    stranger = make_user()

    with pytest.raises(ForbiddenError, match="Not authorized to update this blog"):
        blogs.update_blog(stranger, blog.id, {"title": "Hijacked"})
    with pytest.raises(ForbiddenError, match="Not authorized to delete this blog"):
        blogs.delete_blog(stranger, blog.id)

    updated = blogs.update_blog(author, blog.id, {"title": "Final report", "status": "published"})
    assert updated.title == "Final report"
    assert updated.status == "published"
    assert updated.content == blog.content

    blogs.delete_blog(author, blog.id)
    with pytest.raises(NotFoundError):
        blogs.get_blog(blog.id)


def test_like_toggles(author, make_user):
    blog = _post(author)
    fan = make_user()

    first = blogs.toggle_blog_like(fan, blog.id)
    assert first.liked is True and first.likes_count == 1
    assert blogs.get_blog(blog.id).likes == [fan.id]

    second = blogs.toggle_blog_like(fan, blog.id)
    assert second.liked is False and second.likes_count == 0


def test_comments_keep_insertion_order(author, make_user):
    blog = _post(author)
    fan = make_user()
    blogs.comment_on_blog(fan, blog.id, "first")
    blogs.comment_on_blog(author, blog.id, "second")

    comments = blogs.get_blog(blog.id).comments
    assert [c.content for c in comments] == ["first", "second"]
    assert comments[0].user.id == fan.id


def test_empty_comment_is_rejected(author):
    blog = _post(author)
    with pytest.raises(ValidationError, match="Comment content is required"):
        blogs.comment_on_blog(author, blog.id, "   ")


def test_list_user_blogs_filters_by_status(author, make_user):
    _post(author, status="published")
    _post(author)
    _post(make_user(), status="published")

    mine, pagination = blogs.list_user_blogs(author)
    assert pagination.total_records == 2
    published, _ = blogs.list_user_blogs(author, status="published")
    assert [b.status for b in published] == ["published"]
    assert all(b.author.id == author.id for b in mine)


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

def test_blog_endpoints(client, author, make_user, headers_for, settings):
    resp = client.post(
        "/api/blogs",
        headers=headers_for(author),
        data={"title": "Training", "content": "Drills", "tags": "drills", "status": "published"},
        files={"thumbnail": ("thumb.png", b"png", "image/png")},
    )
    assert resp.status_code == 201
    blog = resp.json()["data"]
    assert blog["thumbnail"].startswith("/uploads/blogs/")
    assert blog["likesCount"] == 0

    resp = client.get("/api/blogs")
    assert resp.status_code == 200
    assert resp.json()["data"]["pagination"]["totalRecords"] == 1

    resp = client.get("/api/blogs/user/blogs", headers=headers_for(author))
    assert resp.status_code == 200
    assert len(resp.json()["data"]["blogs"]) == 1

    fan = make_user()
    resp = client.post(f"/api/blogs/{blog['id']}/like", headers=headers_for(fan))
    assert resp.json()["data"] == {"liked": True, "likesCount": 1}

    resp = client.post(
        f"/api/blogs/{blog['id']}/comment", headers=headers_for(fan), json={"content": "Nice"}
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["content"] == "Nice"

    resp = client.get(f"/api/blogs/{blog['id']}")
    data = resp.json()["data"]
    assert data["views"] == 1
    assert data["comments"][0]["user"]["id"] == fan.id

    resp = client.delete(f"/api/blogs/{blog['id']}", headers=headers_for(fan))
    assert resp.status_code == 403

    resp = client.delete(f"/api/blogs/{blog['id']}", headers=headers_for(author))
    assert resp.status_code == 200
    assert client.get(f"/api/blogs/{blog['id']}").status_code == 404


def test_blog_thumbnail_must_be_image(client, author, headers_for):
    resp = client.post(
        "/api/blogs",
        headers=headers_for(author),
        data={"title": "Training", "content": "Drills"},
        files={"thumbnail": ("clip.mp4", b"mp4", "video/mp4")},
    )
    assert resp.status_code == 400


def test_forbidden_blog_update_leaves_no_thumbnail_on_disk(client, author, make_user, headers_for, settings):
    blog = blogs.create_blog(author, title="Training", content="Drills")
    resp = client.put(
        f"/api/blogs/{blog.id}",
        headers=headers_for(make_user()),
        data={"title": "Hijacked"},
        files={"thumbnail": ("thumb.png", b"png", "image/png")},
    )
    assert resp.status_code == 403
    assert list((settings.uploads_dir / "blogs").glob("*")) == []


def test_creating_blog_requires_auth(client):
    resp = client.post("/api/blogs", data={"title": "x", "content": "y"})
    assert resp.status_code == 401
