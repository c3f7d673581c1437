import pytest

from blogcms.models import Comment, Post, PostTag
from blogcms.services.post_services import create_post_for_user, update_post_for_user
from blogcms.utils.exceptions import InvalidInput


@pytest.fixture
def author(make_user):
    return make_user(role="author", name="Author")


def create(client, headers, **fields):
    payload = {"title": "Hello World", "content": "<p>Body</p>"}
    payload.update(fields)
    return client.post("/api/posts", json=payload, headers=headers)


# ========
# Создание
# ========

def test_register_login_create_flow(client):
    client.post(
        "/api/auth/register",
        json={"name": "Ann", "email": "ann@example.com", "password": "secret123", "role": "author"},
    )
    token = client.post(
        "/api/auth/login",
        json={"email": "ann@example.com", "password": "secret123"},
    ).json()["token"]
    headers = {"Authorization": f"Bearer {token}"}

    first = create(client, headers)
    second = create(client, headers)

    assert first.status_code == 201
    assert first.json()["message"] == "Post created successfully"
    assert first.json()["data"]["slug"] == "hello-world"
    assert second.json()["data"]["slug"] == "hello-world-1"


def test_new_post_defaults_to_draft(client, author, auth_headers):
    data = create(client, auth_headers(author)).json()["data"]

    assert data["status"] == "draft"
    assert data["published_at"] is None
    assert data["author"]["name"] == "Author"


def test_published_post_gets_published_at(client, author, auth_headers):
    data = create(client, auth_headers(author), status="published").json()["data"]

    assert data["status"] == "published"
    assert data["published_at"] is not None


def test_reader_and_anonymous_cannot_create(client, make_user, auth_headers):
    reader = make_user(role="reader")

    assert create(client, auth_headers(reader)).status_code == 401
    assert create(client, {}).status_code == 401
    assert create(client, {"Authorization": "Bearer nope"}).status_code == 401


def test_create_validation(client, author, auth_headers):
    headers = auth_headers(author)

    missing_title = create(client, headers, title="")
    bad_category = create(client, headers, category_id=999)
    bad_tags = create(client, headers, tags=[42])
    bad_type = create(client, headers, category_id="abc")

    assert missing_title.status_code == 400
    assert missing_title.json()["error"] == "Title is required"
    assert bad_category.json()["error"] == "Category not found"
    assert bad_tags.json()["error"] == "Unknown tag id(s): 42"
    assert bad_type.status_code == 400
    assert bad_type.json()["code"] == "validation_error"


def test_content_is_sanitized(client, author, auth_headers):
    data = create(
        client,
        auth_headers(author),
        content='<p>ok</p><script>alert("x")</script>',
    ).json()["data"]

    assert "<script" not in data["content"]
    assert "<p>ok</p>" in data["content"]


def test_create_with_category_and_tags(client, author, auth_headers, make_category, make_tag):
    news = make_category("News")
    python = make_tag("python")
    web = make_tag("web")

    data = create(
        client,
        auth_headers(author),
        category_id=news.id,
        tags=[web.id, python.id, web.id],
    ).json()["data"]

    assert data["category"]["slug"] == "news"
    assert [t["name"] for t in data["tags"]] == ["python", "web"]


def test_symbols_only_title_is_rejected(db, author):
    with pytest.raises(InvalidInput):
        create_post_for_user(db, author.id, {"title": "!!!", "content": "Body"})


# ======
# Чтение
# ======

def test_get_published_post_by_slug(client, author, make_post):
    make_post(author, slug="visible")

    response = client.get("/api/posts/visible")

    assert response.status_code == 200
    assert response.json()["data"]["author"]["id"] == author.id


def test_draft_is_hidden_from_others(client, author, make_user, make_post, auth_headers):
    make_post(author, slug="secret", status="draft")
    stranger = make_user(role="author")
    admin = make_user(role="admin")

    assert client.get("/api/posts/secret").status_code == 404
    assert client.get("/api/posts/secret", headers=auth_headers(stranger)).status_code == 404
    assert client.get("/api/posts/secret", headers=auth_headers(author)).status_code == 200
    assert client.get("/api/posts/secret", headers=auth_headers(admin)).status_code == 200


def test_unknown_slug_is_404(client):
    response = client.get("/api/posts/nothing-here")

    assert response.status_code == 404
    assert response.json()["error"] == "Post not found"


def test_public_list_shows_only_published(client, author, make_post):
    make_post(author, title="Out", status="published")
    make_post(author, title="Hidden", status="draft")

    body = client.get("/api/posts").json()

    assert body["count"] == 1
    assert [p["title"] for p in body["data"]] == ["Out"]


def test_public_list_filters(client, author, make_post, make_category, make_tag):
    news = make_category("News")
    python = make_tag("python")
    make_post(author, title="Snake news", category=news, tags=[python])
    make_post(author, title="Other news", category=news)
    make_post(author, title="Loose", content="Python everywhere")

    by_category = client.get("/api/posts", params={"category": "news"}).json()
    by_tag = client.get("/api/posts", params={"tag": "python"}).json()
    by_search = client.get("/api/posts", params={"search": "PYTHON"}).json()

    assert {p["title"] for p in by_category["data"]} == {"Snake news", "Other news"}
    assert [p["title"] for p in by_tag["data"]] == ["Snake news"]
    assert [p["title"] for p in by_search["data"]] == ["Loose"]


def test_unknown_category_applies_no_filter(client, author, make_post, make_category):
    make_post(author, title="In news", category=make_category("News"))
    make_post(author, title="Uncategorized")

    body = client.get("/api/posts", params={"category": "ghost"}).json()

    assert body["count"] == 2
    assert {p["title"] for p in body["data"]} == {"In news", "Uncategorized"}


def test_search_keeps_surrounding_spaces(client, author, make_post):
    make_post(author, title="Techno")
    make_post(author, title="Ambient techno mix")

    spaced = client.get("/api/posts", params={"search": " techno"}).json()
    blank = client.get("/api/posts", params={"search": "   "}).json()

    assert [p["title"] for p in spaced["data"]] == ["Ambient techno mix"]
    assert blank["count"] == 2


# ==========
# Обновление
# ==========

def test_title_change_reslugs(client, author, make_post, auth_headers):
    make_post(author, title="Old", slug="old")
    make_post(author, title="Taken", slug="new-title")

    response = client.put(
        "/api/posts/old", json={"title": "New Title"}, headers=auth_headers(author)
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Post updated successfully"
    assert response.json()["data"]["slug"] == "new-title-1"
    assert client.get("/api/posts/old").status_code == 404


def test_same_title_keeps_slug(client, author, make_post, auth_headers):
    make_post(author, title="Stable", slug="stable")

    data = client.put(
        "/api/posts/stable",
        json={"title": "Stable", "excerpt": "Short"},
        headers=auth_headers(author),
    ).json()["data"]

    assert data["slug"] == "stable"
    assert data["excerpt"] == "Short"


def test_only_owner_or_admin_can_update(client, author, make_user, make_post, auth_headers):
    make_post(author, slug="mine")
    other = make_user(role="author")
    admin = make_user(role="admin")

    forbidden = client.put("/api/posts/mine", json={"excerpt": "x"}, headers=auth_headers(other))
    by_admin = client.put("/api/posts/mine", json={"excerpt": "y"}, headers=auth_headers(admin))
    missing = client.put("/api/posts/ghost", json={"excerpt": "z"}, headers=auth_headers(admin))

    assert forbidden.status_code == 401
    assert by_admin.status_code == 200
    assert by_admin.json()["data"]["excerpt"] == "y"
    assert missing.status_code == 404


def test_published_at_set_once(client, author, make_post, auth_headers):
    make_post(author, slug="draft", status="draft")
    headers = auth_headers(author)

    published = client.put(
        "/api/posts/draft", json={"status": "published"}, headers=headers
    ).json()["data"]
    edited = client.put(
        "/api/posts/draft", json={"content": "New body", "status": "published"}, headers=headers
    ).json()["data"]

    assert published["published_at"] is not None
    assert edited["published_at"] == published["published_at"]
    assert edited["content"] == "New body"


def test_back_to_draft_clears_published_at(db, author, make_post):
    post = make_post(author, status="published")

    updated = update_post_for_user(db, post, {"status": "draft"})

    assert updated.status == "draft"
    assert updated.published_at is None


def test_tags_are_replaced(db, author, make_post, make_tag):
    a, b, c = make_tag("a"), make_tag("b"), make_tag("c")
    post = make_post(author, tags=[a, b])

    updated = update_post_for_user(db, post, {"tags": [b.id, c.id, c.id]})

    assert [t.name for t in updated.tags] == ["b", "c"]
    assert db.query(PostTag).filter(PostTag.post_id == post.id).count() == 2


def test_tags_untouched_when_not_given(db, author, make_post, make_tag):
    post = make_post(author, tags=[make_tag("keep")])

    updated = update_post_for_user(db, post, {"excerpt": "e"})

    assert [t.name for t in updated.tags] == ["keep"]


def test_unknown_tag_on_update_changes_nothing(db, author, make_post, make_tag):
    post = make_post(author, title="Same", tags=[make_tag("keep")])

    with pytest.raises(InvalidInput):
        update_post_for_user(db, post, {"title": "Changed", "tags": [999]})
    db.rollback()

    reloaded = db.get(Post, post.id)
    assert reloaded.title == "Same"
    assert [t.name for t in reloaded.tags] == ["keep"]


# ========
# Удаление
# ========

def test_delete_removes_tags_and_comments(client, db, author, make_user, make_post, make_tag, auth_headers):
    post = make_post(author, slug="doomed", tags=[make_tag("t")])
    reader = make_user(role="reader")
    db.add(Comment(post_id=post.id, user_id=reader.id, content="bye"))
    db.commit()

    response = client.delete("/api/posts/doomed", headers=auth_headers(author))

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Post deleted successfully"}
    assert db.query(Post).count() == 0
    assert db.query(PostTag).count() == 0
    assert db.query(Comment).count() == 0
    assert client.get("/api/posts/doomed").status_code == 404


def test_delete_requires_owner_or_admin(client, author, make_user, make_post, auth_headers):
    make_post(author, slug="keep")
    other = make_user(role="author")

    assert client.delete("/api/posts/keep").status_code == 401
    assert client.delete("/api/posts/keep", headers=auth_headers(other)).status_code == 401
    assert client.get("/api/posts/keep").status_code == 200
