import pytest

from blogcms.utils.exceptions import InvalidInput
from blogcms.utils.validation import (
    is_valid_email,
    is_valid_url,
    sanitize_html,
    validate_category,
    validate_comment,
    validate_login,
    validate_post,
    validate_post_update,
    validate_registration,
    validate_tag,
)

GOOD_USER = {"name": "Ann", "email": "ann@example.com", "password": "secret1", "role": None}


def test_email_and_url_checks():
    assert is_valid_email("ann@example.com")
    assert not is_valid_email("ann@")
    assert not is_valid_email(None)
    assert is_valid_url("https://cdn.example.com/a.png")
    assert not is_valid_url("javascript:alert(1)")
    assert not is_valid_url("/relative/path.png")


def test_valid_registration_passes():
    validate_registration(GOOD_USER)
    validate_registration({**GOOD_USER, "role": "author"})


@pytest.mark.parametrize(
    "override, message",
    [
        ({"name": "  "}, "Name is required"),
        ({"name": "x" * 101}, "Name must be less than 100 characters"),
        ({"email": "not-an-email"}, "Valid email is required"),
        ({"password": "12345"}, "Password must be at least 6 characters long"),
        ({"role": "superuser"}, "Invalid role specified"),
    ],
)
def test_registration_errors(override, message):
    with pytest.raises(InvalidInput) as exc_info:
        validate_registration({**GOOD_USER, **override})
    assert exc_info.value.detail == message


def test_login_requires_email_and_password():
    with pytest.raises(InvalidInput, match="Valid email is required"):
        validate_login({"email": "", "password": "x"})
    with pytest.raises(InvalidInput, match="Password is required"):
        validate_login({"email": "ann@example.com", "password": ""})


@pytest.mark.parametrize(
    "data, message",
    [
        ({"content": "Body"}, "Title is required"),
        ({"title": "T"}, "Content is required"),
        ({"title": "x" * 201, "content": "Body"}, "Title must be less than 200 characters"),
        ({"title": "T", "content": "B", "excerpt": "e" * 301}, "Excerpt must be less than 300 characters"),
        ({"title": "T", "content": "B", "status": "archived"}, 'Invalid status. Must be "draft" or "published"'),
        ({"title": "T", "content": "B", "featured_image": "ftp://x/y.png"}, "Featured image must be a valid http(s) URL"),
    ],
)
def test_post_errors(data, message):
    with pytest.raises(InvalidInput) as exc_info:
        validate_post(data)
    assert exc_info.value.detail == message


def test_post_update_checks_only_given_fields():
    validate_post_update({})
    validate_post_update({"status": "published"})

    with pytest.raises(InvalidInput, match="Title is required"):
        validate_post_update({"title": ""})


def test_taxonomy_and_comment_limits():
    validate_category({"name": "News", "description": None})
    validate_tag({"name": "python"})
    validate_comment({"content": "Nice post"})

    with pytest.raises(InvalidInput):
        validate_category({"name": "News", "description": "d" * 501})
    with pytest.raises(InvalidInput):
        validate_tag({"name": "t" * 51})
    with pytest.raises(InvalidInput, match="Comment content is required"):
        validate_comment({"content": "   "})
    with pytest.raises(InvalidInput):
        validate_comment({"content": "c" * 1001})


def test_sanitize_html_strips_scripts_and_handlers():
    dirty = (
        '<p onclick="steal()">Hi <strong>there</strong></p>'
        "<script>alert(1)</script>"
        '<a href="javascript:alert(1)">x</a>'
    )

    clean = sanitize_html(dirty)

    assert "<script" not in clean
    assert "onclick" not in clean
    assert "javascript:" not in clean
    assert "<strong>there</strong>" in clean


def test_sanitize_html_keeps_allowed_markup():
    html = '<h2>Title</h2><p><a href="https://example.com">link</a></p>'

    assert sanitize_html(html) == html
    assert sanitize_html(None) == ""
