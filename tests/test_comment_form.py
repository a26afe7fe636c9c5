"""Unit tests for content records and form encoding."""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from datetime import datetime, timedelta, timezone

from akismet_client.comment import (
    Comment,
    CommentType,
    build_comment_form,
    build_verify_form,
    encode_form,
    format_timestamp,
)


@pytest.fixture
def full_comment():
    """A comment with every field set."""
    return Comment(
        blog="https://example.com",
        user_ip="192.0.2.1",
        user_agent="Mozilla/5.0",
        referrer="https://www.google.com/",
        permalink="https://example.com/posts/1",
        comment_type=CommentType.FORUM_POST,
        comment_author="Jane Doe",
        comment_author_email="jane@example.com",
        comment_author_url="https://jane.example.com",
        comment_content="Nice post!",
        comment_date=datetime.fromtimestamp(1234567890, tz=timezone.utc),
        comment_post_modified=datetime.fromtimestamp(1234567000, tz=timezone.utc),
        blog_lang="en, fr_ca",
        blog_charset="UTF-8",
        user_role="subscriber",
        is_test=True,
        recheck_reason="edit",
        honeypot_field_name="hidden_field",
    )


class TestBuildCommentForm:
    """Test which fields end up in the form."""

    def test_minimal_comment(self):
        """Test that only api_key, blog and user_ip are sent for a bare record."""
        comment = Comment(blog="http://example.com", user_ip="192.0.2.1")

        body = encode_form(build_comment_form("very-secret", comment))

        assert body == "api_key=very-secret&blog=http%3A%2F%2Fexample.com&user_ip=192.0.2.1"

    def test_empty_comment_keeps_required_fields(self):
        """Test that blog and user_ip are sent even when empty."""
        body = encode_form(build_comment_form("k", Comment()))

        assert body == "api_key=k&blog=&user_ip="

    def test_is_test_encodes_as_one(self):
        """Test that is_test=True becomes is_test=1."""
        comment = Comment(blog="b", user_ip="ip", is_test=True)

        form = build_comment_form("k", comment)

        assert ("is_test", "1") in form
        assert "is_test=1" in encode_form(form)

    def test_false_and_empty_fields_are_omitted(self):
        """Test that zero values never reach the wire."""
        comment = Comment(blog="b", user_ip="ip", is_test=False, comment_author="")

        names = [name for name, _ in build_comment_form("k", comment)]

        assert names == ["api_key", "blog", "user_ip"]

    def test_all_fields(self, full_comment):
        """Test wire names when every field is set."""
        form = dict(build_comment_form("k", full_comment))

        assert set(form) == {
            "api_key", "blog", "user_ip", "user_agent", "referrer",
            "permalink", "comment_type", "comment_author",
            "comment_author_email", "comment_author_url", "comment_content",
            "comment_date_gmt", "comment_post_modified_gmt", "blog_lang",
            "blog_charset", "user_role", "is_test", "recheck_reason",
            "honeypot_field_name",
        }
        assert form["comment_type"] == "forum-post"
        assert form["comment_date_gmt"] == "2009-02-13T23:31:30Z"
        assert form["blog_lang"] == "en, fr_ca"

    def test_fields_are_sorted(self, full_comment):
        """Test that pairs come out in alphabetical key order."""
        names = [name for name, _ in build_comment_form("k", full_comment)]

        assert names == sorted(names)

    def test_encoding_is_deterministic(self, full_comment):
        """Test that the same record always produces the same body."""
        first = encode_form(build_comment_form("k", full_comment))
        second = encode_form(build_comment_form("k", full_comment))

        assert first == second

    @pytest.mark.parametrize("is_test", [0, False, None])
    def test_falsy_is_test_is_omitted(self, is_test):
        """Test that any falsy is_test value leaves the field out."""
        comment = Comment(blog="b", user_ip="ip", is_test=is_test)

        assert "is_test" not in dict(build_comment_form("k", comment))

    def test_truthy_int_is_test(self):
        comment = Comment(blog="b", user_ip="ip", is_test=1)

        assert dict(build_comment_form("k", comment))["is_test"] == "1"

    def test_plain_string_comment_type(self):
        """Test that a custom tag string is sent verbatim."""
        comment = Comment(blog="b", user_ip="ip", comment_type="trackback")

        assert ("comment_type", "trackback") in build_comment_form("k", comment)

    def test_form_urlencoding(self):
        """Test escaping of spaces and reserved characters."""
        comment = Comment(blog="b", user_ip="ip", comment_content="hello world & more")

        body = encode_form(build_comment_form("k", comment))

        assert "comment_content=hello+world+%26+more" in body


class TestVerifyForm:
    """Test the verify-key form."""

    def test_only_key_and_blog(self):
        """Test that verify-key sends api_key and blog only."""
        form = build_verify_form("very-secret", "http://example.com")

        assert form == [("api_key", "very-secret"), ("blog", "http://example.com")]
        assert encode_form(form) == "api_key=very-secret&blog=http%3A%2F%2Fexample.com"


class TestFormatTimestamp:
    """Test RFC 3339 timestamp formatting."""

    def test_utc(self):
        value = datetime.fromtimestamp(1234567890, tz=timezone.utc)
        assert format_timestamp(value) == "2009-02-13T23:31:30Z"

    def test_converts_offset_to_utc(self):
        """Test that aware datetimes are converted to UTC."""
        tokyo = timezone(timedelta(hours=9))
        value = datetime(2009, 2, 14, 8, 31, 30, tzinfo=tokyo)

        assert format_timestamp(value) == "2009-02-13T23:31:30Z"

    def test_naive_is_utc(self):
        """Test that naive datetimes are treated as UTC."""
        assert format_timestamp(datetime(2009, 2, 13, 23, 31, 30)) == "2009-02-13T23:31:30Z"

    def test_drops_microseconds(self):
        value = datetime(2009, 2, 13, 23, 31, 30, 999999, tzinfo=timezone.utc)
        assert format_timestamp(value) == "2009-02-13T23:31:30Z"

    def test_pads_year_to_four_digits(self):
        """Test that years below 1000 are zero-padded."""
        value = datetime(999, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

        assert format_timestamp(value) == "0999-01-02T03:04:05Z"


class TestCommentType:
    """Test the content category enumeration."""

    @pytest.mark.parametrize("member,value", [
        (CommentType.COMMENT, "comment"),
        (CommentType.FORUM_POST, "forum-post"),
        (CommentType.REPLY, "reply"),
        (CommentType.BLOG_POST, "blog-post"),
        (CommentType.CONTACT_FORM, "contact-form"),
        (CommentType.SIGNUP, "signup"),
        (CommentType.MESSAGE, "message"),
    ])
    def test_wire_values(self, member, value):
        """Test that each category is sent as its lowercase hyphenated tag."""
        comment = Comment(comment_type=member)

        assert dict(build_comment_form("k", comment))["comment_type"] == value
        assert CommentType(value) is member
