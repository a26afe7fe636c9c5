"""Content records sent to Akismet and their form encoding."""

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple, Union
from urllib.parse import urlencode


class CommentType(str, Enum):
    """Kind of content being checked. Sent as the `comment_type` field."""

    COMMENT = "comment"              # blog comment
    FORUM_POST = "forum-post"        # top-level forum post
    REPLY = "reply"                  # reply to a top-level forum post
    BLOG_POST = "blog-post"
    CONTACT_FORM = "contact-form"    # contact or feedback form submission
    SIGNUP = "signup"                # new user account
    MESSAGE = "message"              # message sent between just a few users

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Result:
    """Outcome of a comment-check call."""

    spam: bool


@dataclass
class Comment:
    """
    A piece of content submitted for classification or feedback.

    Every field is optional. Fields left at their zero value ("", False
    or None) are not sent, except `blog` and `user_ip` which the service
    always expects.

    Attributes:
        blog: Front page or home URL of the site, including http://
        user_ip: IP address of the content submitter
        user_agent: Browser user agent of the submitter (not this library's)
        referrer: Content of the HTTP_REFERER header
        permalink: Full permanent URL of the entry the comment was posted to
        comment_type: A CommentType or any other tag string
        comment_author: Name submitted with the comment
        comment_author_email: Email address submitted with the comment
        comment_author_url: URL manually entered by the submitter
        comment_content: The content that was submitted
        comment_date: Creation time of the comment
        comment_post_modified: Publication time of the post being commented on
        blog_lang: Languages of the site in ISO 639-1, comma-separated
        blog_charset: Character encoding of the comment_* values
        user_role: Role of the submitter; "administrator" is never spam
        is_test: Mark the request as a test query
        recheck_reason: Why the content is being re-checked
        honeypot_field_name: Name of a hidden form field used as a honeypot
    """

    blog: str = ""
    user_ip: str = ""
    user_agent: str = ""
    referrer: str = ""
    permalink: str = ""
    comment_type: Union[CommentType, str] = ""
    comment_author: str = ""
    comment_author_email: str = ""
    comment_author_url: str = ""
    comment_content: str = ""
    comment_date: Optional[datetime] = None
    comment_post_modified: Optional[datetime] = None
    blog_lang: str = ""
    blog_charset: str = ""
    user_role: str = ""
    is_test: bool = False
    recheck_reason: str = ""
    honeypot_field_name: str = ""


# Attribute name -> wire name, where they differ
WIRE_NAMES = {
    "comment_date": "comment_date_gmt",
    "comment_post_modified": "comment_post_modified_gmt",
}

# Sent even when empty
ALWAYS_SENT = ("blog", "user_ip")


def format_timestamp(value: datetime) -> str:
    """
    Format a datetime as RFC 3339 in UTC with second precision.

    Naive datetimes are assumed to already be in UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="seconds") + "Z"


def _encode_value(value) -> Optional[str]:
    """Convert a field value to its wire string, or None if it is unset."""
    if isinstance(value, datetime):
        return format_timestamp(value)
    if not value:
        return None
    if isinstance(value, bool):
        return "1"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def build_comment_form(api_key: str, comment: Comment) -> List[Tuple[str, str]]:
    """
    Build the form fields for comment-check, submit-ham and submit-spam.

    Args:
        api_key: Akismet API key
        comment: Content record

    Returns:
        (name, value) pairs sorted by name
    """
    form = {"api_key": api_key}
    for field in fields(comment):
        value = getattr(comment, field.name)
        encoded = _encode_value(value)
        if encoded is None:
            if field.name not in ALWAYS_SENT:
                continue
            encoded = ""
        form[WIRE_NAMES.get(field.name, field.name)] = encoded
    return sorted(form.items())


def build_verify_form(api_key: str, blog: str) -> List[Tuple[str, str]]:
    """Build the form fields for verify-key."""
    return sorted({"api_key": api_key, "blog": blog}.items())


def encode_form(pairs: List[Tuple[str, str]]) -> str:
    """Encode form pairs as application/x-www-form-urlencoded, sorted by key."""
    return urlencode(sorted(pairs))
