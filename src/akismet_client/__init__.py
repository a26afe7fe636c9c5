"""Akismet API client.

Verify API keys, classify content as spam or ham, and report false
positives and false negatives back to Akismet.
"""

from .client import AkismetClient, resolve_url
from .comment import Comment, CommentType, Result
from .config import Config
from .errors import (
    AkismetError,
    ConfigurationError,
    InvalidKeyError,
    RequestCancelled,
    ServerError,
    TransportError,
    UnexpectedStatusError,
)
from .transport import RequestsTransport, Transport
from .version import VERSION

__version__ = VERSION

__all__ = [
    # Client
    "AkismetClient",
    "Config",
    "resolve_url",
    # Records
    "Comment",
    "CommentType",
    "Result",
    # Transport
    "Transport",
    "RequestsTransport",
    # Errors
    "AkismetError",
    "ConfigurationError",
    "TransportError",
    "RequestCancelled",
    "UnexpectedStatusError",
    "InvalidKeyError",
    "ServerError",
]
