"""Exception types raised by the Akismet client."""

from typing import Optional


class AkismetError(Exception):
    """Base class for every error raised by this library."""


class ConfigurationError(AkismetError):
    """Client configuration is unusable (e.g. malformed base URL).

    Raised before any network I/O takes place.
    """


class TransportError(AkismetError):
    """The HTTP round trip itself failed.

    Attributes:
        cause: Underlying exception from the transport (may be None)
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class RequestCancelled(TransportError):
    """The caller cancelled the request or its deadline expired."""


class UnexpectedStatusError(AkismetError):
    """The service answered with a status other than 200."""

    def __init__(self, status_code: int, body: str = ""):
        super().__init__(f"akismet: unexpected status code: {status_code}")
        self.status_code = status_code
        self.body = body


class InvalidKeyError(AkismetError):
    """verify-key answered 200 but did not accept the key."""

    def __init__(self, message: str):
        super().__init__(f"akismet: your api key is {message}")
        self.message = message


class ServerError(AkismetError):
    """comment-check answered 200 with a diagnostic instead of true/false."""

    def __init__(self, message: str, debug_help: Optional[str] = None):
        super().__init__(f"akismet: error from the server: {message}")
        self.message = message
        self.debug_help = debug_help
