"""Akismet API client: endpoint resolution, submission and response handling."""

import logging
import threading
from typing import List, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

import requests
from requests.structures import CaseInsensitiveDict

from .comment import (
    Comment,
    Result,
    build_comment_form,
    build_verify_form,
    encode_form,
)
from .errors import (
    ConfigurationError,
    InvalidKeyError,
    ServerError,
    UnexpectedStatusError,
)
from .transport import RequestsTransport, Transport, send_request
from .version import default_user_agent


logger = logging.getLogger(__name__)

# Diagnostic header the service adds to some comment-check answers
DEBUG_HELP_HEADER = "X-akismet-debug-help"


def resolve_url(base_url: str, path: str) -> str:
    """Join base_url and path with exactly one "/" between them."""
    try:
        parts = urlsplit(base_url)
        # Both raise ValueError for malformed hosts and ports
        hostname = parts.hostname
        parts.port
    except ValueError as e:
        raise ConfigurationError(f"akismet: invalid base url {base_url!r}: {e}") from e

    if parts.scheme not in ("http", "https") or not hostname:
        raise ConfigurationError(f"akismet: invalid base url {base_url!r}")

    joined = parts.path.rstrip("/") + "/" + path.lstrip("/")
    return urlunsplit((parts.scheme, parts.netloc, joined, parts.query, ""))


class AkismetClient:
    """Client for the Akismet spam detection API.

    The client keeps no per-call state, so one instance can be shared
    between threads.
    """

    DEFAULT_BASE_URL = "https://rest.akismet.com/1.1/"

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        transport: Optional[Transport] = None
    ):
        """
        Initialize Akismet API client.

        Args:
            api_key: Akismet API key
            base_url: API endpoint including the version path
                (default: https://rest.akismet.com/1.1/)
            user_agent: User-Agent header for requests
                (default: akismet-client/<version>)
            transport: Object used to send HTTP requests
                (default: RequestsTransport)
        """
        self.api_key = api_key
        self.base_url = base_url or self.DEFAULT_BASE_URL
        self.user_agent = user_agent or default_user_agent()
        self._owns_transport = transport is None
        self.transport = transport if transport is not None else RequestsTransport()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        """Release the default transport. Injected transports are left open."""
        if self._owns_transport:
            self.transport.close()

    def resolve_path(self, path: str) -> str:
        """
        Join the base URL and an operation path.

        Args:
            path: Operation path relative to the base URL (e.g. "verify-key")

        Returns:
            Absolute request URL

        Raises:
            ConfigurationError: If the base URL is not a valid http(s) URL
        """
        return resolve_url(self.base_url, path)

    def _post(
        self,
        path: str,
        form: List[Tuple[str, str]],
        timeout: Optional[float],
        cancel_event: Optional[threading.Event]
    ) -> Tuple[int, str, CaseInsensitiveDict]:
        """
        POST a form to an operation path and read the whole response.

        Returns:
            (status code, stripped body text, response headers)
        """
        url = self.resolve_path(path)
        request = requests.Request(
            method="POST",
            url=url,
            data=encode_form(form).encode("utf-8"),
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "User-Agent": self.user_agent,
            },
        ).prepare()

        logger.debug("POST %s", url)
        response = send_request(
            self.transport,
            request,
            timeout=timeout,
            cancel_event=cancel_event
        )
        try:
            body = response.content.decode("utf-8", errors="replace").strip()
            logger.debug("%s answered %d", path, response.status_code)
            return response.status_code, body, response.headers
        finally:
            response.close()

    @staticmethod
    def _check_status(path: str, status_code: int, body: str):
        if status_code != 200:
            logger.warning("%s returned unexpected status %d", path, status_code)
            raise UnexpectedStatusError(status_code, body)

    def verify_key(
        self,
        blog: str,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None
    ):
        """
        Verify that the API key is valid.

        Args:
            blog: Front page URL of the site using the key
            timeout: Deadline for the round trip in seconds
            cancel_event: Set to abandon the request

        Raises:
            InvalidKeyError: The service rejected the key
            UnexpectedStatusError: Non-200 status
            TransportError: The request could not be completed
        """
        status_code, body, _ = self._post(
            "verify-key",
            build_verify_form(self.api_key, blog),
            timeout,
            cancel_event
        )
        self._check_status("verify-key", status_code, body)
        if body != "valid":
            raise InvalidKeyError(body)

    def check_comment(
        self,
        comment: Comment,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> Result:
        """
        Ask Akismet whether a comment is spam.

        Args:
            comment: Content to classify
            timeout: Deadline for the round trip in seconds
            cancel_event: Set to abandon the request

        Returns:
            Result with spam=True or spam=False

        Raises:
            ServerError: The service answered with a diagnostic message
            UnexpectedStatusError: Non-200 status
            TransportError: The request could not be completed
        """
        status_code, body, headers = self._post(
            "comment-check",
            build_comment_form(self.api_key, comment),
            timeout,
            cancel_event
        )
        self._check_status("comment-check", status_code, body)
        if body == "true":
            return Result(spam=True)
        if body == "false":
            return Result(spam=False)

        # The service reports some errors as a 200 with a text body
        raise ServerError(body, debug_help=headers.get(DEBUG_HELP_HEADER))

    def submit_ham(
        self,
        comment: Comment,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None
    ):
        """Report a false positive: content that was wrongly marked as spam."""
        self._submit("submit-ham", comment, timeout, cancel_event)

    def submit_spam(
        self,
        comment: Comment,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None
    ):
        """Report a false negative: spam that was not caught."""
        self._submit("submit-spam", comment, timeout, cancel_event)

    def _submit(
        self,
        path: str,
        comment: Comment,
        timeout: Optional[float],
        cancel_event: Optional[threading.Event]
    ):
        # Acknowledgement text is discarded
        status_code, body, _ = self._post(
            path,
            build_comment_form(self.api_key, comment),
            timeout,
            cancel_event
        )
        self._check_status(path, status_code, body)
