"""HTTP transport used by the Akismet client, with cancellation support."""

import time
import socket
import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import List, Optional, Protocol

import requests
from requests.adapters import HTTPAdapter
from urllib3 import ProxyManager
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool

from .errors import RequestCancelled, TransportError


logger = logging.getLogger(__name__)

# How often a waiting call checks its cancel event (seconds)
POLL_INTERVAL = 0.05

# Connect timeout for cancellable calls made without a deadline (seconds)
CONNECT_TIMEOUT = 10


class Transport(Protocol):
    """Anything that can send a prepared HTTP request and return the response.

    Transports that also provide `begin_call()` (see RequestsTransport) get
    their in-flight I/O aborted on cancellation. Others are only abandoned.
    """

    def send(
        self,
        request: requests.PreparedRequest,
        timeout: Optional[float] = None
    ) -> requests.Response:
        ...


class AbortableAdapter(HTTPAdapter):
    """HTTPAdapter that can shut down the sockets it has opened."""

    def __init__(self, *args, **kwargs):
        self._lock = threading.Lock()
        self._connections: List = []
        self.aborted = False
        super().__init__(*args, **kwargs)

    def init_poolmanager(self, *args, **kwargs):
        super().init_poolmanager(*args, **kwargs)
        self._track_pools(self.poolmanager)

    def proxy_manager_for(self, proxy, **proxy_kwargs):
        manager = super().proxy_manager_for(proxy, **proxy_kwargs)
        # SOCKS managers bring their own pool classes
        if isinstance(manager, ProxyManager):
            self._track_pools(manager)
        return manager

    def _track_pools(self, manager):
        manager.pool_classes_by_scheme = {
            "http": self._tracking_pool(HTTPConnectionPool),
            "https": self._tracking_pool(HTTPSConnectionPool),
        }

    def _tracking_pool(self, pool_cls):
        adapter = self

        class TrackedConnection(pool_cls.ConnectionCls):
            def connect(self):
                super().connect()
                adapter._register(self)

        return type(pool_cls.__name__, (pool_cls,), {"ConnectionCls": TrackedConnection})

    def _register(self, connection):
        with self._lock:
            self._connections.append(connection)
            if not self.aborted:
                return
        # Connected after abort() already ran
        _shutdown(connection)

    def abort(self):
        """Shut down every socket this adapter opened.

        Blocked reads return immediately and the sending thread fails with
        a connection error. The sending thread closes the connections.
        """
        with self._lock:
            self.aborted = True
            connections = list(self._connections)
        for connection in connections:
            _shutdown(connection)


def _shutdown(connection):
    sock = getattr(connection, "sock", None)
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        # Already closed by the sending thread
        pass


class AbortableCall:
    """One request on a private session whose sockets can be shut down."""

    def __init__(self, template: requests.Session):
        """
        Args:
            template: Session whose TLS and proxy settings are copied
        """
        self.adapter = AbortableAdapter()
        self.session = requests.Session()
        self.session.verify = template.verify
        self.session.cert = template.cert
        self.session.proxies = template.proxies
        self.session.trust_env = template.trust_env
        self.session.mount("http://", self.adapter)
        self.session.mount("https://", self.adapter)

    def send(
        self,
        request: requests.PreparedRequest,
        timeout=None
    ) -> requests.Response:
        try:
            return self.session.send(request, timeout=timeout)
        finally:
            self.session.close()

    def abort(self):
        self.adapter.abort()


class RequestsTransport:
    """Default transport backed by a requests.Session."""

    def __init__(self, session: Optional[requests.Session] = None):
        """
        Initialize the transport.

        Args:
            session: Session to send requests with. A new one is created
                (and owned by this transport) when omitted.
        """
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()

    def send(
        self,
        request: requests.PreparedRequest,
        timeout: Optional[float] = None
    ) -> requests.Response:
        return self.session.send(request, timeout=timeout)

    def begin_call(self) -> AbortableCall:
        """Start a cancellable call. It does not reuse pooled connections."""
        return AbortableCall(self.session)

    def close(self):
        """Close the underlying session if this transport created it."""
        if self._owns_session:
            self.session.close()


def _close_late_response(future: Future):
    """Done-callback for abandoned requests: release the connection."""
    if future.cancelled() or future.exception() is not None:
        return
    future.result().close()


def _run_in_thread(send, request, timeout) -> Future:
    """Run send() on a daemon thread so an abandoned call never blocks exit."""
    future = Future()

    def worker():
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(_send_direct(send, request, timeout))
        except BaseException as e:
            future.set_exception(e)

    threading.Thread(target=worker, name="akismet-send", daemon=True).start()
    return future


def send_request(
    transport: Transport,
    request: requests.PreparedRequest,
    timeout: Optional[float] = None,
    cancel_event: Optional[threading.Event] = None
) -> requests.Response:
    """
    Send one request through the transport.

    Without a timeout or cancel event the transport is called directly.
    Otherwise the send runs on a worker thread while this thread waits for
    the response, the deadline, or the cancel event, whichever comes first.
    On cancel or deadline the in-flight sockets are shut down when the
    transport supports `begin_call()`.

    Args:
        transport: Transport to send with
        request: Prepared request
        timeout: Deadline for the whole round trip in seconds
        cancel_event: Set by the caller to abandon the request

    Returns:
        The response (caller must close it)

    Raises:
        RequestCancelled: cancel_event was set or the deadline expired
        TransportError: The transport failed to complete the round trip
    """
    if timeout is None and cancel_event is None:
        return _send_direct(transport.send, request, timeout)

    if cancel_event is not None and cancel_event.is_set():
        raise RequestCancelled("akismet: request cancelled before it was sent")

    begin_call = getattr(transport, "begin_call", None)
    call = begin_call() if begin_call is not None else None
    if call is not None:
        send = call.send
        # Reads are ended by abort(); connect still needs a bound
        send_timeout = timeout if timeout is not None else (CONNECT_TIMEOUT, None)
    else:
        send = transport.send
        send_timeout = timeout

    deadline = None if timeout is None else time.monotonic() + timeout
    future = _run_in_thread(send, request, send_timeout)
    while True:
        try:
            return future.result(timeout=POLL_INTERVAL)
        except FutureTimeoutError:
            pass

        if cancel_event is not None and cancel_event.is_set():
            reason = "request cancelled"
        elif deadline is not None and time.monotonic() >= deadline:
            reason = f"deadline of {timeout}s exceeded"
        else:
            continue

        # Stop waiting; whatever arrives later gets closed
        future.add_done_callback(_close_late_response)
        if call is not None:
            call.abort()
        logger.warning("Abandoning request to %s: %s", request.url, reason)
        raise RequestCancelled(f"akismet: {reason}")


def _send_direct(send, request: requests.PreparedRequest, timeout) -> requests.Response:
    try:
        return send(request, timeout=timeout)
    except (requests.exceptions.RequestException, OSError) as e:
        logger.error("Request to %s failed: %s", request.url, str(e))
        raise TransportError(f"akismet: request failed: {e}", cause=e) from e
