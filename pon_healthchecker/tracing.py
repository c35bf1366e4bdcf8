#!/usr/bin/env python3
"""
Request Phase Tracing
Connection-lifecycle hooks for requests/urllib3: DNS, connect and first byte
"""

import contextvars
import ipaddress
import logging
import socket
import time
from contextlib import contextmanager
from typing import Callable, Optional

from requests.adapters import HTTPAdapter
from urllib3.connection import HTTPConnection, HTTPSConnection
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool
from urllib3.exceptions import ConnectTimeoutError, NewConnectionError

from .utils import elapsed_ms

logger = logging.getLogger(__name__)

_current_trace: contextvars.ContextVar = contextvars.ContextVar("pon_healthchecker_trace", default=None)


class PhaseTrace:
    """
    Phase timings of one request, in whole milliseconds.

    A "done" hook only records a duration when its "start" hook fired before
    it. Phases that are skipped (pooled connection, IP literal host) or that
    fail keep their zero value.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        self.clock = clock
        self.started_at: Optional[float] = None
        self._dns_started: Optional[float] = None
        self._connect_started: Optional[float] = None

        self.dns_ms = 0.0
        self.connect_ms = 0.0
        self.first_byte_ms = 0.0

    def begin(self) -> None:
        self.started_at = self.clock()

    def dns_start(self) -> None:
        self._dns_started = self.clock()

    def dns_done(self) -> None:
        if self._dns_started is not None:
            self.dns_ms = elapsed_ms(self._dns_started, self.clock())

    def connect_start(self) -> None:
        self._connect_started = self.clock()

    def connect_done(self) -> None:
        if self._connect_started is not None:
            self.connect_ms = elapsed_ms(self._connect_started, self.clock())

    def got_first_response_byte(self) -> None:
        if self.started_at is not None:
            self.first_byte_ms = elapsed_ms(self.started_at, self.clock())

    def total_ms(self) -> float:
        if self.started_at is None:
            return 0.0
        return elapsed_ms(self.started_at, self.clock())


def current_trace() -> Optional[PhaseTrace]:
    return _current_trace.get()


@contextmanager
def activate(trace: PhaseTrace):
    """Route connection hooks fired on this thread to ``trace``"""
    token = _current_trace.set(trace)
    try:
        yield trace
    finally:
        _current_trace.reset(token)


def _is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


class TracedConnectionMixin:
    """Replaces urllib3's socket setup so DNS and TCP connect can be timed separately"""

    def _new_conn(self):
        trace = current_trace()
        if trace is None:
            return super()._new_conn()

        try:
            return self._traced_create_connection(trace)
        except socket.timeout as e:
            raise ConnectTimeoutError(
                self, f"Connection to {self.host} timed out. (connect timeout={self.timeout})"
            ) from e
        except OSError as e:
            raise NewConnectionError(self, f"Failed to establish a new connection: {e}") from e

    def _traced_create_connection(self, trace: PhaseTrace) -> socket.socket:
        host = self._dns_host
        if host.startswith("["):
            host = host.strip("[]")

        if _is_ip_literal(host):
            addresses = socket.getaddrinfo(host, self.port, 0, socket.SOCK_STREAM)
        else:
            trace.dns_start()
            addresses = socket.getaddrinfo(host, self.port, 0, socket.SOCK_STREAM)
            trace.dns_done()

        error = None
        for family, socktype, proto, _, address in addresses:
            sock = None
            trace.connect_start()
            try:
                sock = socket.socket(family, socktype, proto)
                for option in self.socket_options or ():
                    sock.setsockopt(*option)
                if isinstance(self.timeout, (int, float)):
                    sock.settimeout(self.timeout)
                if self.source_address:
                    sock.bind(self.source_address)
                sock.connect(address)
            except OSError as e:
                error = e
                if sock is not None:
                    sock.close()
                logger.debug(f"Connect to {address} failed: {e}")
                continue

            trace.connect_done()
            return sock

        if error is not None:
            raise error
        raise OSError("getaddrinfo returns an empty list")

    def getresponse(self, *args, **kwargs):
        response = super().getresponse(*args, **kwargs)
        trace = current_trace()
        if trace is not None:
            trace.got_first_response_byte()
        return response


class TracedHTTPConnection(TracedConnectionMixin, HTTPConnection):
    pass


class TracedHTTPSConnection(TracedConnectionMixin, HTTPSConnection):
    pass


class TracedHTTPConnectionPool(HTTPConnectionPool):
    ConnectionCls = TracedHTTPConnection


class TracedHTTPSConnectionPool(HTTPSConnectionPool):
    ConnectionCls = TracedHTTPSConnection


class TracingAdapter(HTTPAdapter):
    """HTTPAdapter whose connection pools fire the active PhaseTrace hooks"""

    def init_poolmanager(self, *args, **kwargs):
        super().init_poolmanager(*args, **kwargs)
        self.poolmanager.pool_classes_by_scheme = {
            "http": TracedHTTPConnectionPool,
            "https": TracedHTTPSConnectionPool,
        }
