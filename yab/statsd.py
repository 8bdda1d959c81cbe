"""StatsD clients used to report benchmark metrics."""

from __future__ import annotations

import abc
import logging
import os
import re
import socket
import threading
from datetime import timedelta

_DEFAULT_FLUSH_BYTES = 1432
_FLUSH_INTERVAL = 0.3
_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def _seconds(duration) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)


def _format_number(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return format(value, ".6f").rstrip("0").rstrip(".")


def _split_host_port(host_port: str) -> tuple[str, int]:
    host, sep, port = host_port.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid statsd address {host_port!r}: expected host:port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, int(port)


class Client(abc.ABC):
    """The statsd operations used for reporting."""

    @abc.abstractmethod
    def inc(self, stat: str) -> None:
        """Increment a counter by one."""

    @abc.abstractmethod
    def timing(self, stat: str, duration) -> None:
        """Record a duration, given in seconds or as a timedelta."""


class NoopClient(Client):
    """A client that reports nothing."""

    def inc(self, stat: str) -> None:
        pass

    def timing(self, stat: str, duration) -> None:
        pass


NOOP = NoopClient()


class UDPStatter:
    """A buffered statsd sender over UDP.

    Lines are batched into packets of at most ``flush_bytes`` and sent every
    ``flush_interval`` seconds (0 disables the background flush).
    """

    def __init__(self, host_port: str, prefix: str = "", flush_interval: float = _FLUSH_INTERVAL,
                 flush_bytes: int = 0) -> None:
        host, port = _split_host_port(host_port)
        family, type_, proto, _, sockaddr = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)[0]
        self._sock = socket.socket(family, type_, proto)
        self._sock.connect(sockaddr)
        self._prefix = prefix
        self._flush_bytes = flush_bytes or _DEFAULT_FLUSH_BYTES
        self._lock = threading.Lock()
        self._buffer: list[str] = []
        self._size = 0
        self._closed = threading.Event()
        self._thread = None
        if flush_interval > 0:
            self._thread = threading.Thread(target=self._loop, args=(flush_interval,), daemon=True)
            self._thread.start()

    def _loop(self, interval: float) -> None:
        while not self._closed.wait(interval):
            self.flush()

    def _name(self, stat: str) -> str:
        return f"{self._prefix}.{stat}" if self._prefix else stat

    def _submit(self, line: str) -> None:
        with self._lock:
            if self._buffer and self._size + len(line) + 1 > self._flush_bytes:
                self._flush_locked()
            self._buffer.append(line)
            self._size += len(line) + 1

    def _flush_locked(self) -> None:
        if not self._buffer:
            return
        data = "\n".join(self._buffer).encode()
        self._buffer.clear()
        self._size = 0
        try:
            self._sock.send(data)
        except OSError:
            # Metrics are best effort; a dropped packet is not an error.
            pass

    def inc(self, stat: str, value: int = 1) -> None:
        """Add ``value`` to a counter."""
        self._submit(f"{self._name(stat)}:{value}|c")

    def timing(self, stat: str, duration) -> None:
        """Record a duration in milliseconds."""
        millis = _seconds(duration) * 1000.0
        self._submit(f"{self._name(stat)}:{_format_number(millis)}|ms")

    def flush(self) -> None:
        """Send any buffered lines now."""
        with self._lock:
            self._flush_locked()

    def close(self) -> None:
        """Flush pending lines and release the socket."""
        if self._closed.is_set():
            return
        self._closed.set()
        if self._thread is not None:
            self._thread.join()
        self.flush()
        self._sock.close()


class StatterClient(Client):
    """A Client backed by a statter such as UDPStatter."""

    def __init__(self, statter) -> None:
        self.statter = statter

    def inc(self, stat: str) -> None:
        self.statter.inc(stat, 1)

    def timing(self, stat: str, duration) -> None:
        self.statter.timing(stat, duration)


class MultiClient(Client):
    """Sends every metric to each of several clients."""

    def __init__(self, clients) -> None:
        self.clients = list(clients)

    def inc(self, stat: str) -> None:
        for client in self.clients:
            client.inc(stat)

    def timing(self, stat: str, duration) -> None:
        for client in self.clients:
            client.timing(stat, duration)


class PrefixedClient(Client):
    """Adds a prefix to every stat name before passing it on."""

    def __init__(self, client: Client, prefix: str) -> None:
        self.client = client
        self.prefix = prefix

    def inc(self, stat: str) -> None:
        self.client.inc(self.prefix + stat)

    def timing(self, stat: str, duration) -> None:
        self.client.timing(self.prefix + stat, duration)


def multi_client(*args: Client) -> Client:
    """Combine several clients into one."""
    return MultiClient(args)


def metric_prefix(service: str, method: str) -> str:
    """Return the stat prefix for a user, service and method."""
    user = os.environ.get("USER", "")
    parts = (_UNSAFE.sub("-", part) for part in (user, service, method))
    return "yab." + ".".join(parts)


def new_client(logger, statsd_host_port: str, service: str, method: str) -> Client:
    """Return a Client reporting to statsd, or NOOP if no address is given."""
    if not statsd_host_port:
        return NOOP

    log = logger or logging.getLogger(__name__)
    log.debug("Create statsd client. hostPort=%s serviceName=%s procedure=%s",
              statsd_host_port, service, method)
    statter = UDPStatter(statsd_host_port, metric_prefix(service, method), flush_interval=_FLUSH_INTERVAL)
    return StatterClient(statter)