"""An in-memory statsd server that records what it receives, for tests."""

from __future__ import annotations

import socket
import threading
from dataclasses import dataclass

_MAX_PACKET = 65535


@dataclass(frozen=True)
class Stat:
    """One received statsd line."""

    stat: str
    value: str
    tag: str = ""
    rate: str = ""


def _parse_line(line: str) -> Stat | None:
    head, sep, tail = line.partition("|")
    if not sep:
        return None
    name, colon, value = head.rpartition(":")
    if not colon or not name:
        return None
    parts = tail.split("|")
    rate = parts[1] if len(parts) > 1 else ""
    return Stat(name, value, parts[0], rate)


class Server:
    """A UDP statsd listener on localhost that records every stat."""

    def __init__(self, host: str = "127.0.0.1") -> None:
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self._sock.bind((host, 0))
        self._sock.settimeout(0.05)
        self._lock = threading.Lock()
        self._received: list[Stat] = []
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                data = self._sock.recv(_MAX_PACKET)
            except socket.timeout:
                continue
            except OSError:
                return
            parsed = [_parse_line(line) for line in data.decode(errors="replace").split("\n") if line]
            with self._lock:
                self._received.extend(stat for stat in parsed if stat is not None)

    def __enter__(self) -> Server:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def addr(self) -> str:
        """Return the host:port the server listens on."""
        host, port = self._sock.getsockname()[:2]
        return f"{host}:{port}"

    def close(self) -> None:
        """Stop listening."""
        if self._stop.is_set():
            return
        self._stop.set()
        self._thread.join()
        self._sock.close()

    def stats(self) -> list[Stat]:
        """Return every stat received so far, keeping only name and value."""
        with self._lock:
            return [Stat(s.stat, s.value) for s in self._received]

    def aggregated(self) -> dict[str, int]:
        """Sum counters, keep the last gauge and count timers."""
        with self._lock:
            received = list(self._received)

        result: dict[str, int] = {}
        for s in received:
            if s.tag in ("c", "g"):
                try:
                    value = int(s.value)
                except ValueError:
                    raise ValueError(f"failed to convert {s.stat}: {s.value}") from None
                if s.tag == "c":
                    result[s.stat] = result.get(s.stat, 0) + value
                else:
                    result[s.stat] = value
            elif s.tag == "ms":
                result[s.stat] = result.get(s.stat, 0) + 1
        return result