import socket
import time

import pytest

from yab.statsdtest import Server, Stat


def _wait_for(predicate, timeout=1.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def _send(addr, *lines):
    host, port = addr.rsplit(":", 1)
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        for line in lines:
            sock.sendto(line.encode(), (host, int(port)))


def test_server():
    with Server() as server:
        _send(
            server.addr(),
            "client.counter:1|c",
            "client.counter:2|c",
            "client.gauge:3|g",
            "client.gauge:5|g",
            "client.timer:100|ms",
            "client.timer:150|ms",
        )
        want = [
            Stat("client.counter", "1"),
            Stat("client.counter", "2"),
            Stat("client.gauge", "3"),
            Stat("client.gauge", "5"),
            Stat("client.timer", "100"),
            Stat("client.timer", "150"),
        ]
        assert _wait_for(lambda: len(server.stats()) == len(want))
        assert server.stats() == want
        assert server.aggregated() == {
            "client.counter": 3,
            "client.gauge": 5,
            "client.timer": 2,
        }


def test_multiline_packet_with_rate():
    with Server() as server:
        _send(server.addr(), "a:1|c|@0.5\nb:7|g")
        assert _wait_for(lambda: len(server.stats()) == 2)
        assert server.stats() == [Stat("a", "1"), Stat("b", "7")]
        assert server.aggregated() == {"a": 1, "b": 7}


def test_aggregated_rejects_non_integer_counter():
    with Server() as server:
        _send(server.addr(), "x:abc|c")
        assert _wait_for(lambda: len(server.stats()) == 1)
        with pytest.raises(ValueError):
            server.aggregated()


def test_close_is_idempotent():
    server = Server()
    addr = server.addr()
    server.close()
    server.close()
    assert server.stats() == []
    assert addr.startswith("127.0.0.1:")