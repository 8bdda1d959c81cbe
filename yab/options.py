"""Command options for requests, transports and benchmarks, and duration parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import timedelta
from typing import ClassVar

_NS_PER_UNIT = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_MAX_NS = 2**63 - 1
_NUMBER = re.compile(r"([0-9]*)(?:\.([0-9]*))?")
_UNIT = re.compile(r"[^0-9.]*")
_INTEGER = re.compile(r"[+-]?[0-9]+")


class Encoding(str):
    """The encoding of a request body.

    Values other than the known ones may be constructed; they are reported as
    unrecognised when a serializer is chosen.
    """

    UNSPECIFIED: ClassVar[Encoding]
    JSON: ClassVar[Encoding]
    THRIFT: ClassVar[Encoding]
    PROTOBUF: ClassVar[Encoding]
    RAW: ClassVar[Encoding]

    @classmethod
    def parse(cls, text: str) -> Encoding:
        """Parse an encoding name as given on the command line (case-insensitive)."""
        name = text.lower()
        if name in ("", "thrift", "json", "raw"):
            return cls(name)
        if name in ("proto", "protobuf"):
            return cls.PROTOBUF
        raise ValueError(f'unknown encoding: "{name}"')

    def __repr__(self) -> str:
        return f"Encoding({str.__repr__(self)})"


Encoding.UNSPECIFIED = Encoding("")
Encoding.JSON = Encoding("json")
Encoding.THRIFT = Encoding("thrift")
Encoding.PROTOBUF = Encoding("proto")
Encoding.RAW = Encoding("raw")


def _duration_ns(value: str) -> int:
    def invalid() -> ValueError:
        return ValueError(f'time: invalid duration "{value}"')

    s = value
    negative = False
    if s and s[0] in "+-":
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return 0
    if not s:
        raise invalid()

    total = 0
    while s:
        if s[0] != "." and s[0] not in "0123456789":
            raise invalid()
        match = _NUMBER.match(s)
        whole, frac = match.group(1), match.group(2)
        if not whole and not frac:
            raise invalid()
        s = s[match.end():]

        unit = _UNIT.match(s).group(0)
        if not unit:
            raise ValueError(f'time: missing unit in duration "{value}"')
        s = s[len(unit):]
        scale = _NS_PER_UNIT.get(unit)
        if scale is None:
            raise ValueError(f'time: unknown unit "{unit}" in duration "{value}"')

        part = int(whole or "0") * scale
        if frac:
            part += int(frac) * scale // 10 ** len(frac)
        total += part
        if total > _MAX_NS:
            raise invalid()
    return -total if negative else total


def parse_go_duration(value: str) -> float:
    """Parse a duration such as "1.5s", "300ms" or "1h2m" into seconds."""
    return _duration_ns(value) / 1e9


def _seconds(duration) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)


def _frac(value: int, precision: int) -> str:
    whole, part = divmod(value, 10**precision)
    digits = str(part).zfill(precision).rstrip("0")
    return f"{whole}.{digits}" if digits else str(whole)


def format_duration(duration) -> str:
    """Format seconds (or a timedelta) the way durations are shown, e.g. "1m30s"."""
    ns = round(_seconds(duration) * 1e9)
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    u = abs(ns)
    if u < 1_000_000_000:
        if u < 1_000:
            return f"{sign}{u}ns"
        if u < 1_000_000:
            return f"{sign}{_frac(u, 3)}µs"
        return f"{sign}{_frac(u, 6)}ms"

    secs, rem = divmod(u, 1_000_000_000)
    text = _frac((secs % 60) * 1_000_000_000 + rem, 9) + "s"
    minutes = secs // 60
    if minutes:
        text = f"{minutes % 60}m{text}"
        hours = minutes // 60
        if hours:
            text = f"{hours}h{text}"
    return sign + text


def parse_time_millis(value: str) -> float:
    """Parse a timeout in seconds; a bare integer is taken as milliseconds."""
    if _INTEGER.fullmatch(value):
        return int(value) / 1000
    return parse_go_duration(value)


@dataclass
class StreamRequestOptions:
    """Options for streaming requests; durations are in seconds."""

    interval: float = 0.0
    delay_close_send_stream: float = 0.0


@dataclass
class RequestOptions:
    """Request related options; the timeout is in seconds."""

    encoding: Encoding = Encoding.UNSPECIFIED
    thrift_file: str = ""
    file_descriptor_set: list[str] = field(default_factory=list)
    procedure: str = ""
    request_json: str = ""
    request_file: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    headers_json: str = ""
    headers_file: str = ""
    baggage: dict[str, str] = field(default_factory=dict)
    health: bool = False
    timeout: float = 0.0
    yaml_template: str = ""
    template_args: dict[str, str] = field(default_factory=dict)
    thrift_disable_envelopes: bool = False
    thrift_multiplexed: bool = False
    # Compatibility switches: --json and --raw select the encoding.
    json: bool = False
    raw: bool = False
    stream: StreamRequestOptions = field(default_factory=StreamRequestOptions)


@dataclass
class TransportOptions:
    """Transport related options."""

    service_name: str = ""
    peers: list[str] = field(default_factory=list)
    peer_list: str = ""
    caller_name: str = ""
    routing_key: str = ""
    routing_delegate: str = ""
    shard_key: str = ""
    jaeger: bool = False
    transport_headers: dict[str, str] = field(default_factory=dict)
    http_method: str = ""
    grpc_max_response_size: int = 0
    no_jaeger: bool = False


@dataclass
class BenchmarkOptions:
    """Benchmark options; max_duration is in seconds, 0 meaning no limit."""

    max_requests: int = 0
    max_duration: float = 0.0
    num_cpus: int = 0
    connections: int = 0
    warmup_requests: int = 0
    concurrency: int = 0
    rps: int = 0
    statsd_host_port: str = ""
    per_peer_stats: bool = False
    format: str = ""

    def enabled(self) -> bool:
        """Return whether a benchmark should run rather than a single call."""
        return self.max_requests > 0 or self.max_duration > 0


@dataclass
class Options:
    """All command options."""

    request: RequestOptions = field(default_factory=RequestOptions)
    transport: TransportOptions = field(default_factory=TransportOptions)
    benchmark: BenchmarkOptions = field(default_factory=BenchmarkOptions)
    verbosity: list[bool] = field(default_factory=list)
    display_version: bool = False
    man_page: bool = False


def new_options() -> Options:
    """Return options holding the command-line defaults."""
    opts = Options()
    opts.request.timeout = 1.0
    opts.transport.http_method = "POST"
    opts.benchmark.warmup_requests = 10
    opts.benchmark.concurrency = 1
    return opts


def set_encoding_options(opts: Options) -> None:
    """Apply the --json and --raw switches to the encoding."""
    if opts.request.json:
        opts.request.encoding = Encoding.JSON
    if opts.request.raw:
        opts.request.encoding = Encoding.RAW