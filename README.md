# yab

`yab` provides the building blocks of a benchmarking tool for RPC services.
It covers option records and duration parsing, peer lists, request bodies and
headers, detection of the request encoding, rate limiting and run limits,
statsd metrics, and Protobuf descriptor lookup.

## Installation

```
pip install .
```

To run the test suite, install the `test` extra and run pytest:

```
pip install ".[test]"
pytest
```

## What this package does not do

The package has no command that makes RPC calls or runs benchmarks. It does
not parse command-line arguments, read a `defaults.ini` file, or set up
logging. It has no transports (TChannel, HTTP or gRPC) and no serializers for
Thrift, Protobuf, JSON or raw bodies. The pieces below are libraries that such
a tool would be built from.

## Command

`yab-extract-changelog` prints the section for one version from
`CHANGELOG.md` in the current directory. A leading `v` on the version is
ignored:

```
yab-extract-changelog v1.2.3
```

It prints a usage line and exits with status 1 when it is not given exactly
one argument, and it reports an error when the version is not found. The same
logic is available as `yab.changelog.extract(version, lines)` and
`yab.changelog.run(version, out, path)`.

## Library use

### Options and durations

`yab.options` defines `Options`, with `RequestOptions`, `TransportOptions` and
`BenchmarkOptions` inside. `new_options()` returns the defaults: a 1 second
timeout, the `POST` HTTP method, 10 warmup requests and a concurrency of 1.
`set_encoding_options(opts)` applies the `json` and `raw` switches to the
encoding. `BenchmarkOptions.enabled()` is true when a request count or a
duration is set.

Durations are held in seconds:

```python
from yab.options import parse_go_duration, parse_time_millis, format_duration

parse_go_duration("1m30s")   # 90.0
parse_time_millis("100")     # 0.1, a bare integer is milliseconds
format_duration(90.0)        # "1m30s"
```

`Encoding.parse(text)` reads an encoding name such as `thrift`, `proto`,
`json` or `raw`.

### Request input and headers

`yab.request.open_request_input(inline, file)` returns a binary reader for a
body given inline, in a file, or on stdin (`-`). `get_headers(inline, file,
override)` reads headers in JSON or YAML and lets `override` replace entries.
`detect_encoding(request_options)` returns the explicit encoding, or guesses
Thrift from a `::` in the procedure or a Thrift file, and Protobuf from a `/`
or a descriptor set.

### Peer lists

`yab.peerprovider` reads peer lists in YAML, JSON or newline-delimited form.
Each entry is a `host:port` or a URL:

```python
from yab import peerprovider

peers = peerprovider.parse_peers(b"- 1.1.1.1:1\n- 2.2.2.2:2\n")
peers = peerprovider.parse_peer_list("/path/to/peers.txt")
peers = peerprovider.resolve("file:/path/to/peers.yaml", timeout=1.0)
print(peerprovider.schemes())   # ['file', 'http', 'https']
```

You can add your own scheme with `register_peer_provider(scheme, provider)`,
where `provider` is a `PeerProvider`. Failures raise `PeerListError`.

### Rate limiting and run limits

```python
from yab.limiter import Run

run = Run(max_requests=1000, rps=100, max_duration=5.0)
while run.more():
    ...  # issue one request
```

A value of 0 means no limit for each of the three. `Run.stop()` makes every
later call to `more()` return `False`. The limiters themselves are in
`yab.ratelimit` (`new_limiter(rps)`, `new_infinite()`).

### Metrics

```python
from yab import statsd

client = statsd.new_client(None, "127.0.0.1:8125", "my-service", "Svc::method")
client.inc("success")
client.timing("latency", 0.012)
```

When no host:port is given, the client does nothing. Metric names are prefixed
with `yab.<user>.<service>.<method>`, with every character other than a letter
or digit replaced by `-`. `multi_client` sends to several clients at once, and
`PrefixedClient` adds a further prefix to each name. `yab.statsdtest.Server` is
an in-memory UDP statsd server for tests, with `stats()` and `aggregated()`.

### Console output

`yab.output.ConsoleOutput` writes results to stdout and warnings to stderr;
`fatal(message)` writes the message to stderr and raises `FatalError`.

### Other helpers

- `yab.protoset.from_file_descriptor_set_bins(*paths)` loads compiled
  Protobuf `FileDescriptorSet` files so that services and messages can be
  looked up; an unknown service raises `NotFoundError`.
- `yab.yamlalias.unmarshal(data, target)` reads YAML into a dataclass and
  accepts alias keys for its fields, given as `yaml_aliases` field metadata.
- `yab.mapkeys.map_keys(m)` returns the keys of a string-keyed mapping in
  sorted order.
- `yab.plugin.add_flags(group_name, long_description, data)` registers extra
  option groups, and `add_to_parser(parser)` hands them to any object with an
  `add_flag_group` method, raising `PluginError` for groups that fail.