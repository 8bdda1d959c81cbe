"""Resolution of peer lists from files and URLs."""

from __future__ import annotations

import abc
import http
import urllib.error
import urllib.request
from pathlib import Path
from urllib.parse import SplitResult, unquote, urlsplit

import yaml

_PEER_LIST_FORMAT = "peer list should be YAML, JSON, or newline delimited strings"


class PeerListError(Exception):
    """A peer list could not be loaded or parsed."""


def _split_host_port(hostport: str) -> tuple[str, str]:
    """Split ``host:port``, accepting and rejecting the same inputs as Go's net.SplitHostPort."""

    def fail(reason: str) -> ValueError:
        return ValueError(f"address {hostport}: {reason}")

    i = hostport.rfind(":")
    if i < 0:
        raise fail("missing port in address")

    j = k = 0
    if hostport.startswith("["):
        end = hostport.find("]")
        if end < 0:
            raise fail("missing ']' in address")
        if end + 1 == len(hostport):
            raise fail("missing port in address")
        if end + 1 != i:
            if hostport[end + 1] == ":":
                raise fail("too many colons in address")
            raise fail("missing port in address")
        host = hostport[1:end]
        j, k = 1, end + 1
    else:
        host = hostport[:i]
        if ":" in host:
            raise fail("too many colons in address")

    if "[" in hostport[j:]:
        raise fail("unexpected '[' in address")
    if "]" in hostport[k:]:
        raise fail("unexpected ']' in address")
    return host, hostport[i + 1:]


def _check_url(line: str) -> None:
    parsed = urlsplit(line)
    host = parsed.netloc.rpartition("@")[2]
    if not host:
        raise ValueError(f"url cannot have empty host: {line}")


def _parse_yaml_peers(text: str) -> list[str]:
    # BaseLoader keeps every scalar as its source text, so addresses are never
    # reinterpreted as numbers or timestamps.
    loaded = yaml.load(text, Loader=yaml.BaseLoader)
    if loaded is None:
        return []
    if isinstance(loaded, list) and all(isinstance(host, str) for host in loaded):
        return loaded
    raise ValueError("peer list is not a list of strings")


def _parse_newline_delimited_peers(text: str) -> list[str]:
    hosts = []
    for raw in text.split("\n"):
        line = raw.strip()
        if not line:
            continue
        try:
            _split_host_port(line)
        except ValueError as host_port_err:
            try:
                _check_url(line)
            except ValueError as url_err:
                raise ValueError(
                    f"failed to parse line {line!r} as host:port ({host_port_err}) or URL ({url_err})"
                ) from None
        hosts.append(line)
    return hosts


def parse_peers(contents) -> list[str]:
    """Parse a peer list in YAML, JSON or newline-delimited form."""
    text = contents.decode("utf-8", errors="replace") if isinstance(contents, bytes) else contents
    try:
        return _parse_yaml_peers(text)
    except (yaml.YAMLError, ValueError):
        pass
    try:
        return _parse_newline_delimited_peers(text)
    except ValueError as exc:
        raise PeerListError(_PEER_LIST_FORMAT) from exc


def parse_peer_list(filename) -> list[str]:
    """Read and parse the peer list stored in ``filename``."""
    try:
        contents = Path(filename).read_bytes()
    except OSError as exc:
        raise PeerListError(f"failed to open peer list: {exc}") from exc
    return parse_peers(contents)


def _as_url(url) -> SplitResult:
    return url if isinstance(url, SplitResult) else urlsplit(url)


def _status_text(code: int) -> str:
    try:
        return http.HTTPStatus(code).phrase
    except ValueError:
        return ""


class PeerProvider(abc.ABC):
    """Provides the peers named by a URL, in a form suitable for --peer."""

    @abc.abstractmethod
    def resolve(self, url, timeout=None) -> list[str]:
        """Return the peers for ``url``; ``timeout`` is in seconds."""


class FilePeerProvider(PeerProvider):
    """Reads peers from the local file named by the URL path."""

    def resolve(self, url, timeout=None) -> list[str]:
        return parse_peer_list(unquote(_as_url(url).path))


class HTTPPeerProvider(PeerProvider):
    """Fetches a peer list with an HTTP GET."""

    def resolve(self, url, timeout=None) -> list[str]:
        request = urllib.request.Request(_as_url(url).geturl(), method="GET")
        try:
            with urllib.request.urlopen(request, timeout=timeout) as response:
                if response.status != http.HTTPStatus.OK:
                    raise PeerListError(
                        "failed to read peer list over HTTP, status not OK: "
                        f"{_status_text(response.status)}"
                    )
                try:
                    contents = response.read()
                except OSError as exc:
                    raise PeerListError(
                        f"failed to read entire contents of HTTP body for peer list: {exc}"
                    ) from exc
        except urllib.error.HTTPError as exc:
            raise PeerListError(
                f"failed to read peer list over HTTP, status not OK: {_status_text(exc.code)}"
            ) from exc
        except (urllib.error.URLError, OSError) as exc:
            raise PeerListError(f"failed to read peer list over HTTP: {exc}") from exc
        return parse_peers(contents)


registry: dict[str, PeerProvider] = {
    "": FilePeerProvider(),
    "file": FilePeerProvider(),
    "http": HTTPPeerProvider(),
    "https": HTTPPeerProvider(),
}


def register_peer_provider(scheme: str, provider: PeerProvider) -> None:
    """Register ``provider`` for URLs with the given scheme."""
    registry[scheme] = provider


def schemes() -> list[str]:
    """Return the supported URL schemes, sorted."""
    return sorted(scheme for scheme in registry if scheme)


def resolve(url, timeout=None) -> list[str]:
    """Resolve a peer list URL with the provider registered for its scheme."""
    parsed = _as_url(url)
    provider = registry.get(parsed.scheme)
    if provider is None:
        raise PeerListError(
            f'no peer provider available for scheme "{parsed.scheme}" in URL "{parsed.geturl()}"'
        )
    return provider.resolve(parsed, timeout)