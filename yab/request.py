"""Loading of request bodies and headers, and detection of the request encoding."""

from __future__ import annotations

import io
import sys
from typing import BinaryIO

import yaml

from yab.options import Encoding, RequestOptions


class RequestInputError(Exception):
    """The request input could not be opened."""


class HeadersError(ValueError):
    """The headers input could not be decoded."""


def _stdin() -> BinaryIO:
    buffer = getattr(sys.stdin, "buffer", None)
    if buffer is not None:
        return buffer
    return io.BytesIO(sys.stdin.read().encode("utf-8"))


def open_request_input(inline: str, file: str) -> BinaryIO:
    """Return a binary reader for the body given inline, in a file, or on stdin.

    A value of "-" for either argument reads from stdin. A file takes
    priority over the inline body.
    """
    if file == "-" or inline == "-":
        return _stdin()

    if file:
        try:
            return open(file, "rb")
        except OSError as exc:
            raise RequestInputError(f"failed to open request file: {exc}") from exc

    return io.BytesIO(inline.encode("utf-8"))


def get_headers(inline: str, file: str, override) -> dict[str, str] | None:
    """Load headers in JSON or YAML from inline text, a file or stdin.

    Entries in ``override`` replace loaded ones. With no input, ``override``
    is returned as given.
    """
    with open_request_input(inline, file) as reader:
        contents = reader.read()

    if not contents:
        return override

    try:
        # BaseLoader keeps scalars as their source text, so "k: 1" maps to "1".
        loaded = yaml.load(contents.decode("utf-8"), Loader=yaml.BaseLoader)
    except (yaml.YAMLError, UnicodeDecodeError) as exc:
        raise HeadersError(f"unmarshal headers failed: {exc}") from exc

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise HeadersError(
            f"unmarshal headers failed: cannot decode {type(loaded).__name__} into a map of strings"
        )

    headers: dict[str, str] = {}
    for key, value in loaded.items():
        if not isinstance(value, str):
            raise HeadersError(
                f"unmarshal headers failed: value for {key!r} is not a string"
            )
        headers[str(key)] = value

    headers.update(override or {})
    return headers


def detect_encoding(opts: RequestOptions) -> Encoding:
    """Return the explicit encoding, or guess it from the procedure and files."""
    if opts.encoding != Encoding.UNSPECIFIED:
        return opts.encoding

    if "::" in opts.procedure or opts.thrift_file:
        return Encoding.THRIFT

    if "/" in opts.procedure or opts.file_descriptor_set:
        return Encoding.PROTOBUF

    return Encoding.UNSPECIFIED