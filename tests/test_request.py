import io
import sys

import pytest

from yab.options import Encoding, RequestOptions
from yab.request import (
    HeadersError,
    RequestInputError,
    detect_encoding,
    get_headers,
    open_request_input,
)

VALID_JSON = b'{"test": "value", "n": 1}\n'
INVALID_JSON = b'{"test": \n'


def _read(inline, file):
    with open_request_input(inline, file) as reader:
        return reader.read()


def _fake_stdin(monkeypatch, text):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(text.encode())))


def test_request_input_empty():
    assert _read("", "") == b""


def test_request_input_missing_file():
    with pytest.raises(RequestInputError, match="failed to open request file"):
        open_request_input("", "/fake/file")


def test_request_input_file_stdin(monkeypatch):
    _fake_stdin(monkeypatch, "{}")
    assert _read("", "-") == b"{}"


def test_request_input_inline_stdin(monkeypatch):
    _fake_stdin(monkeypatch, "{}")
    assert _read("-", "") == b"{}"


@pytest.mark.parametrize("contents", [VALID_JSON, INVALID_JSON])
def test_request_input_file(tmp_path, contents):
    path = tmp_path / "body.json"
    path.write_bytes(contents)
    assert _read("", str(path)) == contents


@pytest.mark.parametrize("inline", ["{}", "{"])
def test_request_input_inline(inline):
    assert _read(inline, "") == inline.encode()


def test_request_input_file_takes_priority(tmp_path):
    path = tmp_path / "body.json"
    path.write_bytes(VALID_JSON)
    assert _read("{}", str(path)) == VALID_JSON


def test_headers_missing_file():
    with pytest.raises(RequestInputError, match="failed to open request file"):
        get_headers("", "/fake/file", None)


def test_headers_empty():
    assert get_headers("", "", None) is None


def test_headers_invalid():
    with pytest.raises(HeadersError, match="unmarshal headers failed"):
        get_headers("}", "", None)


def test_headers_not_a_map():
    with pytest.raises(HeadersError, match="unmarshal headers failed"):
        get_headers("- a\n- b\n", "", None)


@pytest.mark.parametrize(
    "inline, override, want",
    [
        ('{"k": "v"}', None, {"k": "v"}),
        ("k: v", None, {"k": "v"}),
        ("", {"k": "1"}, {"k": "1"}),
        ("k: 1", {"k": "2"}, {"k": "2"}),
        ("a: b", {"k": "2"}, {"a": "b", "k": "2"}),
        ('{"a": "b"}', {"k": "2"}, {"a": "b", "k": "2"}),
    ],
)
def test_headers(inline, override, want):
    assert get_headers(inline, "", override) == want


def test_headers_numbers_stay_strings():
    assert get_headers("k: 1", "", None) == {"k": "1"}


def test_headers_from_file(tmp_path):
    path = tmp_path / "headers.yaml"
    path.write_text("a: b\n")
    assert get_headers("", str(path), {"c": "d"}) == {"a": "b", "c": "d"}


@pytest.mark.parametrize(
    "opts, want",
    [
        (RequestOptions(encoding=Encoding.RAW, procedure="procedure"), Encoding.RAW),
        (RequestOptions(procedure="procedure"), Encoding.UNSPECIFIED),
        (RequestOptions(procedure="Svc::foo"), Encoding.THRIFT),
        (RequestOptions(thrift_file="valid.thrift", procedure="procedure"), Encoding.THRIFT),
        (RequestOptions(procedure="package.Service/Method"), Encoding.PROTOBUF),
        (
            RequestOptions(
                file_descriptor_set=["testdata/protobuf/simple/simple.proto.bin"],
                procedure="procedure",
            ),
            Encoding.PROTOBUF,
        ),
        (RequestOptions(encoding=Encoding.JSON, procedure="Test::foo"), Encoding.JSON),
    ],
)
def test_detect_encoding(opts, want):
    assert detect_encoding(opts) == want