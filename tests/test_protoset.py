import pytest
from google.protobuf import descriptor_pb2

from yab.protoset import NotFoundError, from_file_descriptor_set, from_file_descriptor_set_bins

FieldProto = descriptor_pb2.FieldDescriptorProto


def _add_foo(fd):
    msg = fd.message_type.add(name="Foo")
    msg.field.add(
        name="test",
        number=1,
        type=FieldProto.TYPE_INT32,
        label=FieldProto.LABEL_OPTIONAL,
        json_name="test",
    )


def _dep_file():
    fd = descriptor_pb2.FileDescriptorProto(name="dep.proto", syntax="proto3")
    _add_foo(fd)
    return fd


def _bar_file(name, dependency=(), with_foo=False):
    fd = descriptor_pb2.FileDescriptorProto(name=name, syntax="proto3", dependency=list(dependency))
    if with_foo:
        _add_foo(fd)
    service = fd.service.add(name="Bar")
    service.method.add(name="Baz", input_type=".Foo", output_type=".Foo")
    return fd


def _other_file():
    fd = descriptor_pb2.FileDescriptorProto(name="dep.proto", syntax="proto3")
    fd.message_type.add(name="Other")
    return fd


def _write(tmp_path, filename, *files):
    path = tmp_path / filename
    path.write_bytes(descriptor_pb2.FileDescriptorSet(file=list(files)).SerializeToString())
    return str(path)


@pytest.fixture
def protosets(tmp_path):
    return {
        "simple": _write(tmp_path, "simple.proto.bin", _bar_file("simple.proto", with_foo=True)),
        "combined": _write(tmp_path, "combined.bin", _bar_file("main.proto", ["dep.proto"]), _dep_file()),
        "main": _write(tmp_path, "main.proto.bin", _bar_file("main.proto", ["dep.proto"])),
        "dep": _write(tmp_path, "dep.proto.bin", _dep_file()),
        "other": _write(tmp_path, "other.bin", _other_file()),
    }


@pytest.mark.parametrize(
    "names",
    [["simple"], ["combined"], ["main", "dep"], ["dep", "main"]],
)
def test_find_service(protosets, names):
    with from_file_descriptor_set_bins(*(protosets[n] for n in names)) as source:
        assert source.find_service("Bar").full_name == "Bar"


def test_find_service_missing(protosets):
    source = from_file_descriptor_set_bins(protosets["simple"])
    with pytest.raises(NotFoundError, match='could not find gRPC service "Bar.Baq"') as info:
        source.find_service("Bar.Baq")
    assert info.value.available == ["Bar"]


def test_find_message(protosets):
    source = from_file_descriptor_set_bins(protosets["combined"])
    assert source.find_message("Foo").full_name == "Foo"
    assert source.find_message("not-to-be-found") is None


def test_find_nested_message():
    fd = descriptor_pb2.FileDescriptorProto(name="nested.proto", syntax="proto3", package="pkg")
    outer = fd.message_type.add(name="Outer")
    outer.nested_type.add(name="Inner")
    source = from_file_descriptor_set(descriptor_pb2.FileDescriptorSet(file=[fd]))
    assert source.find_message("pkg.Outer.Inner").full_name == "pkg.Outer.Inner"


def test_not_a_protoset(tmp_path):
    path = tmp_path / "simple.proto"
    path.write_bytes(b"\x0a\x05ab")
    with pytest.raises(ValueError, match="could not parse contents of protoset file"):
        from_file_descriptor_set_bins(str(path))


def test_file_does_not_exist(tmp_path):
    with pytest.raises(ValueError, match="could not load protoset file"):
        from_file_descriptor_set_bins(str(tmp_path / "not_existing_simple.proto"))


def test_missing_dependency(protosets):
    with pytest.raises(ValueError, match='no descriptor found for "dep.proto"'):
        from_file_descriptor_set_bins(protosets["main"])


def test_incomplete_dependency(protosets):
    with pytest.raises(ValueError, match="included an unresolvable reference"):
        from_file_descriptor_set_bins(protosets["main"], protosets["other"])


def test_import_cycle():
    a = descriptor_pb2.FileDescriptorProto(name="a.proto", syntax="proto3", dependency=["b.proto"])
    b = descriptor_pb2.FileDescriptorProto(name="b.proto", syntax="proto3", dependency=["a.proto"])
    with pytest.raises(ValueError, match="import cycle"):
        from_file_descriptor_set(descriptor_pb2.FileDescriptorSet(file=[a, b]))


def test_not_found_error_fields():
    err = NotFoundError("gRPC", "service", "wat", ["a.B"])
    assert err.search == "wat"
    assert str(err).startswith('could not find gRPC service "wat"')