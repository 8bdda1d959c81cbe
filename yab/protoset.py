"""Protobuf descriptor lookup backed by compiled FileDescriptorSet files."""

from __future__ import annotations

import abc

from google.protobuf import descriptor_pb2, descriptor_pool
from google.protobuf.message import DecodeError


class NotFoundError(LookupError):
    """A searched-for symbol does not exist among the known descriptors."""

    def __init__(self, encoding: str, search_type: str, search: str, available=(), example: str = "") -> None:
        self.encoding = encoding
        self.search_type = search_type
        self.search = search
        self.available = list(available)
        self.example = example
        message = f'could not find {encoding} {search_type} "{search}"'
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        if example:
            message += f"; try {example}"
        super().__init__(message)


class DescriptorProvider(abc.ABC):
    """A source of protobuf service and message descriptors."""

    @abc.abstractmethod
    def find_service(self, fully_qualified_name: str):
        """Return the service descriptor, or raise NotFoundError."""

    @abc.abstractmethod
    def find_message(self, message_type: str):
        """Return the message descriptor, or None if it is unknown."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release any resources held."""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class FileSource(DescriptorProvider):
    """Descriptors loaded from FileDescriptorSet contents."""

    def __init__(self, pool: descriptor_pool.DescriptorPool, files: dict) -> None:
        self._pool = pool
        self.files = dict(files)

    def find_service(self, fully_qualified_name: str):
        available = []
        for fd in self.files.values():
            for service in fd.services_by_name.values():
                if service.full_name == fully_qualified_name:
                    return service
                available.append(service.full_name)
        raise NotFoundError("gRPC", "service", fully_qualified_name, available)

    def find_message(self, message_type: str):
        try:
            message = self._pool.FindMessageTypeByName(message_type)
        except KeyError:
            return None
        return message if message.file.name in self.files else None

    def close(self) -> None:
        """Drop the loaded descriptors; later lookups find nothing."""
        self.files.clear()


def _resolve(unresolved, resolved, pool, filename, visiting):
    if filename in resolved:
        return resolved[filename]
    proto = unresolved.get(filename)
    if proto is None:
        raise ValueError(f'no descriptor found for "{filename}"')
    if filename in visiting:
        raise ValueError(f'import cycle through "{filename}"')

    visiting.add(filename)
    for dep in proto.dependency:
        _resolve(unresolved, resolved, pool, dep, visiting)
    visiting.discard(filename)

    try:
        pool.AddSerializedFile(proto.SerializeToString())
        result = pool.FindFileByName(filename)
    except (TypeError, KeyError, ValueError) as exc:
        raise ValueError(f'"{filename}" included an unresolvable reference: {exc}') from exc
    resolved[filename] = result
    return result


def from_file_descriptor_set(files) -> FileSource:
    """Build a provider from a FileDescriptorSet message."""
    unresolved = {fd.name: fd for fd in files.file}
    pool = descriptor_pool.DescriptorPool()
    resolved: dict = {}
    for fd in files.file:
        _resolve(unresolved, resolved, pool, fd.name, set())
    return FileSource(pool, resolved)


def from_file_descriptor_set_bins(*args) -> FileSource:
    """Build a provider from files holding encoded FileDescriptorSet messages."""
    combined = descriptor_pb2.FileDescriptorSet()
    for filename in args:
        try:
            with open(filename, "rb") as f:
                contents = f.read()
        except OSError as exc:
            raise ValueError(f'could not load protoset file "{filename}": {exc}') from exc
        file_set = descriptor_pb2.FileDescriptorSet()
        try:
            file_set.ParseFromString(contents)
        except DecodeError as exc:
            raise ValueError(
                f'could not parse contents of protoset file "{filename}": {exc}'
            ) from exc
        combined.file.extend(file_set.file)
    return from_file_descriptor_set(combined)