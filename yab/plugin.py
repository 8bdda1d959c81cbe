"""Registration of extra command-line flag groups contributed by extensions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass
class FlagGroup:
    """A group of flags to add to the command-line parser."""

    group_name: str
    long_description: str
    data: Any


class Parser(Protocol):
    """Anything that can take extra flag groups before parsing."""

    def add_flag_group(self, group_name: str, long_description: str, data: Any) -> None:
        """Add a flag group; raise on failure."""


class PluginError(Exception):
    """One or more flag groups could not be added to a parser."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class FlagRegistry:
    """An ordered collection of flag groups to hand to a parser."""

    def __init__(self) -> None:
        self.flags: list[FlagGroup] = []

    def add_flags(self, group_name: str, long_description: str, data: Any) -> None:
        """Register a flag group under the heading ``group_name``.

        ``data`` is the object the parser fills in; keep a reference to it to
        read the values after parsing.
        """
        self.flags.append(FlagGroup(group_name, long_description, data))

    def add_to_parser(self, parser: Parser) -> None:
        """Add every registered group to ``parser``, best effort.

        Groups that fail are skipped; a PluginError listing them is raised at
        the end.
        """
        errors = []
        for group in self.flags:
            try:
                parser.add_flag_group(group.group_name, group.long_description, group.data)
            except Exception as exc:
                errors.append(f"adding {group.group_name} to parser: {exc}")
        if errors:
            raise PluginError(errors)


registry = FlagRegistry()


def add_flags(group_name: str, long_description: str, data: Any) -> None:
    """Register a flag group with the shared registry."""
    registry.add_flags(group_name, long_description, data)


def add_to_parser(parser: Parser) -> None:
    """Add all groups from the shared registry to ``parser``."""
    registry.add_to_parser(parser)