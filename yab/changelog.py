"""Print the release notes of one version from a changelog file."""

from __future__ import annotations

import enum
import sys


class _State(enum.IntEnum):
    SEARCHING = 0
    FOUND_HEADER = 1
    PRINTING = 2


def _chomp(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def extract(version: str, lines) -> list[str]:
    """Return the lines of the section for ``version`` (a leading "v" is ignored).

    The section starts after the "# <version> (" header and its blank lines,
    and ends at the next "# " header. Raises ValueError if the version is absent.
    """
    if version.startswith("v"):
        version = version[1:]
    header = f"# {version} ("

    state = _State.SEARCHING
    notes: list[str] = []
    for raw in lines:
        line = _chomp(raw)
        if state is _State.SEARCHING:
            if line.startswith(header):
                state = _State.FOUND_HEADER
            continue
        if state is _State.FOUND_HEADER:
            if not line:
                continue
            state = _State.PRINTING
        if line.startswith("# "):
            return notes
        notes.append(line)

    if state < _State.PRINTING:
        raise ValueError(f'could not find version "{version}" in changelog')
    return notes


def run(version: str, out, path="CHANGELOG.md") -> None:
    """Write the notes for ``version`` from the changelog at ``path`` to ``out``."""
    with open(path, encoding="utf-8") as changelog:
        notes = extract(version, changelog)
    for line in notes:
        out.write(line + "\n")


def main(argv=None) -> int:
    """Command entry point: takes a single VERSION argument."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1:
        prog = sys.argv[0] if sys.argv and sys.argv[0] else "extract_changelog"
        print(f"USAGE: {prog} VERSION")
        return 1
    try:
        run(args[0], sys.stdout)
    except (OSError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())