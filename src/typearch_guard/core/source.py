"""Source file snapshots shared by every check."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator


@dataclass(frozen=True)
class SourceFile:
    """A file's path and its raw lines, read once and never modified."""

    path: Path
    lines: tuple[str, ...]

    @classmethod
    def read(cls, path: Path) -> "SourceFile":
        """Read a file from disk. Undecodable bytes are replaced, not fatal."""
        content = path.read_text(encoding="utf-8", errors="replace")
        return cls(path=path, lines=tuple(content.split("\n")))

    @classmethod
    def from_text(cls, path: Path, content: str) -> "SourceFile":
        return cls(path=path, lines=tuple(content.split("\n")))

    @property
    def content(self) -> str:
        return "\n".join(self.lines)

    def iter_lines(self) -> Iterator[tuple[int, str, str]]:
        """Yield ``(index, line, previous_line)`` for every line."""
        previous = ""
        for index, line in enumerate(self.lines):
            yield index, line, previous
            previous = line
