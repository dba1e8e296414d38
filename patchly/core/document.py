"""
Document — Versioned text with an offset <-> line/column surface

Every component works on (text, offset). Lines and columns are 0-based;
offsets are str indices. Any mutation bumps the version, which is what
suppression caching keys on.
"""

from bisect import bisect_right
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Replacement:
    """An edit: replace text[start:end] with `text`."""
    start: int
    end: int
    text: str


class Document:
    """Source text identified by a URI, with a monotonically increasing version."""

    def __init__(self, uri: str, text: str, version: int = 1, path: Optional[Path] = None):
        self.uri = uri
        self.path = Path(path) if path else None
        self.version = version
        self._text = text
        self._line_starts = self._compute_line_starts(text)

    @classmethod
    def from_path(cls, path: Path) -> 'Document':
        """Read a UTF-8 source file."""
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        return cls(path.resolve().as_uri(), text, path=path)

    def save(self):
        """Write the current text back to the file it was read from."""
        if self.path is None:
            raise ValueError(f"Document {self.uri} has no backing file")
        self.path.write_text(self._text, encoding="utf-8")

    @staticmethod
    def _compute_line_starts(text: str) -> List[int]:
        starts = [0]
        for i, ch in enumerate(text):
            if ch == "\n":
                starts.append(i + 1)
        return starts

    @property
    def text(self) -> str:
        return self._text

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line_text(self, line: int) -> str:
        """Text of a line without its trailing newline."""
        self._check_line(line)
        start = self._line_starts[line]
        end = self._line_starts[line + 1] - 1 if line + 1 < self.line_count else len(self._text)
        return self._text[start:end].rstrip("\r")

    def lines(self) -> List[str]:
        return [self.line_text(n) for n in range(self.line_count)]

    def line_at(self, offset: int) -> int:
        self._check_offset(offset)
        return bisect_right(self._line_starts, offset) - 1

    def position_at(self, offset: int) -> Tuple[int, int]:
        """Offset -> (line, column)."""
        line = self.line_at(offset)
        return line, offset - self._line_starts[line]

    def offset_at(self, line: int, column: int = 0) -> int:
        """(line, column) -> offset. Columns past the end of the line clamp to it."""
        self._check_line(line)
        if column < 0:
            raise ValueError(f"Column must be non-negative, got {column}")
        return self._line_starts[line] + min(column, len(self.line_text(line)))

    def insert(self, offset: int, text: str):
        self.apply(Replacement(offset, offset, text))

    def apply(self, replacement: Replacement):
        """Apply an edit and bump the version."""
        self._check_offset(replacement.start)
        self._check_offset(replacement.end)
        if replacement.end < replacement.start:
            raise ValueError(f"Replacement end {replacement.end} precedes start {replacement.start}")
        self._text = self._text[:replacement.start] + replacement.text + self._text[replacement.end:]
        self._line_starts = self._compute_line_starts(self._text)
        self.version += 1

    def _check_offset(self, offset: int):
        if not 0 <= offset <= len(self._text):
            raise ValueError(f"Offset {offset} out of range for {self.uri} (length {len(self._text)})")

    def _check_line(self, line: int):
        if not 0 <= line < self.line_count:
            raise ValueError(f"Line {line} out of range for {self.uri} ({self.line_count} lines)")

    def __repr__(self) -> str:
        return f"Document({self.uri!r}, version={self.version})"
