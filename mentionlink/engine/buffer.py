"""Editor positions and the text buffer the trigger engine reads and rewrites."""

from dataclasses import dataclass
from typing import List, Protocol


@dataclass(frozen=True, order=True)
class EditorPosition:
    """A (line, column) position in a buffer. Columns count characters."""
    line: int
    ch: int

    def shift(self, delta: int) -> "EditorPosition":
        """Same line, column moved by delta (may go negative; buffers clamp)."""
        return EditorPosition(self.line, self.ch + delta)


class BufferAccessor(Protocol):
    """What the engine needs from a host editor buffer."""

    def get_range(self, start: EditorPosition, end: EditorPosition) -> str:
        ...

    def replace_range(self, text: str, start: EditorPosition, end: EditorPosition) -> None:
        ...

    def get_line(self, line: int) -> str:
        ...

    def line_count(self) -> int:
        ...


class TextBuffer:
    """
    Plain in-memory buffer implementing BufferAccessor.

    Positions are clamped to the document the way editor buffers clamp them:
    a negative column reads from the start of the line, a column past the end
    reads to the end of the line.
    """

    def __init__(self, text: str = ""):
        self._lines: List[str] = text.split("\n")

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    def line_count(self) -> int:
        return len(self._lines)

    def get_line(self, line: int) -> str:
        return self._lines[line]

    def end_position(self) -> EditorPosition:
        last = len(self._lines) - 1
        return EditorPosition(last, len(self._lines[last]))

    def clamp(self, pos: EditorPosition) -> EditorPosition:
        """Clamp a position into the buffer."""
        line = min(max(pos.line, 0), len(self._lines) - 1)
        ch = min(max(pos.ch, 0), len(self._lines[line]))
        return EditorPosition(line, ch)

    def _offset(self, pos: EditorPosition) -> int:
        pos = self.clamp(pos)
        return sum(len(l) + 1 for l in self._lines[:pos.line]) + pos.ch

    def get_range(self, start: EditorPosition, end: EditorPosition) -> str:
        """Text between two positions; empty when start lies after end."""
        begin, finish = self._offset(start), self._offset(end)
        if begin >= finish:
            return ""
        return self.text[begin:finish]

    def replace_range(self, text: str, start: EditorPosition, end: EditorPosition) -> None:
        begin, finish = self._offset(start), self._offset(end)
        if begin > finish:
            begin, finish = finish, begin
        full = self.text
        self._lines = (full[:begin] + text + full[finish:]).split("\n")

    def insert(self, text: str, pos: EditorPosition) -> EditorPosition:
        """Insert text at pos and return the position right after it."""
        pos = self.clamp(pos)
        self.replace_range(text, pos, pos)
        pieces = text.split("\n")
        if len(pieces) == 1:
            return EditorPosition(pos.line, pos.ch + len(text))
        return EditorPosition(pos.line + len(pieces) - 1, len(pieces[-1]))
