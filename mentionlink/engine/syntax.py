"""Syntax classification: is the cursor inside inline or fenced code?"""

import re
from typing import List, Optional, Protocol, Tuple

from .buffer import BufferAccessor, EditorPosition


class SyntaxClassifier(Protocol):
    """Host capability answering whether a cursor sits in a code region."""

    def is_in_code(self, cursor: EditorPosition, buffer: BufferAccessor) -> bool:
        ...


FENCE_PATTERN = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})")
BACKTICK_RUN = re.compile(r"`+")


def _fence_open(line: str) -> Optional[Tuple[str, int]]:
    match = FENCE_PATTERN.match(line)
    if not match:
        return None
    fence = match.group("fence")
    # Backtick fences may not carry backticks in their info string
    if fence[0] == "`" and "`" in line[match.end():]:
        return None
    return fence[0], len(fence)


def _closes(line: str, fence: Tuple[str, int]) -> bool:
    char, length = fence
    stripped = line.strip()
    return (
        len(line) - len(line.lstrip(" ")) <= 3
        and len(stripped) >= length
        and stripped == char * len(stripped)
    )


def code_spans(line: str) -> List[Tuple[int, int]]:
    """
    Inline code spans of a line as (start, end) column pairs.

    A span opens with a run of backticks and closes with the next run of the
    same length; an unclosed run is literal text.
    """
    spans = []
    runs = [(m.start(), m.end()) for m in BACKTICK_RUN.finditer(line)]
    i = 0
    while i < len(runs):
        start, end = runs[i]
        width = end - start
        for j in range(i + 1, len(runs)):
            if runs[j][1] - runs[j][0] == width:
                spans.append((start, runs[j][1]))
                i = j
                break
        i += 1
    return spans


class MarkdownSyntaxClassifier:
    """
    Line-based markdown classifier for plain text buffers.

    Fenced blocks (``` or ~~~, including their fence lines) and backtick code
    spans count as code. A cursor touching the outer edge of a span does not.
    """

    def in_fenced_block(self, cursor: EditorPosition, buffer: BufferAccessor) -> bool:
        fence = None
        for number in range(0, cursor.line + 1):
            line = buffer.get_line(number)
            if fence is None:
                fence = _fence_open(line)
                if fence is not None and number == cursor.line:
                    return True
            elif _closes(line, fence):
                if number == cursor.line:
                    return True
                fence = None
        return fence is not None

    def in_inline_code(self, cursor: EditorPosition, buffer: BufferAccessor) -> bool:
        line = buffer.get_line(cursor.line)
        return any(start < cursor.ch < end for start, end in code_spans(line))

    def is_in_code(self, cursor: EditorPosition, buffer: BufferAccessor) -> bool:
        if cursor.line >= buffer.line_count():
            return False
        return self.in_fenced_block(cursor, buffer) or self.in_inline_code(cursor, buffer)
