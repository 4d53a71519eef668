"""
Trigger state machine.

Decides, on every cursor or content change, whether a mention query window
opens, continues or closes. States are Closed (no session) and
Open(session); only one session exists at a time.
"""

import re
from dataclasses import dataclass
from typing import Optional

import regex
from loguru import logger

from .buffer import BufferAccessor, EditorPosition
from .config import DEFAULT_SYMBOL, LinkingSettings
from .syntax import SyntaxClassifier


CLOSING_CHARACTERS = ("\n", "\t")


ACCEPTED_PATTERNS = [
    # Chinese (CJK unified ideographs, Bopomofo)
    re.compile(r"[\u4e00-\u9fff\u3100-\u312f]"),
    # Emoji
    regex.compile(r"\p{Extended_Pictographic}"),
    # CJK punctuation, math operators, fullwidth forms
    re.compile(r"[\u3000-\u303f\u2200-\u22ff\uff00-\uffef]"),
    # Japanese
    re.compile(r"[\u3040-\u309f\u30a0-\u30ff]"),
    # Korean
    re.compile(r"[\uac00-\ud7af\u1100-\u11ff]"),
    # Other valid filename characters
    re.compile(r"""[a-z0-9$\-_!%"'.,*&();{}+=~`?]""", re.IGNORECASE),
]


def has_accepted_character(query: str) -> bool:
    """True when the query holds at least one character a note name may use."""
    return any(pattern.search(query) for pattern in ACCEPTED_PATTERNS)


@dataclass(frozen=True)
class TriggerSession:
    """The open mention: where its symbol starts and which symbol opened it."""
    anchor: EditorPosition
    active_symbol: str
    symbol_length: int

    @property
    def query_start(self) -> EditorPosition:
        return self.anchor.shift(self.symbol_length)


@dataclass(frozen=True)
class TriggerWindow:
    """What on_trigger hands to the host: the replaceable range and the query."""
    start: EditorPosition
    end: EditorPosition
    query: str


class TriggerStateMachine:
    """Owns the single optional TriggerSession."""

    def __init__(self, syntax: Optional[SyntaxClassifier] = None):
        self.syntax = syntax
        self.session: Optional[TriggerSession] = None
        self._last_symbol = DEFAULT_SYMBOL

    @property
    def is_open(self) -> bool:
        return self.session is not None

    @property
    def active_symbol(self) -> str:
        """Symbol of the open session, or of the last one after it closed."""
        if self.session is not None:
            return self.session.active_symbol
        return self._last_symbol

    def close(self) -> None:
        """Close the session. Closing a closed machine does nothing."""
        if self.session is not None:
            logger.debug(f"Closing {self.session.active_symbol} session at {self.session.anchor}")
        self.session = None

    def _close(self, reason: str) -> None:
        logger.debug(f"Session closed: {reason}")
        self.close()

    def _in_code(self, cursor: EditorPosition, buffer: BufferAccessor) -> bool:
        if self.syntax is None:
            return False
        return self.syntax.is_in_code(cursor, buffer)

    def evaluate(
        self,
        cursor: EditorPosition,
        buffer: BufferAccessor,
        settings: LinkingSettings,
    ) -> Optional[TriggerWindow]:
        """
        Run one transition for a cursor/content change.

        Returns the window to show suggestions for, or None when the machine
        is (or has just become) closed.
        """
        symbols = settings.trigger_symbols
        max_length = max(len(symbol) for symbol in symbols)

        caught = buffer.get_range(cursor.shift(-max_length), cursor)
        typed = caught[-1] if caught else "\n"

        if self.session is not None and typed in CLOSING_CHARACTERS:
            self._close("newline or tab")
            return None

        # Backticks may be part of a note name once a session is open
        if self.session is None and self._in_code(cursor, buffer):
            return None

        # Longest first so "@" never shadows "@@"
        matched = next((s for s in symbols if caught.endswith(s)), None)

        if matched is not None:
            anchor = cursor.shift(-len(matched))
            active = matched
            # A symbol typed later inside the query re-anchors but keeps the
            # session's symbol; one that swallows the anchor ("@" -> "@@") replaces it
            if self.session is not None and anchor > self.session.anchor:
                active = self.session.active_symbol
            self.session = TriggerSession(
                anchor=anchor,
                active_symbol=active,
                symbol_length=len(matched),
            )
            self._last_symbol = active
            logger.debug(f"Session opened for {active!r} at {self.session.anchor}")
            return TriggerWindow(start=self.session.anchor, end=cursor, query="")

        if self.session is None:
            return None

        # One character of lookahead so the boundary just typed is checked too
        query = buffer.get_range(self.session.query_start, cursor.shift(1))

        if query.count(" ") > settings.leave_popup_open_for_x_spaces:
            self._close("space budget exceeded")
            return None
        if query.startswith(" "):
            self._close("query starts with a space")
            return None
        if not query or not has_accepted_character(query):
            self._close("no valid name characters")
            return None

        return TriggerWindow(start=self.session.anchor, end=cursor, query=query)
