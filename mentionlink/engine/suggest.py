"""
Mention suggestion facade.

Host adapters drive this object: call on_trigger on every cursor or content
change, show get_candidates() rendered through render_candidate while a
window is open, and await commit() with the chosen entry. The host owns its
popup lifecycle (open, close, focus).
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from loguru import logger

from .buffer import BufferAccessor, EditorPosition
from .candidates import build_candidates
from .config import LinkingSettings
from .insertion import LinkInserter
from .links import LinkFormatter
from .notifications import LogNotifier, Notifier
from .ranker import RankedCandidate, rank
from .syntax import MarkdownSyntaxClassifier, SyntaxClassifier
from .trigger import TriggerStateMachine, TriggerWindow
from .vault import Vault


@dataclass(frozen=True)
class SuggestContext:
    """Everything get_candidates and commit need from the last trigger."""
    window: TriggerWindow
    buffer: BufferAccessor
    settings: LinkingSettings
    symbol: str
    source_path: str = ""

    @property
    def query(self) -> str:
        return self.window.query


@dataclass(frozen=True)
class DisplayFragment:
    """Host-agnostic rendering of one suggestion row."""
    title: str
    highlights: Tuple[int, ...]
    path: str
    has_alias: bool
    is_create_new: bool


class MentionSuggest:
    """Trigger detection, candidate ranking and link insertion behind one interface."""

    name = "@ Symbol Linking Suggest"

    def __init__(
        self,
        vault: Vault,
        settings: Optional[LinkingSettings] = None,
        syntax: Optional[SyntaxClassifier] = None,
        formatter: Optional[LinkFormatter] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.vault = vault
        self.settings = settings or LinkingSettings()
        self.notifier = notifier or LogNotifier()
        self.state_machine = TriggerStateMachine(syntax or MarkdownSyntaxClassifier())
        self.inserter = LinkInserter(vault, self.notifier, self.state_machine, formatter)
        self.context: Optional[SuggestContext] = None

    @property
    def is_open(self) -> bool:
        return self.state_machine.is_open

    def on_trigger(
        self,
        cursor: EditorPosition,
        buffer: BufferAccessor,
        settings: Optional[LinkingSettings] = None,
        source_path: str = "",
    ) -> Optional[TriggerWindow]:
        """Evaluate one edit; returns the open window or None."""
        settings = settings or self.settings
        window = self.state_machine.evaluate(cursor, buffer, settings)
        if window is None:
            self.context = None
            return None

        self.context = SuggestContext(
            window=window,
            buffer=buffer,
            settings=settings,
            symbol=self.state_machine.active_symbol,
            source_path=source_path,
        )
        return window

    def get_candidates(self, context: Optional[SuggestContext] = None) -> List[RankedCandidate]:
        """Freshly enumerate and rank candidates for the open window."""
        context = context or self.context
        if context is None:
            return []
        candidates = build_candidates(self.vault.list_documents(), context.settings, context.symbol)
        return rank(candidates, context.query, context.settings)

    def render_candidate(self, ranked: RankedCandidate) -> DisplayFragment:
        """
        Title, highlighted positions and path for one row.

        An alias that matched the query is shown highlighted; an alias that did
        not is still preferred over the file name.
        """
        candidate = ranked.candidate
        alias_match = ranked.match_for("alias")
        name_match = ranked.match_for("display_name")

        if alias_match is not None:
            title, highlights = alias_match.text, alias_match.indices
        elif candidate.alias:
            title, highlights = candidate.alias, ()
        elif name_match is not None:
            title, highlights = name_match.text, name_match.indices
        else:
            title, highlights = candidate.display_name or "", ()

        path = candidate.target_path
        extension = f".{self.settings.default_extension}"
        if path.endswith(extension):
            path = path[:-len(extension)]

        return DisplayFragment(
            title=title,
            highlights=tuple(highlights),
            path=path,
            has_alias=bool(candidate.alias) and not candidate.is_create_new,
            is_create_new=candidate.is_create_new,
        )

    async def commit(self, ranked: RankedCandidate, context: Optional[SuggestContext] = None) -> str:
        """Insert the link for the chosen entry and close the session."""
        context = context or self.context
        if context is None:
            raise RuntimeError("No open mention to commit")

        link_text = await self.inserter.commit(
            ranked.candidate,
            context.window,
            context.buffer,
            context.settings,
            source_path=context.source_path,
            symbol=context.symbol,
        )
        self.context = None
        return link_text

    def close(self) -> None:
        """Cancel the open mention, if any."""
        logger.debug("Mention cancelled")
        self.state_machine.close()
        self.context = None
