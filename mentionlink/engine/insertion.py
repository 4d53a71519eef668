"""Selection/insertion engine: turns a chosen candidate into a link in the buffer."""

import posixpath
from typing import Optional

from loguru import logger

from .buffer import BufferAccessor, EditorPosition
from .candidates import Candidate
from .config import LinkingSettings
from .links import LinkFormatter, ObsidianLinkFormatter
from .notifications import Notifier
from .templates import replace_new_file_vars
from .trigger import TriggerStateMachine, TriggerWindow
from .vault import Document, Vault


class LinkInserter:
    """
    Commits a selection.

    Commit path:
    1. For create-new candidates, render the template and create the note
       (the only awaited steps; a failure leaves the buffer untouched)
    2. Resolve the target document and build the link label
    3. Rewrite the buffer from the trigger symbol to the window end
    4. Close the trigger session
    """

    def __init__(
        self,
        vault: Vault,
        notifier: Notifier,
        state_machine: TriggerStateMachine,
        formatter: Optional[LinkFormatter] = None,
    ):
        self.vault = vault
        self.formatter = formatter
        self.notifier = notifier
        self.state_machine = state_machine

    async def _new_note_contents(self, candidate: Candidate, settings: LinkingSettings) -> str:
        if not settings.add_new_note_template_file:
            return ""
        template_path = f"{settings.add_new_note_template_file}.{settings.default_extension}"
        try:
            template = await self.vault.read(template_path)
        except OSError as e:
            self.notifier.notify(f"Unable to read template file at path: {template_path}.", timeout=0)
            logger.error(f"Failed to read template {template_path}: {e}")
            raise
        title = posixpath.splitext(posixpath.basename(candidate.target_path))[0]
        return replace_new_file_vars(template or "", title, settings)

    async def create_note(self, candidate: Candidate, settings: LinkingSettings) -> Document:
        """Create the note behind a create-new candidate and relabel it with the query."""
        contents = await self._new_note_contents(candidate, settings)
        try:
            document = await self.vault.create(candidate.target_path, contents)
        except OSError as e:
            self.notifier.notify(
                f"Unable to create new note at path: {candidate.target_path}.",
                timeout=0,
            )
            logger.error(f"Failed to create {candidate.target_path}: {e}")
            raise

        # The link label shows what was typed, not "Create new note"
        candidate.alias = candidate.query
        return document

    def _resolve(self, candidate: Candidate) -> Document:
        document = self.vault.get_document(candidate.target_path)
        if document is None:
            logger.warning(f"Link target not found in vault, linking by path: {candidate.target_path}")
            document = Document(path=candidate.target_path)
        return document

    def link_label(self, candidate: Candidate, symbol: str, settings: LinkingSettings) -> str:
        label = candidate.alias or candidate.display_name
        if settings.include_symbol:
            label = f"{symbol}{label}"
        return label

    async def commit(
        self,
        candidate: Candidate,
        window: TriggerWindow,
        buffer: BufferAccessor,
        settings: LinkingSettings,
        source_path: str = "",
        symbol: Optional[str] = None,
    ) -> str:
        """Insert the link for candidate over window and return the link text."""
        symbol = symbol or self.state_machine.active_symbol

        line = buffer.get_range(EditorPosition(window.start.line, 0), window.end)

        document = None
        if candidate.is_create_new:
            document = await self.create_note(candidate, settings)
        if document is None:
            document = self._resolve(candidate)

        label = self.link_label(candidate, symbol, settings)
        formatter = self.formatter or ObsidianLinkFormatter(self.vault, settings)
        link_text = formatter.generate_markdown_link(document, source_path, label)
        if "\n" in link_text:
            link_text = link_text.replace("\n", "")

        # Re-scan for the symbol; the line may have changed since the anchor was set
        start_ch = line.rfind(symbol)
        if start_ch == -1:
            start_ch = window.start.ch
        buffer.replace_range(link_text, EditorPosition(window.start.line, start_ch), window.end)
        logger.info(f"Inserted link {link_text!r} for {candidate.target_path}")

        self.state_machine.close()
        return link_text
