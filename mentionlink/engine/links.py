"""Link markup generation."""

import posixpath
from typing import Optional, Protocol
from urllib.parse import quote

from .config import LinkingSettings
from .vault import Document, Vault


class LinkFormatter(Protocol):
    """Host facility producing link markup for a target document."""

    def generate_markdown_link(self, document: Document, source_path: str, alias: Optional[str] = None) -> str:
        ...


class ObsidianLinkFormatter:
    """
    Produces links the way Obsidian writes them.

    `link_style` picks `[[wikilinks]]` or `[markdown](links)`; `link_path_format`
    picks the shortest unambiguous name, a path relative to the source note,
    or the absolute vault path.
    """

    def __init__(self, vault: Vault, settings: LinkingSettings):
        self.vault = vault
        self.settings = settings

    def _is_unique_name(self, document: Document) -> bool:
        name = document.basename.lower()
        matches = [d for d in self.vault.list_documents() if d.basename.lower() == name]
        return len(matches) <= 1

    def link_path(self, document: Document, source_path: str) -> str:
        """Path of the target as written into the link, extension included."""
        mode = self.settings.link_path_format
        if mode == "relative":
            source_dir = posixpath.dirname(source_path)
            return posixpath.relpath(document.path, source_dir or ".")
        if mode == "shortest" and self._is_unique_name(document):
            return posixpath.basename(document.path)
        return document.path

    def generate_markdown_link(self, document: Document, source_path: str, alias: Optional[str] = None) -> str:
        path = self.link_path(document, source_path)

        if self.settings.link_style == "markdown":
            label = alias if alias is not None else document.basename
            return f"[{label}]({quote(path, safe='/.-_~()!$&*+,;=:@')})"

        target = path
        if document.extension == "md" and target.endswith(".md"):
            target = target[:-3]
        if alias and alias != target:
            return f"[[{target}|{alias}]]"
        return f"[[{target}]]"
