"""Candidate index: turns vault documents into selectable link targets."""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from .config import LinkingSettings, ScopeRule
from .vault import Document


CREATE_NEW_LABEL = "Create new note"


@dataclass
class Candidate:
    """One selectable link target: a document, one of its aliases, or create-new."""
    display_name: str
    target_path: str
    alias: Optional[str] = None
    is_create_new: bool = False
    query: Optional[str] = None  # raw query, create-new only


def _split_aliases(value: Any) -> List[str]:
    """Normalise an alias/aliases frontmatter value to a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        items = [value]
    return [str(item).strip() for item in items if item is not None and str(item).strip()]


def document_aliases(document: Document) -> List[str]:
    """
    Aliases declared by a document.

    A single `alias` string is taken as is; `aliases` may be a list or a
    comma-separated string.
    """
    meta = document.metadata or {}
    alias = meta.get("alias")
    if isinstance(alias, str):
        return [alias.strip()] if alias.strip() else []
    if alias:
        return _split_aliases(alias)
    return _split_aliases(meta.get("aliases"))


def _matching_rule(document: Document, rules: List[ScopeRule]) -> Optional[ScopeRule]:
    for rule in rules:
        if rule.contains(document.path):
            return rule
    return None


def build_candidates(
    documents: Iterable[Document],
    settings: LinkingSettings,
    active_symbol: str,
) -> List[Candidate]:
    """
    Enumerate candidates for the active trigger symbol.

    Only rules with a folder and the active symbol restrict the corpus; when
    none exist every document is linkable. Alias candidates come first for
    each document, followed by the bare-name candidate.
    """
    rules = [
        rule for rule in settings.scope_rules
        if not rule.is_inert and rule.trigger == active_symbol
    ]

    candidates: List[Candidate] = []
    for document in documents:
        full_path = False
        if rules:
            rule = _matching_rule(document, rules)
            if rule is None:
                continue
            full_path = rule.full_path

        name = document.path_without_extension if full_path else document.basename
        for alias in document_aliases(document):
            candidates.append(Candidate(display_name=name, target_path=document.path, alias=alias))
        candidates.append(Candidate(display_name=name, target_path=document.path))

    return candidates
