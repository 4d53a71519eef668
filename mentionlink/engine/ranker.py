"""Fuzzy ranking of link candidates against the typed query."""

import posixpath
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from loguru import logger
from rapidfuzz import fuzz

from .candidates import CREATE_NEW_LABEL, Candidate
from .config import LinkingSettings


@dataclass
class KeyMatch:
    """Match of the query against one candidate key (alias or display name)."""
    key: str  # "alias" | "display_name"
    text: str
    score: float
    indices: Tuple[int, ...]


@dataclass
class RankedCandidate:
    """A candidate with its ranking details. Score is None for the no-query listing."""
    candidate: Candidate
    score: Optional[float] = None
    matches: List[KeyMatch] = field(default_factory=list)

    def match_for(self, key: str) -> Optional[KeyMatch]:
        for match in self.matches:
            if match.key == key:
                return match
        return None


def _subsequence(term: str, text: str) -> Optional[List[int]]:
    """Indices of term's characters found in order in text, or None."""
    indices = []
    position = 0
    for char in term:
        found = text.find(char, position)
        if found == -1:
            return None
        indices.append(found)
        position = found + 1
    return indices


def match_key(query: str, text: str) -> Optional[Tuple[float, Tuple[int, ...]]]:
    """
    Score text against query.

    Every whitespace-separated term of the query must occur in the text as a
    case-insensitive subsequence; the match is then scored with WRatio.
    """
    terms = query.lower().split()
    if not terms or not text:
        return None

    lowered = text.lower()
    indices = set()
    for term in terms:
        found = _subsequence(term, lowered)
        if found is None:
            return None
        indices.update(found)

    # A subsequence hit is always a positive match, even when WRatio
    # scores punctuation-only or emoji queries as 0
    score = max(fuzz.WRatio(query.lower(), lowered), 1.0)
    return score, tuple(sorted(indices))


def _score_candidate(candidate: Candidate, query: str) -> Optional[RankedCandidate]:
    matches = []
    keys = (("alias", candidate.alias), ("display_name", candidate.display_name))
    for key, text in keys:
        if not text:
            continue
        result = match_key(query, text)
        if result is not None:
            score, indices = result
            matches.append(KeyMatch(key=key, text=text, score=score, indices=indices))

    if not matches:
        return None
    # max() keeps the first of equal scores, so the alias wins ties
    best = max(matches, key=lambda m: m.score)
    return RankedCandidate(candidate=candidate, score=best.score, matches=matches)


def create_new_candidate(query: str, settings: LinkingSettings) -> Candidate:
    """Synthetic candidate offering to create a note named after the query."""
    directory = settings.add_new_note_directory.strip()
    separator = "/" if directory else ""
    target = f"{directory}{separator}{query.strip()}.{settings.default_extension}"
    return Candidate(
        display_name=CREATE_NEW_LABEL,
        target_path=posixpath.normpath(target) if directory else target,
        is_create_new=True,
        query=query,
    )


def rank(
    candidates: Sequence[Candidate],
    query: str,
    settings: LinkingSettings,
) -> List[RankedCandidate]:
    """
    Order candidates for display.

    Without a query everything is listed in reverse enumeration order, which
    puts the end of the alphabetical listing first. With a query only fuzzy
    matches are kept, best first; equal scores keep enumeration order.
    """
    if not query:
        results = [RankedCandidate(candidate=c) for c in reversed(candidates)]
    else:
        scored = [r for r in (_score_candidate(c, query) for c in candidates) if r is not None]
        results = sorted(scored, key=lambda r: r.score, reverse=True)

    if settings.show_add_new_note and query:
        has_existing = any(
            r.candidate.display_name.lower() == query.lower()
            for r in results
        )
        if not has_existing:
            results = [r for r in results if not r.candidate.is_create_new]
            results.append(RankedCandidate(candidate=create_new_candidate(query, settings)))

    logger.debug(f"Ranked {len(results)} of {len(candidates)} candidates for {query!r}")
    return results
