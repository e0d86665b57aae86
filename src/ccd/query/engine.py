"""Query evaluation against a loaded index.

A query is an ordered list of terms combined with OR. A term matches an
entry when it is a case-insensitive substring of the entry's path or of any
of its keywords. Keyword-only terms (written with a leading ``#``) never test
the path. Results keep index order (shallowest first); there is no scoring.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ccd.index.models import KEYWORD_PREFIX, Index, IndexEntry


@dataclass(frozen=True, slots=True)
class Term:
    text: str
    keyword_only: bool = False

    def __str__(self) -> str:
        return f"{KEYWORD_PREFIX}{self.text}" if self.keyword_only else self.text

    def matches(self, entry: IndexEntry) -> bool:
        if not self.keyword_only and self.text in entry.path.lower():
            return True
        return any(self.text in keyword for keyword in entry.keywords)


def parse_term(raw: str, *, keyword_only: bool = False) -> Term:
    """Normalize one raw term; a leading '#' marks it keyword-only.

    Raises:
        ValueError: the term is empty once the marker and whitespace are removed.
    """
    text = raw.strip()
    if text.startswith(KEYWORD_PREFIX):
        keyword_only = True
        text = text[len(KEYWORD_PREFIX) :].strip()
    if not text:
        raise ValueError(f"Empty search term: {raw!r}")
    return Term(text=text.lower(), keyword_only=keyword_only)


def parse_terms(raw_terms: Iterable[str], keyword_terms: Iterable[str] = ()) -> tuple[Term, ...]:
    """Parse free terms followed by explicitly keyword-only terms.

    Raises:
        ValueError: no terms were given, or one of them is empty.
    """
    terms = [parse_term(t) for t in raw_terms]
    terms.extend(parse_term(t, keyword_only=True) for t in keyword_terms)
    if not terms:
        raise ValueError("At least one search term is required")
    return tuple(terms)


def query(index: Index, terms: Sequence[Term]) -> tuple[IndexEntry, ...]:
    """Entries matching at least one term, in index order."""
    return tuple(entry for entry in index if any(term.matches(entry) for term in terms))
