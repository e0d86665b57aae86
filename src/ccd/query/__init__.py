"""Query module - term matching and disambiguation."""

from ccd.query.engine import Term, parse_term, parse_terms, query
from ccd.query.selector import (
    Ambiguous,
    Direct,
    FirstMatchSelector,
    FzfSelector,
    NoMatch,
    PromptSelector,
    Selector,
    choose,
    detect_selector,
    disambiguate,
)

__all__ = [
    "Ambiguous",
    "Direct",
    "FirstMatchSelector",
    "FzfSelector",
    "NoMatch",
    "PromptSelector",
    "Selector",
    "Term",
    "choose",
    "detect_selector",
    "disambiguate",
    "parse_term",
    "parse_terms",
    "query",
]
